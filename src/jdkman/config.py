"""
Configuration for jdkman.

Resolves the default folders (honoring the ``JDKMAN_JDKS_DIR`` and
``JDKMAN_CACHE_DIR`` environment variables), loads the optional YAML settings
file from the platform config folder and carries the per-provider discovery
configuration.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import platformdirs
import yaml

from jdkman.constants import (
    APP_NAME,
    CACHE_DIR_ENV_VAR,
    CONFIG_FILE_NAME,
    DEFAULT_JAVA_VERSION,
    JDKS_DIR_ENV_VAR,
    JDKS_DIR_NAME,
)
from jdkman.exceptions import ConfigFileError, ConfigurationError
from jdkman.log_utils import logger


def get_config_file() -> Path:
    return Path(platformdirs.user_config_dir(APP_NAME)) / CONFIG_FILE_NAME


def get_default_install_path() -> Path:
    env_dir = os.environ.get(JDKS_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir)
    return Path(platformdirs.user_data_dir(APP_NAME)) / JDKS_DIR_NAME


def get_default_cache_path() -> Path:
    env_dir = os.environ.get(CACHE_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir)
    return Path(platformdirs.user_cache_dir(APP_NAME))


@dataclass
class DiscoveryConfig:
    """Configuration handed to provider and installer factories."""

    install_path: Path
    """Folder where managed JDKs and default links live"""

    cache_path: Optional[Path] = None
    """Folder for cached catalog responses and downloads"""

    properties: Dict[str, str] = field(default_factory=dict)
    """Provider specific properties given as `name;key=value` in provider specs"""

    def __post_init__(self) -> None:
        self.install_path = Path(self.install_path)
        if self.cache_path is not None:
            self.cache_path = Path(self.cache_path)
        self.properties = dict(self.properties or {})

    @property
    def resolved_cache_path(self) -> Path:
        return self.cache_path if self.cache_path is not None else get_default_cache_path()

    def copy(self) -> "DiscoveryConfig":
        return DiscoveryConfig(self.install_path, self.cache_path, dict(self.properties))


@dataclass
class Settings:
    """Settings read from the YAML config file, overridable from the command line."""

    providers: Optional[str] = None
    """Comma separated provider specs, or None for all providers"""

    default_java_version: int = DEFAULT_JAVA_VERSION
    """Major version used when nothing better matches"""

    install_path: Optional[Path] = None
    cache_path: Optional[Path] = None
    log_level: Optional[str] = None
    log_dir: Optional[Path] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """
        Build settings from a parsed config mapping.

        Raises:
            ConfigurationError: If a value has the wrong type.
        """
        providers = data.get("providers")
        if isinstance(providers, (list, tuple)):
            providers = ",".join(str(p).strip() for p in providers)
        elif providers is not None and not isinstance(providers, str):
            raise ConfigurationError(
                "Invalid 'providers' setting", details=f"{providers!r}"
            )

        version = data.get("default_java_version", DEFAULT_JAVA_VERSION)
        try:
            version = int(version)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                "Invalid 'default_java_version' setting", details=f"{version!r}"
            ) from e

        return cls(
            providers=providers or None,
            default_java_version=version,
            install_path=_optional_path(data.get("install_path")),
            cache_path=_optional_path(data.get("cache_path")),
            log_level=data.get("log_level"),
            log_dir=_optional_path(data.get("log_dir")),
        )

    def discovery_config(self) -> DiscoveryConfig:
        return DiscoveryConfig(
            self.install_path or get_default_install_path(),
            self.cache_path or get_default_cache_path(),
        )


def _optional_path(value: Any) -> Optional[Path]:
    if value is None or value == "":
        return None
    return Path(os.path.expanduser(str(value)))


def load_config(config_path: Optional[Union[str, Path]] = None) -> Optional[Dict]:
    """
    Load the jdkman YAML configuration file.

    Parameters:
        config_path (Optional[Union[str, Path]]): File to load; defaults to `config.yaml` in the platform config folder.

    Returns:
        Optional[Dict]: The parsed configuration, or `None` if the file doesn't exist.

    Raises:
        ConfigFileError: If the file can't be read, isn't valid YAML or isn't a mapping.
    """
    path = Path(config_path) if config_path is not None else get_config_file()
    if not path.exists():
        logger.debug(f"No configuration file at {path}")
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(
            f"Unable to read configuration file {path}", details=str(e)
        ) from e
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigFileError(
            f"Configuration file {path} must contain a mapping",
            details=type(config).__name__,
        )
    logger.debug(f"Loaded configuration from {path}")
    return config


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    config = load_config(config_path)
    return Settings.from_mapping(config or {})


def split_names(names: Optional[str]) -> List[str]:
    """Split a comma separated list, dropping blanks."""
    if not names:
        return []
    return [n.strip() for n in names.split(",") if n.strip()]
