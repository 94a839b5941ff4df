"""
Registration table of the available JDK installers.
"""

from typing import Callable, Dict, List

from jdkman.config import DiscoveryConfig
from jdkman.constants import INSTALLER_FOOJAY, INSTALLER_METADATA
from jdkman.exceptions import ProviderConfigurationError
from jdkman.installers.foojay import FoojayJdkInstaller
from jdkman.installers.metadata import MetadataJdkInstaller
from jdkman.jdk.interfaces import JdkInstaller
from jdkman.jdk.remote import RemoteAccess
from jdkman.providers.base import FoldersJdkProvider

InstallerFactory = Callable[[FoldersJdkProvider, DiscoveryConfig], JdkInstaller]


class InstallerRegistry:
    """Maps installer names to the functions that create them."""

    def __init__(self) -> None:
        self._factories: Dict[str, InstallerFactory] = {}

    def register(self, name: str, factory: InstallerFactory) -> None:
        self._factories[name.lower()] = factory

    def names(self) -> List[str]:
        return sorted(self._factories)

    def create(
        self, name: str, provider: FoldersJdkProvider, config: DiscoveryConfig
    ) -> JdkInstaller:
        """
        Create the installer registered under `name` for `provider`.

        Raises:
            ProviderConfigurationError: If no installer has that name.
        """
        factory = self._factories.get(name.lower())
        if factory is None:
            raise ProviderConfigurationError(
                f"Unknown JDK installer: {name}",
                details=f"available installers: {', '.join(self.names())}",
            )
        return factory(provider, config)


def _create_foojay(provider: FoldersJdkProvider, config: DiscoveryConfig) -> JdkInstaller:
    return FoojayJdkInstaller(
        provider,
        RemoteAccess(config.resolved_cache_path),
        distro=config.properties.get("distro"),
    )


def _create_metadata(
    provider: FoldersJdkProvider, config: DiscoveryConfig
) -> JdkInstaller:
    return MetadataJdkInstaller(
        provider,
        RemoteAccess(config.resolved_cache_path),
        distro=config.properties.get("distro"),
        jvm_impl=config.properties.get("impl"),
    )


def default_installer_registry() -> InstallerRegistry:
    registry = InstallerRegistry()
    registry.register(INSTALLER_FOOJAY, _create_foojay)
    registry.register(INSTALLER_METADATA, _create_metadata)
    return registry
