"""
Registration table of the available JDK providers.

Providers are requested with specs of the form ``name;key=value;key2=value2``;
the properties end up in a copy of the `DiscoveryConfig` handed to the
provider's factory. Lists of specs are comma separated.
"""

from typing import Callable, Dict, List, Optional

from jdkman.config import DiscoveryConfig, split_names
from jdkman.constants import (
    BASIC_PROVIDER_NAMES,
    DEFAULT_INSTALLER,
    DEFAULT_LINK_NAME,
    MINIMAL_PROVIDER_NAMES,
    PROVIDER_CURRENT,
    PROVIDER_DEFAULT,
    PROVIDER_EXTERNAL,
    PROVIDER_JAVAHOME,
    PROVIDER_LINKED,
    PROVIDER_LINUX,
    PROVIDER_MANAGED,
    PROVIDER_MISE,
    PROVIDER_MULTIHOME,
    PROVIDER_PATH,
    PROVIDER_SCOOP,
    PROVIDER_SDKMAN,
)
from jdkman.exceptions import ProviderConfigurationError
from jdkman.installers.registry import InstallerRegistry, default_installer_registry
from jdkman.jdk.interfaces import JdkProvider
from jdkman.log_utils import logger
from jdkman.providers.env import (
    CurrentJdkProvider,
    JavaHomeJdkProvider,
    MultiHomeJdkProvider,
    PathJdkProvider,
)
from jdkman.providers.identity import DefaultJdkProvider, LinkedJdkProvider
from jdkman.providers.managed import ManagedJdkProvider
from jdkman.providers.platform import (
    ExternalJdkProvider,
    LinuxJdkProvider,
    MiseJdkProvider,
    ScoopJdkProvider,
    SdkmanJdkProvider,
)

ProviderFactory = Callable[[DiscoveryConfig], JdkProvider]


def parse_properties(spec: str) -> Dict[str, str]:
    """Parse the ``;key=value`` part of a provider spec, ignoring malformed pairs."""
    properties: Dict[str, str] = {}
    for part in spec.split(";")[1:]:
        key, sep, value = part.partition("=")
        if sep and key.strip():
            properties[key.strip()] = value.strip()
        elif part.strip():
            logger.debug(f"Ignoring malformed provider property: {part}")
    return properties


class ProviderRegistry:
    """
    Maps provider names to the functions that create them.

    Parameters:
        installers (Optional[InstallerRegistry]): Installers available to providers that can update.
    """

    def __init__(self, installers: Optional[InstallerRegistry] = None):
        self._factories: Dict[str, ProviderFactory] = {}
        self.installers = installers or default_installer_registry()

    def register(self, name: str, factory: ProviderFactory) -> None:
        self._factories[name.lower()] = factory

    def names(self) -> List[str]:
        return sorted(self._factories)

    def minimal_names(self) -> List[str]:
        return [n for n in MINIMAL_PROVIDER_NAMES if n in self._factories]

    def basic_names(self) -> List[str]:
        return [n for n in BASIC_PROVIDER_NAMES if n in self._factories]

    def all_names(self) -> List[str]:
        basic = self.basic_names()
        return basic + [n for n in self.names() if n not in basic]

    def by_name(self, name: str, config: DiscoveryConfig) -> JdkProvider:
        """
        Create the provider registered under `name`.

        Raises:
            ProviderConfigurationError: If no provider has that name.
        """
        factory = self._factories.get(name.lower())
        if factory is None:
            raise ProviderConfigurationError(
                f"Unknown JDK provider: {name}",
                details=f"available providers: {', '.join(self.all_names())}",
            )
        return factory(config)

    def parse_name(self, spec: str, config: DiscoveryConfig) -> JdkProvider:
        """Create a provider from a ``name;key=value`` spec."""
        name = spec.split(";", 1)[0].strip()
        provider_config = config.copy()
        provider_config.properties.update(parse_properties(spec))
        return self.by_name(name, provider_config)

    def parse_names(
        self, specs: Optional[str], config: DiscoveryConfig
    ) -> List[JdkProvider]:
        """
        Create the providers for a comma separated list of specs.

        When `specs` is empty all registered providers are created. Providers that
        can't be used on this system are left out.

        Raises:
            ProviderConfigurationError: If a spec names an unknown provider.
        """
        names = split_names(specs) or self.all_names()
        providers: List[JdkProvider] = []
        for spec in names:
            provider = self.parse_name(spec, config)
            if not provider.can_use():
                logger.debug(f"Skipping provider {provider.name}, not usable here")
                continue
            providers.append(provider)
        return providers


def _create_default(config: DiscoveryConfig) -> JdkProvider:
    link = config.properties.get("link")
    if link:
        return DefaultJdkProvider(link)
    return DefaultJdkProvider(config.install_path / DEFAULT_LINK_NAME)


def _create_linked(config: DiscoveryConfig) -> JdkProvider:
    return LinkedJdkProvider(config.install_path)


def _managed_factory(installers: InstallerRegistry) -> ProviderFactory:
    def _create_managed(config: DiscoveryConfig) -> JdkProvider:
        provider = ManagedJdkProvider(config.install_path)
        installer_name = config.properties.get("installer") or DEFAULT_INSTALLER
        return provider.use_installer(
            installers.create(installer_name, provider, config)
        )

    return _create_managed


def default_registry(installers: Optional[InstallerRegistry] = None) -> ProviderRegistry:
    """Build the registry of all providers jdkman ships with."""
    registry = ProviderRegistry(installers)
    registry.register(PROVIDER_CURRENT, lambda config: CurrentJdkProvider())
    registry.register(PROVIDER_DEFAULT, _create_default)
    registry.register(PROVIDER_JAVAHOME, lambda config: JavaHomeJdkProvider())
    registry.register(PROVIDER_PATH, lambda config: PathJdkProvider())
    registry.register(PROVIDER_LINKED, _create_linked)
    registry.register(PROVIDER_MANAGED, _managed_factory(registry.installers))
    registry.register(PROVIDER_MULTIHOME, lambda config: MultiHomeJdkProvider())
    registry.register(PROVIDER_LINUX, lambda config: LinuxJdkProvider())
    registry.register(PROVIDER_SDKMAN, lambda config: SdkmanJdkProvider())
    registry.register(PROVIDER_SCOOP, lambda config: ScoopJdkProvider())
    registry.register(PROVIDER_MISE, lambda config: MiseJdkProvider())
    registry.register(PROVIDER_EXTERNAL, lambda config: ExternalJdkProvider())
    return registry
