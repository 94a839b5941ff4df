"""
JDK Manager - Resolution and Lifecycle Coordination

This module implements the JdkManager class that resolves version requests and
ids against an ordered list of providers, installs JDKs on demand and keeps the
global and per-version default links pointing at installed JDKs.
"""

import os
from typing import List, Optional, Sequence

from jdkman.config import Settings
from jdkman.constants import DEFAULT_JAVA_VERSION, PROVIDER_CURRENT, PROVIDER_DEFAULT
from jdkman.exceptions import (
    InvalidInputError,
    JdkNotFoundError,
    ProviderConfigurationError,
    ResourceBusyError,
)
from jdkman.jdk.files import check_not_in_use, delete_path, same_file
from jdkman.jdk.interfaces import (
    AvailableJdk,
    Distro,
    InstalledJdk,
    Jdk,
    JdkProvider,
    ManagerCallback,
    Pathish,
    ProviderPredicate,
    all_providers,
    can_update,
    exact_version,
)
from jdkman.jdk.version import VersionToken
from jdkman.log_utils import logger
from jdkman.providers.env import CurrentJdkProvider
from jdkman.providers.identity import versioned_default_id
from jdkman.utils import is_windows


def _nearest_jdk(jdks: Sequence[InstalledJdk], major: int) -> Optional[InstalledJdk]:
    """Pick the smallest major version >= `major`, else the largest one below it."""
    newer = [j for j in jdks if j.major_version >= major]
    if newer:
        return min(newer, key=lambda j: j.major_version)
    older = [j for j in jdks if j.major_version <= major]
    if older:
        return max(older, key=lambda j: j.major_version)
    return None


class JdkManager(ManagerCallback):
    """
    Resolves, installs and uninstalls JDKs across an ordered list of providers.

    Provider order is the tie-break everywhere: the first provider with an
    acceptable match wins. The provider named ``default`` maintains the default
    links and is looked up by name.

    Parameters:
        providers (Sequence[JdkProvider]): The providers, in order of preference.
        default_java_version (int): Major version used when nothing better matches.

    Raises:
        ProviderConfigurationError: If `providers` is empty or the default version isn't positive.
    """

    def __init__(
        self,
        providers: Sequence[JdkProvider],
        default_java_version: int = DEFAULT_JAVA_VERSION,
    ):
        if not providers:
            raise ProviderConfigurationError(
                "No providers could be initialized. Aborting."
            )
        if default_java_version < 1:
            raise ProviderConfigurationError(
                "Default Java version must be a positive number",
                details=str(default_java_version),
            )
        self._providers: List[JdkProvider] = list(providers)
        self._default_java_version = default_java_version
        for provider in self._providers:
            provider.attach(self)
        self.default_provider: Optional[JdkProvider] = self.provider_by_name(
            PROVIDER_DEFAULT
        )
        logger.debug(
            f"Using providers: {', '.join(p.name for p in self._providers)}"
        )

    @classmethod
    def create(
        cls, settings: Optional[Settings] = None, registry=None
    ) -> "JdkManager":
        """
        Create a manager from settings, using every registered provider by default.

        Parameters:
            settings (Optional[Settings]): Provider list, default version and folders.
            registry (Optional[ProviderRegistry]): Registry to create providers from.
        """
        if registry is None:
            from jdkman.providers.registry import default_registry

            registry = default_registry()
        settings = settings or Settings()
        providers = registry.parse_names(
            settings.providers, settings.discovery_config()
        )
        return cls(providers, settings.default_java_version)

    @property
    def default_java_version(self) -> int:
        return self._default_java_version

    @property
    def providers(self) -> List[JdkProvider]:
        return list(self._providers)

    def provider_by_name(self, name: str) -> Optional[JdkProvider]:
        return next((p for p in self._providers if p.name == name), None)

    def _updatable_providers(
        self, provider_filter: ProviderPredicate = all_providers
    ) -> List[JdkProvider]:
        return [p for p in self._providers if can_update(p) and provider_filter(p)]

    # =========================================================================
    # Resolution
    # =========================================================================

    def get_or_install_jdk(
        self,
        version_or_id: Optional[str] = None,
        provider_filter: ProviderPredicate = all_providers,
    ) -> InstalledJdk:
        """
        Return an installed JDK for a version request or id, installing it if needed.

        Parameters:
            version_or_id (Optional[str]): ``N``, ``N+``, a JDK id, or `None` for any JDK.
            provider_filter (ProviderPredicate): Restricts the providers that are searched.

        Returns:
            InstalledJdk: The installed JDK.

        Raises:
            JdkNotFoundError: If nothing installed or installable matches.
            InstallError: If the matching JDK couldn't be installed.
        """
        jdk = self.get_jdk(version_or_id, provider_filter)
        if jdk is None:
            raise self._not_found(version_or_id)
        return self._ensure_installed(jdk)

    def get_jdk(
        self,
        version_or_id: Optional[str] = None,
        provider_filter: ProviderPredicate = all_providers,
    ) -> Optional[Jdk]:
        """Resolve a version request or id to an installed or available JDK, without installing."""
        if version_or_id:
            token = VersionToken.parse(version_or_id)
            if token is None:
                return self._get_jdk_by_id(version_or_id, provider_filter)
        else:
            token = VersionToken.any()
        return self._get_jdk_by_version(token.major, token.open, provider_filter)

    def get_installed_jdk(
        self,
        version_or_id: Optional[str] = None,
        provider_filter: ProviderPredicate = all_providers,
    ) -> Optional[InstalledJdk]:
        """Resolve a version request or id against installed JDKs only."""
        if version_or_id:
            token = VersionToken.parse(version_or_id)
            if token is None:
                return self._get_installed_by_id(version_or_id, provider_filter)
        else:
            token = VersionToken.any()
        return self._get_installed_by_version(token.major, token.open, provider_filter)

    def _not_found(self, version_or_id: Optional[str]) -> JdkNotFoundError:
        if version_or_id:
            token = VersionToken.parse(version_or_id)
            if token is None:
                return JdkNotFoundError(
                    f"No suitable JDK was found for requested id: {version_or_id}",
                    requested=version_or_id,
                )
            if token.major > 0:
                return JdkNotFoundError(
                    f"No suitable JDK was found for requested version: {token.major}",
                    requested=version_or_id,
                )
        return JdkNotFoundError("No suitable JDK was found")

    def _get_jdk_by_version(
        self, version: int, open_ended: bool, provider_filter: ProviderPredicate
    ) -> Optional[Jdk]:
        jdk: Optional[Jdk] = self._get_installed_by_version(
            version, open_ended, provider_filter
        )
        if jdk is not None:
            return jdk
        if version > 0 and (version >= self.default_java_version or not open_ended):
            return self._get_available_by_version(version, open_ended, provider_filter)
        # Nothing installed for an old open request, fall back to the default version
        jdk = self._get_jdk_by_version(
            self.default_java_version, open_ended, provider_filter
        )
        if jdk is None:
            jdk = self._get_prev_available(self.default_java_version, provider_filter)
        return jdk

    def _get_installed_by_version(
        self, version: int, open_ended: bool, provider_filter: ProviderPredicate
    ) -> Optional[InstalledJdk]:
        for provider in self._providers:
            if not provider_filter(provider):
                continue
            jdk = provider.get_installed_by_version(version, open_ended)
            if jdk is not None:
                return jdk
        return None

    def _get_available_by_version(
        self, version: int, open_ended: bool, provider_filter: ProviderPredicate
    ) -> Optional[AvailableJdk]:
        for provider in self._updatable_providers(provider_filter):
            jdk = provider.get_available_by_version(version, open_ended)
            if jdk is not None:
                return jdk
        return None

    def _get_prev_available(
        self, version: int, provider_filter: ProviderPredicate
    ) -> Optional[AvailableJdk]:
        older = [
            jdk
            for provider in self._updatable_providers(provider_filter)
            for jdk in provider.list_available()
            if jdk.major_version <= version
        ]
        if not older:
            return None
        return max(older, key=lambda j: j.major_version)

    def _get_jdk_by_id(
        self, jdk_id: str, provider_filter: ProviderPredicate
    ) -> Optional[Jdk]:
        jdk: Optional[Jdk] = self._get_installed_by_id(jdk_id, provider_filter)
        if jdk is not None:
            return jdk
        for provider in self._updatable_providers(provider_filter):
            jdk = provider.get_available_by_id_or_token(jdk_id)
            if jdk is not None:
                return jdk
        return None

    def _get_installed_by_id(
        self, jdk_id: str, provider_filter: ProviderPredicate
    ) -> Optional[InstalledJdk]:
        for provider in self._providers:
            if not provider_filter(provider):
                continue
            jdk = provider.get_installed_by_id(jdk_id)
            if jdk is not None:
                return jdk
        return None

    def _ensure_installed(self, jdk: Jdk) -> InstalledJdk:
        if isinstance(jdk, InstalledJdk) and jdk.is_installed:
            return jdk
        if isinstance(jdk, AvailableJdk):
            installed = jdk.install()
        else:
            installed = jdk.provider.install(jdk)
        if self.get_default_jdk() is None:
            self.set_default_jdk(installed)
        if self.get_default_jdk_for_version(installed.major_version) is None:
            self.set_default_jdk_for_version(installed)
        return installed

    # =========================================================================
    # Listing
    # =========================================================================

    def list_installed_jdks(
        self, provider_filter: ProviderPredicate = all_providers
    ) -> List[InstalledJdk]:
        jdks = [
            jdk
            for provider in self._providers
            if provider_filter(provider)
            for jdk in provider.list_installed()
        ]
        return sorted(jdks, key=lambda j: j.major_version)

    def list_available_jdks(
        self, distros: Optional[str] = None, tags: Optional[Sequence[str]] = None
    ) -> List[AvailableJdk]:
        return [
            jdk
            for provider in self._updatable_providers()
            for jdk in provider.list_available(distros, tags)
        ]

    def list_available_distros(self) -> List[Distro]:
        distros: List[Distro] = []
        for provider in self._updatable_providers():
            for distro in provider.list_distros():
                if distro not in distros:
                    distros.append(distro)
        return distros

    def is_current_jdk_managed(self) -> bool:
        """Whether the JDK that runs ``java`` on the PATH was installed by an updatable provider."""
        current = self.provider_by_name(PROVIDER_CURRENT) or CurrentJdkProvider()
        home = current.find_home() if isinstance(current, CurrentJdkProvider) else None
        if home is None:
            return False
        return any(
            provider.get_installed_by_path(home) is not None
            for provider in self._updatable_providers()
        )

    # =========================================================================
    # Uninstalling
    # =========================================================================

    def uninstall_jdk(self, jdk: InstalledJdk) -> None:
        """
        Delete an installed JDK and rebind the defaults that pointed at it.

        A JDK that's already gone is left alone. On Windows a JDK that's in use
        is not touched and only a warning is logged.
        """
        home = jdk.home
        if not os.path.lexists(home):
            logger.debug(f"JDK {jdk.id} is not installed, nothing to uninstall")
            return
        if is_windows():
            try:
                check_not_in_use(home)
            except ResourceBusyError:
                logger.warning(f"Cannot uninstall JDK, it's being used: {jdk}")
                return

        default_jdk = self.get_default_jdk()
        reset_global = default_jdk is not None and same_file(home, default_jdk.home)
        versioned_jdk = self.get_default_jdk_for_version(jdk.major_version)
        reset_versioned = versioned_jdk is not None and same_file(
            home, versioned_jdk.home
        )

        delete_path(home)
        logger.info(f"JDK {jdk.id} has been uninstalled")

        if reset_global:
            replacement = _nearest_jdk(self._rebind_candidates(), jdk.major_version)
            if replacement is not None:
                self.set_default_jdk(replacement)
            else:
                self._unbind(default_jdk)
                logger.info("Default JDK unset")
        if reset_versioned:
            candidates = [
                j
                for j in self._rebind_candidates()
                if exact_version(jdk.major_version)(j)
            ]
            if candidates:
                self.set_default_jdk_for_version(candidates[0])
            else:
                self._unbind(versioned_jdk)
                logger.info(f"Default JDK {jdk.major_version} unset")

    def _rebind_candidates(self) -> List[InstalledJdk]:
        """Installed JDKs a default may be bound to: no aliases, only JDKs jdkman installed."""
        return [
            jdk
            for provider in self._updatable_providers()
            if provider.has_fixed_versions
            and not provider.has_linked_versions
            and provider is not self.default_provider
            for jdk in provider.list_installed()
        ]

    # =========================================================================
    # Defaults
    # =========================================================================

    def get_default_jdk(self) -> Optional[InstalledJdk]:
        if self.default_provider is None:
            return None
        return self.default_provider.get_installed_by_id(PROVIDER_DEFAULT)

    def get_default_jdk_for_version(self, major_version: int) -> Optional[InstalledJdk]:
        if self.default_provider is None:
            return None
        return self.default_provider.get_installed_by_id(
            versioned_default_id(major_version)
        )

    def set_default_jdk(self, jdk: InstalledJdk) -> None:
        """Point the global default link at `jdk`, unless it already points there."""
        self._bind_default(PROVIDER_DEFAULT, self.get_default_jdk(), jdk)

    def set_default_jdk_for_version(self, jdk: InstalledJdk) -> None:
        """Point the default link of `jdk`'s major version at `jdk`, unless it already points there."""
        self._bind_default(
            versioned_default_id(jdk.major_version),
            self.get_default_jdk_for_version(jdk.major_version),
            jdk,
        )

    def _bind_default(
        self, link_id: str, current: Optional[InstalledJdk], jdk: InstalledJdk
    ) -> None:
        provider = self.default_provider
        if provider is None:
            return
        if current is not None and same_file(current.home, jdk.home):
            return
        link = InstalledJdk(
            provider,
            link_id,
            jdk.version,
            jdk.tags,
            home_dir=jdk.home,
            fixed_version=False,
        )
        provider.install(link)
        if link_id == PROVIDER_DEFAULT:
            logger.info(f"Default JDK set to {jdk}")
        else:
            logger.info(f"Default JDK {jdk.major_version} set to {jdk}")

    def remove_default_jdk(self) -> None:
        self._unbind(self.get_default_jdk())

    def remove_default_jdk_for_version(self, major_version: int) -> None:
        self._unbind(self.get_default_jdk_for_version(major_version))

    def _unbind(self, link: Optional[InstalledJdk]) -> None:
        if link is not None and self.default_provider is not None:
            self.default_provider.uninstall(link)

    # =========================================================================
    # Linking
    # =========================================================================

    def link_to_existing_jdk(self, jdk_path: Pathish, jdk_id: str) -> InstalledJdk:
        """
        Make the JDK in `jdk_path` available under the name `jdk_id`.

        An existing link with the same name is replaced.

        Raises:
            ProviderConfigurationError: If no provider can create links.
            InvalidInputError: If `jdk_path` isn't a directory holding a JDK or `jdk_id` isn't a valid name.
        """
        linked = next(
            (
                p
                for p in self._updatable_providers()
                if p.has_linked_versions and p is not self.default_provider
            ),
            None,
        )
        if linked is None:
            raise ProviderConfigurationError(
                "Cannot link JDKs, no provider is able to create links"
            )
        if not os.path.isdir(jdk_path):
            raise InvalidInputError(f"Unable to resolve path as directory: {jdk_path}")
        jdk = linked.get_available_by_id_or_token(f"{jdk_id}@{jdk_path}")
        if jdk is None:
            raise InvalidInputError(f"Unable to create link to JDK in path: {jdk_path}")
        logger.debug(f"Linking JDK {jdk_id} to {jdk_path}")
        return linked.install(jdk)
