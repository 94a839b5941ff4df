"""
Core Interfaces for the jdkman Resolution Engine

This module defines the JDK data model (available and installed JDKs, distros
and catalog candidates), the predicates used to select JDKs and providers, and
the abstract interfaces implemented by providers and installers.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, FrozenSet, Iterable, List, Optional, Union

from jdkman.constants import RELEASE_STATUS_GA
from jdkman.exceptions import JdkStateError, UnsupportedOperationError
from jdkman.jdk.homes import determine_tags_from_home, resolve_version_from_path
from jdkman.jdk.version import parse_java_version
from jdkman.log_utils import logger

Pathish = Union[str, Path]


def normalize_tags(tags: Optional[Iterable[str]]) -> FrozenSet[str]:
    """
    Normalize tag names so they compare case-insensitively.

    Every tag is stripped and capitalized ("graalvm", "GRAALVM" and "Graalvm"
    all become "Graalvm"); empty names are dropped.
    """
    if not tags:
        return frozenset()
    return frozenset(t.strip().capitalize() for t in tags if t and t.strip())


@dataclass(eq=False)
class Jdk:
    """A JDK known to a provider, either installed or available for installation."""

    provider: "JdkProvider" = field(repr=False)
    """The provider that found or offers this JDK"""

    id: str
    """Identifier, unique across providers"""

    version: str
    """Raw vendor version string (e.g. '17.0.6+10')"""

    tags: FrozenSet[str] = field(default_factory=frozenset)
    """Tags such as Jdk, Jre, Graalvm, Native, Javafx, Ga or Ea"""

    def __post_init__(self) -> None:
        self.tags = normalize_tags(self.tags)

    @property
    def major_version(self) -> int:
        return parse_java_version(self.version)

    @property
    def is_installed(self) -> bool:
        return False

    @property
    def home(self) -> Path:
        raise JdkStateError(
            "Trying to retrieve home folder for uninstalled JDK", details=self.id
        )

    def has_tags(self, tags: Optional[Iterable[str]]) -> bool:
        return normalize_tags(tags) <= self.tags

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return NotImplemented
        return self.id == other.id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(self.id)

    def __lt__(self, other: "Jdk") -> bool:
        return self.major_version < other.major_version

    def _tags_str(self) -> str:
        return "[" + ", ".join(sorted(self.tags)) + "]"


@dataclass(eq=False)
class AvailableJdk(Jdk):
    """A JDK a provider is able to install."""

    download_url: Optional[str] = None
    """Where the package can be downloaded from, when the installer knows it"""

    distro: Optional[str] = None
    """The distribution (vendor) of the package, when known"""

    def install(self) -> "InstalledJdk":
        """
        Install this JDK through its provider.

        Raises:
            UnsupportedOperationError: If the provider can't install JDKs.
        """
        if not self.provider.can_update:
            raise UnsupportedOperationError(
                f"Installing a JDK is not supported by {self.provider.name}",
                provider=self.provider.name,
            )
        return self.provider.install(self)

    def __str__(self) -> str:
        return f"{self.major_version} ({self.version}, {self.id}, {self._tags_str()})"


@dataclass(eq=False)
class InstalledJdk(Jdk):
    """A JDK present on disk."""

    home_dir: Optional[Path] = None
    """The JDK's home folder"""

    fixed_version: bool = True
    """Whether the version behind this id can never change"""

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.home_dir is not None:
            self.home_dir = Path(self.home_dir)

    @property
    def is_installed(self) -> bool:
        return self.home_dir is not None

    @property
    def home(self) -> Path:
        if self.home_dir is None:
            return super().home
        return self.home_dir

    def uninstall(self) -> None:
        """Remove this JDK through its provider. The object is stale afterwards."""
        self.provider.uninstall(self)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, InstalledJdk):
            return NotImplemented
        return self.id == other.id and self.home_dir == other.home_dir

    def __hash__(self) -> int:
        return hash((self.id, self.home_dir))

    def __str__(self) -> str:
        kind = "fixed" if self.fixed_version else "dynamic"
        return (
            f"{self.major_version} ({self.version} [{kind}], {self.id}, "
            f"{self.home_dir}, {self._tags_str()})"
        )


@dataclass(frozen=True)
class Distro:
    """A JDK distribution offered by a remote catalog."""

    name: str
    """Catalog name of the distribution (e.g. 'temurin')"""

    is_graalvm: bool = False
    """Whether the distribution ships GraalVM builds"""


@dataclass
class CandidatePackage:
    """A package descriptor returned by a remote catalog query."""

    version: str
    """Raw version string of the package"""

    release_status: str = RELEASE_STATUS_GA
    """Either 'ga' or 'ea'"""

    package_type: str = "jdk"
    """Either 'jdk' or 'jre'"""

    javafx_bundled: bool = False
    """Whether JavaFX is included in the package"""

    download_url: Optional[str] = None
    """Location of the package archive"""

    distro: Optional[str] = None
    """Distribution (vendor) that built the package"""

    jvm_impl: Optional[str] = None
    """JVM implementation (e.g. 'hotspot', 'graalvm')"""

    package_id: Optional[str] = None
    """Catalog specific identifier of the package"""

    major: Optional[int] = None
    """Major version as reported by the catalog, derived from `version` when absent"""

    @property
    def major_version(self) -> int:
        if self.major is not None:
            return self.major
        return parse_java_version(self.version)

    @property
    def is_ga(self) -> bool:
        return self.release_status.lower() == RELEASE_STATUS_GA


# =============================================================================
# Predicates
# =============================================================================

JdkPredicate = Callable[[Jdk], bool]
ProviderPredicate = Callable[["JdkProvider"], bool]


def all_jdks(jdk: Jdk) -> bool:
    return True


def exact_version(version: int) -> JdkPredicate:
    return lambda jdk: jdk.major_version == version


def open_version(version: int) -> JdkPredicate:
    return lambda jdk: jdk.major_version >= version


def for_version(version: int, open_ended: bool) -> JdkPredicate:
    return open_version(version) if open_ended else exact_version(version)


def by_id(jdk_id: str) -> JdkPredicate:
    return lambda jdk: jdk.id == jdk_id


def all_tags(tags: Optional[Iterable[str]]) -> JdkPredicate:
    required = normalize_tags(tags)
    return lambda jdk: required <= jdk.tags


def fixed_version(jdk: Jdk) -> bool:
    return isinstance(jdk, InstalledJdk) and jdk.fixed_version


def by_path(jdk_path: Pathish) -> JdkPredicate:
    """Match installed JDKs whose home is `jdk_path` or one of its parents."""
    path = Path(os.path.abspath(jdk_path))

    def _matches(jdk: Jdk) -> bool:
        if not jdk.is_installed:
            return False
        home = Path(os.path.abspath(jdk.home))
        return path == home or home in path.parents

    return _matches


def all_providers(provider: "JdkProvider") -> bool:
    return True


def can_update(provider: "JdkProvider") -> bool:
    return provider.can_update


def provider_name(name: str) -> ProviderPredicate:
    return lambda provider: provider.name.lower() == name.lower()


def first_match(jdks: Iterable[Jdk], predicate: JdkPredicate) -> Optional[Jdk]:
    return next((jdk for jdk in jdks if predicate(jdk)), None)


# =============================================================================
# Interfaces
# =============================================================================


class ManagerCallback(ABC):
    """
    The narrow view of the manager that providers are given.

    Providers only need to trigger the uninstall ripple (default rebinding) and
    to know the configured default major version.
    """

    @property
    @abstractmethod
    def default_java_version(self) -> int:
        """The major version used as fallback when nothing better matches."""

    @abstractmethod
    def uninstall_jdk(self, jdk: InstalledJdk) -> None:
        """
        Delete an installed JDK and rebind any default links that pointed at it.

        Parameters:
            jdk (InstalledJdk): The JDK to remove.
        """


class JdkProvider(ABC):
    """
    Abstract base class for JDK providers.

    A provider gives access to the JDKs installed on the user's system from one
    particular source (a folder, an environment variable, a link). Providers
    whose `can_update` is `True` can also install and uninstall JDKs.

    Provider ids are specific to each implementation but must be unique across
    providers; `is_valid_id` tells whether an id belongs to this provider.
    """

    can_update: bool = False
    """Whether this provider can install and uninstall JDKs"""

    has_fixed_versions: bool = True
    """Whether an id always refers to the same JDK version"""

    has_linked_versions: bool = False
    """Whether this provider's JDKs are references to JDKs owned elsewhere"""

    def __init__(self) -> None:
        self._manager: Optional[ManagerCallback] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name of the provider, lowercase letters and numbers only."""

    @property
    def description(self) -> str:
        return ""

    @property
    def manager(self) -> ManagerCallback:
        if self._manager is None:
            raise JdkStateError(f"Provider {self.name} is not attached to a manager")
        return self._manager

    def attach(self, manager: ManagerCallback) -> None:
        """
        Attach the manager callback. This may only happen once per provider.

        Raises:
            JdkStateError: If the provider is already attached to another manager.
        """
        if self._manager is not None and self._manager is not manager:
            raise JdkStateError(
                f"Provider {self.name} is already attached to a manager"
            )
        self._manager = manager

    def can_use(self) -> bool:
        """Whether the provider is usable on this system."""
        return True

    @abstractmethod
    def list_installed(self) -> List[InstalledJdk]:
        """
        List the JDKs this provider currently finds on the system.

        Missing roots or unreadable metadata yield an empty list, never an error.

        Returns:
            List[InstalledJdk]: The installed JDKs, possibly empty.
        """

    def get_installed_by_version(
        self, version: int, open_ended: bool
    ) -> Optional[InstalledJdk]:
        """
        Return the first installed JDK with the given major version.

        Parameters:
            version (int): The major version to look for.
            open_ended (bool): Accept newer major versions as well.

        Returns:
            Optional[InstalledJdk]: The first match, or `None`.
        """
        return first_match(self.list_installed(), for_version(version, open_ended))  # type: ignore[return-value]

    def get_installed_by_id(self, jdk_id: str) -> Optional[InstalledJdk]:
        if not self.is_valid_id(jdk_id):
            return None
        return first_match(self.list_installed(), by_id(jdk_id))  # type: ignore[return-value]

    def get_installed_by_path(self, jdk_path: Pathish) -> Optional[InstalledJdk]:
        return first_match(self.list_installed(), by_path(jdk_path))  # type: ignore[return-value]

    def is_valid_id(self, jdk_id: str) -> bool:
        return jdk_id == self.name

    def create_jdk(
        self,
        jdk_id: str,
        home: Pathish,
        version: Optional[str] = None,
        fixed_version: bool = True,
        tags: Optional[Iterable[str]] = None,
    ) -> Optional[InstalledJdk]:
        """
        Create an `InstalledJdk` for a JDK home owned by this provider.

        The version is read from the home when not given, and the tags are
        derived from the home's contents when not given.

        Returns:
            Optional[InstalledJdk]: The JDK, or `None` if its version couldn't be determined.
        """
        if version is None:
            version = resolve_version_from_path(Path(home))
            if version is None:
                logger.debug(f"Unable to determine Java version in: {home}")
                return None
        if tags is None:
            tags = determine_tags_from_home(Path(home), version)
        return InstalledJdk(
            self,
            jdk_id,
            version,
            frozenset(tags),
            home_dir=Path(home),
            fixed_version=fixed_version,
        )

    def list_distros(self) -> List[Distro]:
        raise UnsupportedOperationError(
            f"Listing distros is not supported by {self.name}", provider=self.name
        )

    def list_available(
        self, distros: Optional[str] = None, tags: Optional[Iterable[str]] = None
    ) -> List[AvailableJdk]:
        """
        List the JDKs available for installation.

        Parameters:
            distros (Optional[str]): Comma separated distro names to narrow the listing to.
            tags (Optional[Iterable[str]]): Tags every returned JDK must carry.

        Raises:
            UnsupportedOperationError: If the provider can't install JDKs.
        """
        raise UnsupportedOperationError(
            f"Listing available JDKs is not supported by {self.name}",
            provider=self.name,
        )

    def get_available_by_version(
        self, version: int, open_ended: bool
    ) -> Optional[AvailableJdk]:
        raise UnsupportedOperationError(
            f"Looking up available JDKs is not supported by {self.name}",
            provider=self.name,
        )

    def get_available_by_id_or_token(self, id_or_token: str) -> Optional[AvailableJdk]:
        """
        Return the available JDK matching an id or a provider specific token.

        Ids are matched exactly against the ids of `list_available`; tokens can use
        provider specific syntax and may yield JDKs that are never listed.
        """
        if not self.can_update:
            return None
        return first_match(self.list_available(), by_id(id_or_token))  # type: ignore[return-value]

    def install(self, jdk: Jdk) -> InstalledJdk:
        raise UnsupportedOperationError(
            f"Installing a JDK is not supported by {self.name}", provider=self.name
        )

    def uninstall(self, jdk: InstalledJdk) -> None:
        raise UnsupportedOperationError(
            f"Uninstalling a JDK is not supported by {self.name}", provider=self.name
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class JdkInstaller(ABC):
    """
    Abstract base class for installers that fetch JDKs from a remote catalog.

    Installers are used by folder based providers that can update; the provider
    decides where a JDK goes, the installer decides what gets unpacked there.
    """

    @abstractmethod
    def list_distros(self) -> List[Distro]:
        """Return the distributions the catalog offers."""

    @abstractmethod
    def list_available(
        self, distros: Optional[str] = None, tags: Optional[Iterable[str]] = None
    ) -> List[AvailableJdk]:
        """
        Query the catalog for installable JDKs.

        Parameters:
            distros (Optional[str]): Comma separated distro names, defaults to the installer's configuration.
            tags (Optional[Iterable[str]]): Tags every returned JDK must carry.

        Returns:
            List[AvailableJdk]: At most one JDK per major version and distro, newest first.
        """

    @abstractmethod
    def get_available_by_version(
        self, version: int, open_ended: bool
    ) -> Optional[AvailableJdk]:
        """Return the preferred installable JDK for a version request, or `None`."""

    def get_available_by_id_or_token(self, id_or_token: str) -> Optional[AvailableJdk]:
        return first_match(self.list_available(), by_id(id_or_token))  # type: ignore[return-value]

    @abstractmethod
    def install(self, jdk: AvailableJdk, install_dir: Path) -> InstalledJdk:
        """
        Download and unpack `jdk` into `install_dir`, replacing what's there.

        Raises:
            InstallError: If downloading, unpacking or swapping the folder fails.
        """
