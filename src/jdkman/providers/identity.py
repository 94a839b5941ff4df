"""
Providers whose JDKs are links to JDKs living elsewhere.

`DefaultJdkProvider` manages the ``default`` link and the per major version
``<N>-default`` links. `LinkedJdkProvider` manages links the user created to
JDKs installed outside of jdkman, using ``<name>@<path>`` tokens.
"""

import os
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from jdkman.constants import (
    DEFAULT_LINK_NAME,
    OLD_DIR_SUFFIX,
    PROVIDER_DEFAULT,
    PROVIDER_LINKED,
    TMP_DIR_SUFFIX,
    VERSIONED_DEFAULT_SUFFIX,
)
from jdkman.exceptions import InstallError, InvalidInputError, JdkStateError
from jdkman.jdk.files import create_link, delete_path, is_link
from jdkman.jdk.homes import determine_tags_from_home, resolve_version_from_path
from jdkman.jdk.interfaces import (
    AvailableJdk,
    Distro,
    InstalledJdk,
    Jdk,
    JdkProvider,
    Pathish,
)
from jdkman.log_utils import logger
from jdkman.providers.base import FoldersJdkProvider
from jdkman.utils import search_path

_VERSIONED_DEFAULT_RX = re.compile(rf"^(\d+){re.escape(VERSIONED_DEFAULT_SUFFIX)}$")
_LINK_NAME_RX = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def versioned_default_id(major_version: int) -> str:
    return f"{major_version}{VERSIONED_DEFAULT_SUFFIX}"


class DefaultJdkProvider(JdkProvider):
    """
    The JDKs that are set as the global default and as per-version defaults.

    The global default is a link named ``default``; the default for major
    version N is a sibling link named ``N-default``.

    Parameters:
        default_link (Path): Location of the global ``default`` link.
    """

    has_fixed_versions = False
    has_linked_versions = True

    def __init__(self, default_link: Pathish):
        super().__init__()
        self.default_link = Path(default_link)

    @property
    def name(self) -> str:
        return PROVIDER_DEFAULT

    @property
    def description(self) -> str:
        return "The JDK that is set as the default JDK."

    @property
    def links_dir(self) -> Path:
        return self.default_link.parent

    def is_valid_id(self, jdk_id: str) -> bool:
        return jdk_id == DEFAULT_LINK_NAME or bool(_VERSIONED_DEFAULT_RX.match(jdk_id))

    def link_path(self, jdk_id: str) -> Path:
        if jdk_id == DEFAULT_LINK_NAME:
            return self.default_link
        if _VERSIONED_DEFAULT_RX.match(jdk_id):
            return self.links_dir / jdk_id
        raise InvalidInputError(f"Not a valid default JDK id: {jdk_id}")

    def _create_link_jdk(self, jdk_id: str) -> Optional[InstalledJdk]:
        link = self.link_path(jdk_id)
        if not link.is_dir():
            return None
        return self.create_jdk(jdk_id, link, fixed_version=False)

    def list_installed(self) -> List[InstalledJdk]:
        result: List[InstalledJdk] = []
        jdk = self._create_link_jdk(DEFAULT_LINK_NAME)
        if jdk is not None:
            result.append(jdk)
        versioned: List[Tuple[int, str]] = []
        try:
            for entry in os.listdir(self.links_dir):
                match = _VERSIONED_DEFAULT_RX.match(entry)
                if match:
                    versioned.append((int(match.group(1)), entry))
        except OSError as e:
            logger.debug(f"Couldn't list default links in {self.links_dir}: {e}")
        for _, entry in sorted(versioned):
            jdk = self._create_link_jdk(entry)
            if jdk is not None:
                result.append(jdk)
        return result

    def get_installed_by_id(self, jdk_id: str) -> Optional[InstalledJdk]:
        if not self.is_valid_id(jdk_id):
            return None
        return self._create_link_jdk(jdk_id)

    def install(self, jdk: Jdk) -> InstalledJdk:
        """
        Point the link named by `jdk.id` at `jdk.home`, replacing any stale link.

        Raises:
            JdkStateError: If `jdk` isn't installed.
            InvalidInputError: If `jdk.id` isn't a default link id.
        """
        if not jdk.is_installed:
            raise JdkStateError(f"Cannot make an uninstalled JDK the default: {jdk.id}")
        link = self.link_path(jdk.id)
        delete_path(link)
        create_link(link, jdk.home)
        new_jdk = self.create_jdk(
            jdk.id, link, jdk.version, fixed_version=False, tags=jdk.tags
        )
        if new_jdk is None:
            raise InstallError(f"Unable to create default link {link}")
        return new_jdk

    def uninstall(self, jdk: InstalledJdk) -> None:
        delete_path(self.link_path(jdk.id))


def _split_token(token: str) -> Optional[Tuple[str, str]]:
    parts = token.split("@", 1)
    if len(parts) != 2 or not parts[1]:
        return None
    return parts[0], parts[1]


class LinkedJdkProvider(FoldersJdkProvider):
    """
    Links to JDKs the user installed outside of jdkman.

    A link named ``<name>`` in the root folder shows up as the JDK
    ``<name>-linked``. Links are created from ``<name>@<path>`` tokens.
    """

    provider_name = PROVIDER_LINKED
    can_update = True
    has_linked_versions = True

    @property
    def description(self) -> str:
        return "Any unmanaged JDKs that the user has linked to."

    def can_use(self) -> bool:
        return True

    @staticmethod
    def is_valid_link_name(name: str) -> bool:
        """
        Check a user supplied link name.

        Names are letters, digits, dots, dashes and underscores, and may not
        collide with the default links, managed version folders or install
        transaction leftovers.
        """
        if not _LINK_NAME_RX.match(name):
            return False
        if name == DEFAULT_LINK_NAME or _VERSIONED_DEFAULT_RX.match(name):
            return False
        if name.isdigit():
            return False
        return not name.endswith((TMP_DIR_SUFFIX, OLD_DIR_SUFFIX))

    def accept_folder(self, jdk_folder: Path) -> bool:
        return (
            self.is_valid_link_name(jdk_folder.name)
            and is_link(jdk_folder)
            and super().accept_folder(jdk_folder)
        )

    def list_distros(self) -> List[Distro]:
        return []

    def list_available(
        self, distros: Optional[str] = None, tags: Optional[Iterable[str]] = None
    ) -> List[AvailableJdk]:
        # Links are only ever created from tokens
        return []

    def get_available_by_version(
        self, version: int, open_ended: bool
    ) -> Optional[AvailableJdk]:
        return None

    def get_available_by_id_or_token(self, id_or_token: str) -> Optional[AvailableJdk]:
        """
        Resolve a ``<name>@<path>`` token into a JDK that can be linked.

        Returns:
            Optional[AvailableJdk]: The linkable JDK, or `None` if the input isn't a token or the path holds no JDK.

        Raises:
            InvalidInputError: If the link name is invalid or the JDK's version can't be determined.
        """
        token = _split_token(id_or_token)
        if token is None:
            return None
        name, path = token
        if not self.is_valid_link_name(name):
            raise InvalidInputError(f"Invalid JDK link name: {name}")
        jdk_path = Path(path)
        if search_path("javac", str(jdk_path / "bin")) is None:
            logger.debug(f"No JDK found in: {jdk_path}")
            return None
        version = resolve_version_from_path(jdk_path)
        if version is None:
            raise InvalidInputError(
                f"Unable to determine Java version in given path: {jdk_path}"
            )
        return AvailableJdk(
            self,
            id_or_token,
            version,
            determine_tags_from_home(jdk_path, version),
        )

    def install(self, jdk: Jdk) -> InstalledJdk:
        """
        Create the link described by a ``<name>@<path>`` JDK.

        An existing link with the same name is replaced.

        Raises:
            InvalidInputError: If the JDK's id isn't a valid token.
            InstallError: If the new link doesn't resolve to a usable JDK.
        """
        if isinstance(jdk, InstalledJdk) and jdk.is_installed:
            return jdk
        token = _split_token(jdk.id)
        if token is None or not self.is_valid_link_name(token[0]):
            raise InvalidInputError(f"Invalid linked Jdk id: {jdk.id}")
        name, path = token
        jdk_path = Path(path)
        existing = self.get_installed_by_id(self.jdk_id(name))
        if existing is not None:
            logger.debug(
                f"A linked JDK named {name} already exists, it will be replaced"
            )
        link_path = self.jdks_root / name
        # Remove anything that might be in the way
        delete_path(link_path)
        create_link(link_path, jdk_path)
        new_jdk = self.create_jdk_from_folder(link_path)
        if new_jdk is None:
            delete_path(link_path)
            raise InstallError(f"Unable to link JDK {name} to: {jdk_path}")
        logger.info(f"JDK {name} has been linked to: {jdk_path}")
        return new_jdk

    def uninstall(self, jdk: InstalledJdk) -> None:
        self.manager.uninstall_jdk(jdk)
