"""
Providers for JDKs installed by the operating system or other tools.
"""

import os
import zlib
from pathlib import Path
from typing import List, Optional

from jdkman.constants import (
    LINUX_JDKS_ROOT,
    MISE_JDKS_DIR,
    PROVIDER_EXTERNAL,
    PROVIDER_LINUX,
    PROVIDER_MISE,
    PROVIDER_SCOOP,
    PROVIDER_SDKMAN,
    SCOOP_APPS_DIR,
    SDKMAN_JDKS_DIR,
)
from jdkman.jdk.interfaces import InstalledJdk, JdkProvider, Pathish
from jdkman.providers.base import FoldersJdkProvider, is_same_folder_link
from jdkman.utils import is_windows


def _home_dir(*parts: str) -> Path:
    return Path(os.path.expanduser("~")).joinpath(*parts)


class LinuxJdkProvider(FoldersJdkProvider):
    """
    The JDKs installed by the Linux distribution's package manager.

    Distros add aliases such as ``java-17`` linking to sibling folders; those are
    skipped so each JDK is reported once.
    """

    provider_name = PROVIDER_LINUX

    def __init__(self, jdks_root: Pathish = LINUX_JDKS_ROOT):
        super().__init__(jdks_root)

    @property
    def description(self) -> str:
        return "The JDKs installed in the standard location of a Linux distro."

    def accept_folder(self, jdk_folder: Path) -> bool:
        return super().accept_folder(jdk_folder) and not is_same_folder_link(jdk_folder)


class SdkmanJdkProvider(FoldersJdkProvider):
    """The JDKs installed with SDKMAN, skipping its ``current`` alias."""

    provider_name = PROVIDER_SDKMAN

    def __init__(self, jdks_root: Optional[Pathish] = None):
        super().__init__(jdks_root or _home_dir(*SDKMAN_JDKS_DIR))

    @property
    def description(self) -> str:
        return "The JDKs installed using the SDKMAN package manager."

    def accept_folder(self, jdk_folder: Path) -> bool:
        return super().accept_folder(jdk_folder) and not is_same_folder_link(jdk_folder)


class MiseJdkProvider(FoldersJdkProvider):
    """The JDKs installed with mise, skipping its version aliases."""

    provider_name = PROVIDER_MISE

    def __init__(self, jdks_root: Optional[Pathish] = None):
        super().__init__(jdks_root or _home_dir(*MISE_JDKS_DIR))

    @property
    def description(self) -> str:
        return "The JDKs installed using the Mise package manager."

    def accept_folder(self, jdk_folder: Path) -> bool:
        return super().accept_folder(jdk_folder) and not is_same_folder_link(jdk_folder)


class ScoopJdkProvider(FoldersJdkProvider):
    """
    The JDKs installed with Scoop on Windows.

    Every app folder whose name contains ``jdk`` is considered; the JDK itself is
    whatever the app's ``current`` link points to.
    """

    provider_name = PROVIDER_SCOOP

    def __init__(self, jdks_root: Optional[Pathish] = None):
        super().__init__(jdks_root or _home_dir(*SCOOP_APPS_DIR))

    @property
    def description(self) -> str:
        return "The JDKs installed using the Scoop package manager."

    def can_use(self) -> bool:
        return is_windows() and super().can_use()

    def accept_folder(self, jdk_folder: Path) -> bool:
        return "jdk" in jdk_folder.name.lower() and super().accept_folder(
            jdk_folder / "current"
        )

    def create_jdk_from_folder(self, home: Path) -> Optional[InstalledJdk]:
        if not self.accept_folder(home):
            return None
        current = Path(os.path.realpath(home / "current"))
        return self.create_jdk(self.jdk_id(home.name), current)


class ExternalJdkProvider(JdkProvider):
    """
    Any JDK folder given by path.

    Nothing is ever listed; `get_installed_by_path` turns an arbitrary JDK folder
    into a JDK whose id is derived from a checksum of its absolute path.
    """

    @property
    def name(self) -> str:
        return PROVIDER_EXTERNAL

    @property
    def description(self) -> str:
        return "Any JDK referenced by its path."

    def is_valid_id(self, jdk_id: str) -> bool:
        return jdk_id.startswith(f"{self.name}-")

    def list_installed(self) -> List[InstalledJdk]:
        return []

    def get_installed_by_path(self, jdk_path: Pathish) -> Optional[InstalledJdk]:
        path = os.path.abspath(jdk_path)
        if not os.path.isdir(path):
            return None
        crc = zlib.crc32(path.encode("utf-8")) & 0xFFFFFFFF
        return self.create_jdk(f"{self.name}-{crc:x}", Path(path))
