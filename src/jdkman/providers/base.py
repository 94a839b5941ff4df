"""
Shared behavior for providers that find their JDKs as sub-folders of a root.
"""

import os
from pathlib import Path
from typing import List, Optional

from jdkman.jdk.files import is_link, same_file
from jdkman.jdk.interfaces import InstalledJdk, JdkProvider, Pathish
from jdkman.log_utils import logger
from jdkman.utils import search_path


class FoldersJdkProvider(JdkProvider):
    """
    A provider whose JDKs are the sub-folders of a single root folder.

    A sub-folder is accepted when it contains a ``javac`` executable; its id is
    the folder name followed by ``-<provider name>``. A missing root simply
    means there are no JDKs.

    Parameters:
        jdks_root (Path): The folder to scan.
    """

    provider_name: str = ""
    """Name of the provider, set by subclasses"""

    def __init__(self, jdks_root: Pathish):
        super().__init__()
        self.jdks_root = Path(jdks_root)

    @property
    def name(self) -> str:
        return self.provider_name

    def can_use(self) -> bool:
        return self.jdks_root.is_dir() or self.can_update

    def list_installed(self) -> List[InstalledJdk]:
        result: List[InstalledJdk] = []
        for jdk_path in self.list_jdk_paths():
            jdk = self.create_jdk_from_folder(jdk_path)
            if jdk is not None:
                result.append(jdk)
        return result

    def list_jdk_paths(self) -> List[Path]:
        try:
            children = sorted(self.jdks_root.iterdir())
        except OSError as e:
            logger.debug(f"Couldn't list installed JDKs in {self.jdks_root}: {e}")
            return []
        return [p for p in children if p.is_dir() and self.accept_folder(p)]

    def get_installed_by_id(self, jdk_id: str) -> Optional[InstalledJdk]:
        if not self.is_valid_id(jdk_id):
            return None
        return self.get_installed_by_path(self.get_jdk_path(jdk_id))

    def get_installed_by_path(self, jdk_path: Pathish) -> Optional[InstalledJdk]:
        jdk_path = Path(os.path.abspath(jdk_path))
        root = Path(os.path.abspath(self.jdks_root))
        if root in jdk_path.parents and jdk_path.is_dir():
            # Any path inside a JDK maps to that JDK's folder
            folder = root / jdk_path.relative_to(root).parts[0]
            if self.accept_folder(folder):
                return self.create_jdk_from_folder(folder)
        return None

    def get_jdk_path(self, jdk_id: str) -> Path:
        """
        Return the folder where the JDK with the given id is, or would be, installed.
        """
        suffix = f"-{self.name}"
        folder = jdk_id[: -len(suffix)] if jdk_id.endswith(suffix) else jdk_id
        return self.jdks_root / folder

    def create_jdk_from_folder(self, home: Path) -> Optional[InstalledJdk]:
        if not self.accept_folder(home):
            return None
        return self.create_jdk(self.jdk_id(home.name), home)

    def jdk_id(self, name: str) -> str:
        return f"{name}-{self.name}"

    def accept_folder(self, jdk_folder: Path) -> bool:
        return search_path("javac", str(jdk_folder / "bin")) is not None

    def is_valid_id(self, jdk_id: str) -> bool:
        return jdk_id.endswith(f"-{self.name}")


def is_same_folder_link(jdk_folder: Path) -> bool:
    """Return True if `jdk_folder` is a link to another entry of the same folder."""
    if not is_link(jdk_folder):
        return False
    try:
        real_path = Path(os.path.realpath(jdk_folder))
    except OSError:
        return False
    return same_file(jdk_folder.absolute().parent, real_path.parent)
