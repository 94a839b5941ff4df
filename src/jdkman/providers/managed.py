"""
The JDKs jdkman downloads and installs itself.
"""

from pathlib import Path
from typing import Iterable, List, Optional

from jdkman.constants import PROVIDER_MANAGED
from jdkman.exceptions import ProviderConfigurationError
from jdkman.jdk.files import is_link
from jdkman.jdk.interfaces import (
    AvailableJdk,
    Distro,
    InstalledJdk,
    Jdk,
    JdkInstaller,
    Pathish,
)
from jdkman.jdk.version import parse_java_version, parse_to_int
from jdkman.providers.base import FoldersJdkProvider


class ManagedJdkProvider(FoldersJdkProvider):
    """
    JDKs installed by jdkman from a remote catalog.

    Every JDK lives in a folder of the root named after its major version, so
    there is at most one managed JDK per major version and its id is
    ``<N>-managed``. Listing and installing is delegated to a `JdkInstaller`.

    Parameters:
        jdks_root (Path): The folder holding the version folders.
        installer (Optional[JdkInstaller]): The installer, may also be set later with `use_installer`.
    """

    provider_name = PROVIDER_MANAGED
    can_update = True

    def __init__(self, jdks_root: Pathish, installer: Optional[JdkInstaller] = None):
        super().__init__(jdks_root)
        self._installer = installer

    @property
    def description(self) -> str:
        return "The JDKs installed and managed by jdkman."

    @property
    def installer(self) -> JdkInstaller:
        if self._installer is None:
            raise ProviderConfigurationError(
                f"No installer configured for provider {self.name}"
            )
        return self._installer

    def use_installer(self, installer: JdkInstaller) -> "ManagedJdkProvider":
        self._installer = installer
        return self

    def jdk_id(self, name: str) -> str:
        return super().jdk_id(str(parse_java_version(name)))

    def is_valid_id(self, jdk_id: str) -> bool:
        return super().is_valid_id(jdk_id) and parse_java_version(jdk_id) > 0

    def get_jdk_path(self, jdk_id: str) -> Path:
        return self.jdks_root / str(parse_java_version(jdk_id))

    def accept_folder(self, jdk_folder: Path) -> bool:
        return (
            parse_to_int(jdk_folder.name, 0) > 0
            and not is_link(jdk_folder)
            and super().accept_folder(jdk_folder)
        )

    def get_installed_by_version(
        self, version: int, open_ended: bool
    ) -> Optional[InstalledJdk]:
        jdk_dir = self.jdks_root / str(version)
        if version > 0 and jdk_dir.is_dir():
            jdk = self.create_jdk_from_folder(jdk_dir)
            if jdk is not None:
                return jdk
        if open_ended:
            return super().get_installed_by_version(version, open_ended)
        return None

    def list_distros(self) -> List[Distro]:
        return self.installer.list_distros()

    def list_available(
        self, distros: Optional[str] = None, tags: Optional[Iterable[str]] = None
    ) -> List[AvailableJdk]:
        return self.installer.list_available(distros, tags)

    def get_available_by_version(
        self, version: int, open_ended: bool
    ) -> Optional[AvailableJdk]:
        return self.installer.get_available_by_version(version, open_ended)

    def get_available_by_id_or_token(self, id_or_token: str) -> Optional[AvailableJdk]:
        if not self.is_valid_id(id_or_token):
            return None
        return self.installer.get_available_by_id_or_token(id_or_token)

    def install(self, jdk: Jdk) -> InstalledJdk:
        if isinstance(jdk, InstalledJdk) and jdk.is_installed:
            return jdk
        return self.installer.install(jdk, self.get_jdk_path(jdk.id))  # type: ignore[arg-type]

    def uninstall(self, jdk: InstalledJdk) -> None:
        self.manager.uninstall_jdk(jdk)
