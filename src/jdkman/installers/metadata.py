"""
Installer for the JDKs described by the Java Metadata API
(https://joschi.github.io/java-metadata/).

The API is a tree of static JSON files, one per release type, OS, architecture,
image type, JVM implementation and vendor.
"""

from typing import Any, Dict, List, Optional

from jdkman.constants import (
    METADATA_BASE_URL,
    METADATA_DEFAULT_DISTRO,
    METADATA_DEFAULT_JVM_IMPL,
    RELEASE_STATUS_EA,
    RELEASE_STATUS_GA,
)
from jdkman.exceptions import CatalogError, HTTPError
from jdkman.installers.base import CatalogJdkInstaller
from jdkman.jdk.interfaces import CandidatePackage, Distro, for_version
from jdkman.jdk.remote import RemoteAccess
from jdkman.log_utils import logger
from jdkman.providers.base import FoldersJdkProvider
from jdkman.utils import get_arch, get_os

_OS_NAMES = {"linux": "linux", "mac": "macosx", "windows": "windows", "aix": "aix"}

_ARCH_NAMES = {
    "x64": "x86_64",
    "x32": "i686",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "arm": "arm32",
    "ppc64": "ppc64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def map_os_name(os_name: str) -> str:
    return _OS_NAMES.get(os_name, "linux")


def map_arch_name(arch: str) -> str:
    return _ARCH_NAMES.get(arch, "x86_64")


def get_metadata_url(
    release_type: str,
    os_name: str,
    arch: str,
    image_type: str,
    jvm_impl: Optional[str],
    vendor: str,
) -> str:
    """
    Build the URL of one metadata file.

    The layout is ``<base>/<release>/<os>/<arch>/<image>/<impl>/<vendor>.json``.
    Without an explicit JVM implementation GraalVM vendors use ``graalvm`` and all
    others ``hotspot``.
    """
    if not jvm_impl:
        if "graalvm" in vendor or vendor == "mandrel":
            jvm_impl = "graalvm"
        else:
            jvm_impl = METADATA_DEFAULT_JVM_IMPL
    return (
        f"{METADATA_BASE_URL}{release_type}/{map_os_name(os_name)}/"
        f"{map_arch_name(arch)}/{image_type}/{jvm_impl}/{vendor}.json"
    )


def parse_metadata(entry: Dict[str, Any]) -> Optional[CandidatePackage]:
    version = entry.get("java_version")
    url = entry.get("url")
    if not isinstance(version, str) or not version or not url:
        return None
    features = entry.get("features") or []
    return CandidatePackage(
        version=version,
        release_status=entry.get("release_type") or RELEASE_STATUS_GA,
        package_type=entry.get("image_type") or "jdk",
        javafx_bundled="javafx" in features,
        download_url=url,
        distro=entry.get("vendor"),
        jvm_impl=entry.get("jvm_impl"),
    )


def determine_id(candidate: CandidatePackage) -> str:
    """Build ``<java_version>-<vendor>[-jre][-jfx][-<impl>]`` for a package."""
    jdk_id = f"{candidate.version}-{candidate.distro}"
    if candidate.package_type == "jre":
        jdk_id += "-jre"
    if candidate.javafx_bundled:
        jdk_id += "-jfx"
    if candidate.jvm_impl and candidate.jvm_impl != METADATA_DEFAULT_JVM_IMPL:
        jdk_id += f"-{candidate.jvm_impl}"
    return jdk_id


class MetadataJdkInstaller(CatalogJdkInstaller):
    """
    Downloads and installs JDKs described by the Java Metadata API.

    Every vendor is a separate file, so listing asks for the GA file of each
    configured vendor first and for the EA files after that.

    Parameters:
        jvm_impl (Optional[str]): JVM implementation to ask for, derived from the vendor when empty.
    """

    default_distro = METADATA_DEFAULT_DISTRO

    def __init__(
        self,
        provider: FoldersJdkProvider,
        remote: RemoteAccess,
        distro: Optional[str] = None,
        jvm_impl: Optional[str] = None,
    ):
        super().__init__(provider, remote, distro)
        self.jvm_impl = jvm_impl

    def available_id(self, candidate: CandidatePackage) -> str:
        return f"{determine_id(candidate)}-{self.provider.name}"

    def _read_metadata(self, release_type: str, vendor: str) -> List[CandidatePackage]:
        url = get_metadata_url(
            release_type, get_os(), get_arch(), "jdk", self.jvm_impl, vendor
        )
        data = self.remote.fetch_json(url)
        if not isinstance(data, list):
            raise HTTPError(f"Unexpected response from {url}", url=url)
        candidates = []
        for entry in data:
            candidate = parse_metadata(entry) if isinstance(entry, dict) else None
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def fetch_candidates(self, distros: List[str]) -> List[CandidatePackage]:
        """
        Read the GA and then the EA metadata of every vendor.

        Failing vendors are skipped; the last error is only raised when nothing
        at all could be read.
        """
        result: List[CandidatePackage] = []
        last_error: Optional[CatalogError] = None
        for release_type in (RELEASE_STATUS_GA, RELEASE_STATUS_EA):
            for vendor in distros:
                try:
                    result.extend(self._read_metadata(release_type, vendor))
                except CatalogError as e:
                    logger.debug(f"No {release_type} metadata for {vendor}: {e}")
                    last_error = e
        if not result and last_error is not None:
            raise last_error
        return result

    def fetch_candidates_for_version(
        self, version: int, open_ended: bool, distros: List[str]
    ) -> List[CandidatePackage]:
        """
        Return the matches of the first vendor with GA matches, else the first with EA matches.

        Failing vendors are skipped like in `fetch_candidates`.
        """
        matches = for_version(version, open_ended)
        last_error: Optional[CatalogError] = None
        for release_type in (RELEASE_STATUS_GA, RELEASE_STATUS_EA):
            for vendor in distros:
                try:
                    candidates = self._read_metadata(release_type, vendor)
                except CatalogError as e:
                    logger.debug(f"No {release_type} metadata for {vendor}: {e}")
                    last_error = e
                    continue
                found = [c for c in candidates if matches(c)]  # type: ignore[arg-type]
                if found:
                    return found
        if last_error is not None:
            raise last_error
        return []

    def list_distros(self) -> List[Distro]:
        return [Distro(name, "graalvm" in name.lower()) for name in self._distros(None)]
