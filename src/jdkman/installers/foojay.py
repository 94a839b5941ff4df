"""
Installer for the JDKs offered by the Foojay Disco API.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from jdkman.constants import (
    FOOJAY_DEFAULT_DISTRO,
    FOOJAY_DISTRIBUTIONS_URL,
    FOOJAY_JDK_DOWNLOAD_URL,
    FOOJAY_JDK_VERSIONS_URL,
    FOOJAY_PACKAGE_REDIRECT_URL,
    RELEASE_STATUS_GA,
)
from jdkman.exceptions import CatalogError, HTTPError
from jdkman.installers.base import CatalogJdkInstaller
from jdkman.jdk.interfaces import AvailableJdk, CandidatePackage, Distro
from jdkman.jdk.version import parse_java_version
from jdkman.log_utils import logger
from jdkman.utils import get_arch, get_os


def get_url_params(
    version: Optional[int], os_name: str, arch: str, distro: str
) -> Dict[str, str]:
    """
    Build the query parameters shared by the packages and directuris endpoints.

    Only directly downloadable, non JavaFX JDK archives of the latest release of
    each major version are asked for.
    """
    params: Dict[str, str] = {}
    if version is not None:
        params["version"] = str(version)
    params["distro"] = distro
    params["archive_type"] = "zip" if os_name == "windows" else "tar.gz"
    params["architecture"] = arch
    params["package_type"] = "jdk"
    params["operating_system"] = os_name
    if os_name == "windows":
        params["libc_type"] = "c_std_lib"
    elif os_name == "mac":
        params["libc_type"] = "libc"
    else:
        params["libc_type"] = "glibc"
    params["javafx_bundled"] = "false"
    params["latest"] = "available"
    params["release_status"] = "ga,ea"
    params["directly_downloadable"] = "true"
    return params


def get_versions_url(distro: str) -> str:
    return FOOJAY_JDK_VERSIONS_URL + urlencode(
        get_url_params(None, get_os(), get_arch(), distro)
    )


def get_download_url(version: int, distro: str) -> str:
    return FOOJAY_JDK_DOWNLOAD_URL + urlencode(
        get_url_params(version, get_os(), get_arch(), distro)
    )


def parse_package(entry: Dict[str, Any]) -> Optional[CandidatePackage]:
    """Turn one entry of a packages response into a candidate, `None` if unusable."""
    version = entry.get("java_version")
    if not isinstance(version, str) or not version:
        return None
    links = entry.get("links") or {}
    download_url = links.get("pkg_download_redirect")
    package_id = entry.get("id")
    if not download_url and package_id:
        download_url = FOOJAY_PACKAGE_REDIRECT_URL.format(package_id=package_id)
    major = entry.get("major_version")
    return CandidatePackage(
        version=version,
        release_status=entry.get("release_status") or RELEASE_STATUS_GA,
        package_type=entry.get("package_type") or "jdk",
        javafx_bundled=bool(entry.get("javafx_bundled")),
        download_url=download_url,
        distro=entry.get("distribution"),
        package_id=package_id,
        major=major if isinstance(major, int) else None,
    )


class FoojayJdkInstaller(CatalogJdkInstaller):
    """
    Downloads and installs the JDKs listed by the Foojay Disco API.

    All distros are asked for in a single packages query; the result holds the
    latest GA and EA package of every major version.
    """

    default_distro = FOOJAY_DEFAULT_DISTRO

    def _read_result(self, url: str) -> List[Dict[str, Any]]:
        data = self.remote.fetch_json(url)
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, list):
            raise HTTPError(f"Unexpected response from {url}", url=url)
        return [r for r in result if isinstance(r, dict)]

    def fetch_candidates(self, distros: List[str]) -> List[CandidatePackage]:
        url = get_versions_url(",".join(distros))
        candidates = []
        for entry in self._read_result(url):
            candidate = parse_package(entry)
            if candidate is not None:
                candidates.append(candidate)
        logger.debug(f"Foojay returned {len(candidates)} packages")
        return candidates

    def list_distros(self) -> List[Distro]:
        url = FOOJAY_DISTRIBUTIONS_URL + urlencode(
            {"include_versions": "false", "include_synonyms": "false"}
        )
        try:
            result = self._read_result(url)
        except CatalogError as e:
            logger.warning(f"Couldn't list available distributions: {e}")
            return []
        distros = []
        for entry in result:
            name = entry.get("api_parameter") or entry.get("name")
            if name:
                distros.append(Distro(name, "graalvm" in name.lower()))
        return distros

    def download_url(self, jdk: AvailableJdk) -> str:
        if jdk.download_url:
            return jdk.download_url
        # Let the API pick the package when the listing didn't provide one
        version = parse_java_version(jdk.id)
        return get_download_url(version, jdk.distro or self.distro)
