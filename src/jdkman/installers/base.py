"""
Shared behavior of installers backed by a remote JDK catalog.
"""

from abc import abstractmethod
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from jdkman.config import split_names
from jdkman.constants import (
    RELEASE_STATUS_EA,
    RELEASE_STATUS_GA,
    TAG_EA,
    TAG_GA,
    TAG_GRAALVM,
    TAG_JAVAFX,
    TAG_JDK,
    TAG_JRE,
)
from jdkman.exceptions import CatalogError, InstallError
from jdkman.jdk.candidates import distinct_by_id, filter_ea, listing_sort, prefer_ga_sort
from jdkman.jdk.files import AtomicInstallTransaction, unpack_jdk
from jdkman.jdk.interfaces import (
    AvailableJdk,
    CandidatePackage,
    InstalledJdk,
    JdkInstaller,
    for_version,
)
from jdkman.jdk.remote import RemoteAccess
from jdkman.jdk.version import parse_java_version
from jdkman.log_utils import logger
from jdkman.providers.base import FoldersJdkProvider


def candidate_tags(candidate: CandidatePackage) -> List[str]:
    """Derive the JDK tags a catalog package will have once installed."""
    tags = []
    status = candidate.release_status.lower()
    if status == RELEASE_STATUS_GA:
        tags.append(TAG_GA)
    elif status == RELEASE_STATUS_EA:
        tags.append(TAG_EA)
    package_type = candidate.package_type.lower()
    if package_type == "jdk":
        tags.append(TAG_JDK)
    elif package_type == "jre":
        tags.append(TAG_JRE)
    if candidate.javafx_bundled:
        tags.append(TAG_JAVAFX)
    if "graalvm" in (candidate.distro or "").lower() or (
        candidate.jvm_impl or ""
    ).lower() == "graalvm":
        tags.append(TAG_GRAALVM)
    return tags


class CatalogJdkInstaller(JdkInstaller):
    """
    An installer that offers the packages of a remote catalog.

    Subclasses only know how to query their catalog; turning packages into
    available JDKs, choosing between them and the download and unpack steps are
    shared.

    Parameters:
        provider (FoldersJdkProvider): The provider the JDKs are installed for.
        remote (RemoteAccess): Used for catalog queries and downloads.
        distro (Optional[str]): Comma separated distros to offer, the catalog's default when empty.
    """

    default_distro: str = ""

    def __init__(
        self,
        provider: FoldersJdkProvider,
        remote: RemoteAccess,
        distro: Optional[str] = None,
    ):
        self.provider = provider
        self.remote = remote
        self.distro = distro or self.default_distro

    @abstractmethod
    def fetch_candidates(self, distros: List[str]) -> List[CandidatePackage]:
        """
        Query the catalog for the packages of the given distros.

        Raises:
            CatalogError: If the catalog can't be reached or answers garbage.
        """

    def fetch_candidates_for_version(
        self, version: int, open_ended: bool, distros: List[str]
    ) -> List[CandidatePackage]:
        matches = for_version(version, open_ended)
        return [
            c
            for c in self.fetch_candidates(distros)
            if matches(c)  # type: ignore[arg-type]
        ]

    def available_id(self, candidate: CandidatePackage) -> str:
        return self.provider.jdk_id(candidate.version)

    def to_available(self, candidate: CandidatePackage) -> AvailableJdk:
        return AvailableJdk(
            self.provider,
            self.available_id(candidate),
            candidate.version,
            frozenset(candidate_tags(candidate)),
            download_url=candidate.download_url,
            distro=candidate.distro,
        )

    def _process(
        self,
        candidates: List[CandidatePackage],
        sort: Callable[[List[AvailableJdk]], List[AvailableJdk]],
    ) -> List[AvailableJdk]:
        jdks = [self.to_available(c) for c in filter_ea(candidates)]
        return distinct_by_id(sort(jdks))

    def _distros(self, distros: Optional[str]) -> List[str]:
        return split_names(distros) or split_names(self.distro)

    def list_available(
        self, distros: Optional[str] = None, tags: Optional[Iterable[str]] = None
    ) -> List[AvailableJdk]:
        try:
            candidates = self.fetch_candidates(self._distros(distros))
        except CatalogError as e:
            logger.warning(f"Couldn't list available JDKs: {e}")
            return []
        jdks = self._process(candidates, listing_sort)
        return [jdk for jdk in jdks if jdk.has_tags(tags)]

    def get_available_by_version(
        self, version: int, open_ended: bool
    ) -> Optional[AvailableJdk]:
        key = prefer_ga_sort(self.provider.manager.default_java_version)
        try:
            candidates = self.fetch_candidates_for_version(
                version, open_ended, self._distros(None)
            )
        except CatalogError as e:
            logger.warning(f"Couldn't look up available JDK {version}: {e}")
            return None
        jdks = self._process(candidates, lambda js: sorted(js, key=key))
        matches = for_version(version, open_ended)
        return next((jdk for jdk in jdks if matches(jdk)), None)

    def download_url(self, jdk: AvailableJdk) -> str:
        if not jdk.download_url:
            raise InstallError(
                f"No download location known for JDK {jdk.id}",
                version=jdk.major_version,
            )
        return jdk.download_url

    def install(self, jdk: AvailableJdk, install_dir: Path) -> InstalledJdk:
        version = parse_java_version(jdk.version) or parse_java_version(jdk.id)
        logger.info(
            f"Downloading JDK {version}. Be patient, this can take several minutes..."
        )
        installed: List[InstalledJdk] = []

        def produce(tmp_dir: Path) -> None:
            url = self.download_url(jdk)
            logger.debug(f"Downloading {url}")
            archive = self.remote.download(url)
            logger.info(f"Installing JDK {version}...")
            logger.debug(f"Unpacking to {install_dir}")
            unpack_jdk(archive, tmp_dir)

        def validate(target: Path) -> None:
            new_jdk = self.provider.create_jdk(
                self.provider.jdk_id(target.name), target
            )
            if new_jdk is None:
                raise InstallError(
                    "Cannot obtain version of recently installed JDK", version=version
                )
            installed.append(new_jdk)

        AtomicInstallTransaction(install_dir, version).run(produce, validate)
        return installed[0]
