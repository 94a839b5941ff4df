"""
Selection of catalog candidates.

A catalog query may return EA and GA builds for many major versions. These
helpers reduce such a list to one representative per major version, order it
for targeted lookups or full listings, and remove duplicate ids.
"""

from typing import Callable, Iterable, List, Sequence, Tuple, TypeVar

from jdkman.constants import TAG_EA, TAG_GA
from jdkman.jdk.interfaces import CandidatePackage, Jdk
from jdkman.jdk.version import version_sort_key

J = TypeVar("J", bound=Jdk)


def filter_ea(candidates: Sequence[CandidatePackage]) -> List[CandidatePackage]:
    """
    Drop EA builds of major versions that also have a GA build.

    The catalog order is kept. An entry survives when no entry of its major
    version was kept yet and it is either GA or its major version has no GA
    build at all. When no GA exists for a version its first EA build is kept.

    Returns:
        List[CandidatePackage]: The surviving candidates, in catalog order.
    """
    ga_versions = {c.major_version for c in candidates if c.is_ga}
    result: List[CandidatePackage] = []
    kept_versions = set()
    for candidate in candidates:
        major = candidate.major_version
        if major in kept_versions:
            continue
        if candidate.is_ga or major not in ga_versions:
            result.append(candidate)
            kept_versions.add(major)
    return result


def is_ga_jdk(jdk: Jdk) -> bool:
    return TAG_GA in jdk.tags or TAG_EA not in jdk.tags


def prefer_ga_sort(default_major: int) -> Callable[[Jdk], Tuple[int, int, int]]:
    """
    Build the sort key used for targeted lookups.

    The configured default major version sorts first, then GA before EA, then
    the newest major version.
    """

    def _key(jdk: Jdk) -> Tuple[int, int, int]:
        return (
            0 if jdk.major_version == default_major else 1,
            0 if is_ga_jdk(jdk) else 1,
            -jdk.major_version,
        )

    return _key


def listing_sort(jdks: Iterable[J]) -> List[J]:
    """Sort newest major version first, ties broken by full version comparison."""
    by_version = sorted(jdks, key=lambda j: version_sort_key(j.version), reverse=True)
    return sorted(by_version, key=lambda j: -j.major_version)


def distinct_by_id(jdks: Iterable[J]) -> List[J]:
    seen = set()
    result = []
    for jdk in jdks:
        if jdk.id not in seen:
            seen.add(jdk.id)
            result.append(jdk)
    return result
