"""
Version handling for jdkman.

Parses user supplied version requests ("17", "17+") and vendor version strings
("17.0.6+7", "1.8.0_362") and provides the full-string ordering used when
sorting catalog candidates.
"""

import functools
import re
from dataclasses import dataclass
from typing import Optional

from jdkman.exceptions import InvalidInputError

_REQUESTED_VERSION_RX = re.compile(r"^\d+\+?$")
_VERSION_SPLIT_RX = re.compile(r"[-.+]")


@dataclass(frozen=True)
class VersionToken:
    """A parsed version request such as ``17`` or ``17+``."""

    major: int
    """The requested major version"""

    open: bool = False
    """Whether newer major versions are acceptable too"""

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["VersionToken"]:
        """
        Parse a version request.

        Returns:
            Optional[VersionToken]: The parsed token, or `None` when `text` isn't a version request (and should be treated as an id instead).
        """
        if text is None or not is_requested_version(text):
            return None
        return cls(min_requested_version(text), is_open_version(text))

    @classmethod
    def any(cls) -> "VersionToken":
        """The token used for an absent request: any version at all."""
        return cls(0, True)

    def matches(self, major_version: int) -> bool:
        if self.open:
            return major_version >= self.major
        return major_version == self.major

    def __str__(self) -> str:
        return f"{self.major}+" if self.open else str(self.major)


def is_requested_version(text: str) -> bool:
    return bool(_REQUESTED_VERSION_RX.match(text))


def is_open_version(text: str) -> bool:
    return text.endswith("+")


def min_requested_version(text: str) -> int:
    """
    Return the major version of a version request.

    Raises:
        InvalidInputError: If `text` is not of the form ``N`` or ``N+``.
    """
    if not is_requested_version(text):
        raise InvalidInputError(f"Not a valid version request: {text}")
    return int(text[:-1] if is_open_version(text) else text)


def parse_to_int(number: Optional[str], default: int) -> int:
    if number is not None:
        try:
            return int(number)
        except ValueError:
            pass
    return default


def parse_java_version(version: Optional[str]) -> int:
    """
    Extract the major version from a vendor version string.

    The legacy ``1.x`` scheme is honored, so ``"1.8.0_362"`` yields 8 while
    ``"17.0.6+7"`` yields 17. Unparsable input yields 0.
    """
    if version is None:
        return 0
    nums = _VERSION_SPLIT_RX.split(version)
    num = nums[1] if len(nums) > 1 and nums[0] == "1" else nums[0]
    return parse_to_int(num, 0)


def _segment_value(parts, index: int) -> int:
    if index >= len(parts):
        return -2
    return parse_to_int(parts[index], -1)


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two full version strings segment by segment.

    Segments are split on dots, dashes and plus signs. Numeric segments compare
    numerically, two non-numeric segments compare as strings, and a numeric
    segment sorts after a non-numeric one. A missing segment sorts before
    anything else, so a string that is a prefix of another sorts first.

    Returns:
        int: Negative, zero or positive like a classic ``cmp``.
    """
    parts1 = _VERSION_SPLIT_RX.split(v1)
    parts2 = _VERSION_SPLIT_RX.split(v2)
    for i in range(max(len(parts1), len(parts2))):
        n1 = _segment_value(parts1, i)
        n2 = _segment_value(parts2, i)
        if n1 == -1 and n2 == -1:
            if parts1[i] != parts2[i]:
                return -1 if parts1[i] < parts2[i] else 1
        elif n1 != n2:
            return -1 if n1 < n2 else 1
    return (len(parts1) > len(parts2)) - (len(parts1) < len(parts2))


version_sort_key = functools.cmp_to_key(compare_versions)
