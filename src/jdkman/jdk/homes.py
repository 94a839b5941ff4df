"""
Inspection of JDK home folders.

Determines the version of a JDK by reading its ``release`` file, falling back
to running ``bin/java -version``, and derives the tags of a JDK from what is
present in its folder.
"""

import re
from pathlib import Path
from typing import Callable, FrozenSet, Optional, Set

from jdkman.constants import (
    JAVAFX_PROPERTIES,
    RELEASE_FILE_NAME,
    RELEASE_GRAALVM_KEY,
    RELEASE_VERSION_KEYS,
    TAG_EA,
    TAG_GA,
    TAG_GRAALVM,
    TAG_JAVAFX,
    TAG_JDK,
    TAG_JRE,
    TAG_NATIVE,
)
from jdkman.log_utils import logger
from jdkman.utils import run_command, search_path

_QUOTED_RX = re.compile(r'"([^"]+)"')
_EA_RX = re.compile(r"(^|[-+.])ea($|[-+.\d])", re.IGNORECASE)


def parse_java_output(output: Optional[str]) -> Optional[str]:
    """Return the first double-quoted token of `output`, as printed by ``java -version``."""
    if output:
        match = _QUOTED_RX.search(output)
        if match:
            return match.group(1)
    return None


def _read_release_value(
    home: Path, line_filter: Callable[[str], bool]
) -> Optional[str]:
    try:
        with open(home / RELEASE_FILE_NAME, "r", encoding="utf-8") as f:
            for line in f:
                if line_filter(line):
                    return parse_java_output(line)
    except (OSError, UnicodeDecodeError):
        logger.debug(f"Unable to read 'release' file in path: {home}")
    return None


def read_version_from_release_file(home: Path) -> Optional[str]:
    return _read_release_value(
        Path(home), lambda line: line.startswith(RELEASE_VERSION_KEYS)
    )


def read_graalvm_version_from_release_file(home: Path) -> Optional[str]:
    return _read_release_value(
        Path(home), lambda line: line.startswith(RELEASE_GRAALVM_KEY)
    )


def read_version_from_java_command(home: Path) -> Optional[str]:
    java_cmd = search_path("java", str(Path(home) / "bin"))
    version = None
    if java_cmd is not None:
        version = parse_java_output(run_command(str(java_cmd), "-version"))
    if version is None:
        logger.debug(f"Unable to obtain version from: '{java_cmd} -version'")
    return version


def resolve_version_from_path(home: Path) -> Optional[str]:
    """
    Determine the raw version string of the JDK installed in `home`.

    The ``release`` metadata file is consulted first; when it is missing or has
    no version line the runtime itself is asked.

    Returns:
        Optional[str]: The vendor version string (e.g. ``"17.0.6"``), or `None` if it couldn't be determined.
    """
    version = read_version_from_release_file(home)
    if version is None:
        version = read_version_from_java_command(home)
    return version


def has_java_cmd(home: Path) -> bool:
    return search_path("java", str(Path(home) / "bin")) is not None


def has_javac_cmd(home: Path) -> bool:
    return search_path("javac", str(Path(home) / "bin")) is not None


def has_native_image_cmd(home: Path) -> bool:
    return search_path("native-image", str(Path(home) / "bin")) is not None


def is_early_access(version: Optional[str]) -> bool:
    return bool(version) and bool(_EA_RX.search(version))


def release_tag(version: Optional[str]) -> str:
    return TAG_EA if is_early_access(version) else TAG_GA


def determine_tags_from_home(
    home: Optional[Path], version: Optional[str] = None
) -> FrozenSet[str]:
    """
    Derive the tags of the JDK installed in `home`.

    A compiler means ``Jdk``, a runtime alone means ``Jre``. A GraalVM marker in
    the release file adds ``Graalvm`` (plus ``Native`` when ``native-image`` is
    present), a ``lib/javafx.properties`` file adds ``Javafx`` and the version
    string decides between ``Ga`` and ``Ea``.
    """
    if home is None:
        return frozenset()
    home = Path(home)
    tags: Set[str] = set()
    if has_javac_cmd(home):
        tags.add(TAG_JDK)
    elif has_java_cmd(home):
        tags.add(TAG_JRE)
    if read_graalvm_version_from_release_file(home) is not None:
        tags.add(TAG_GRAALVM)
        if has_native_image_cmd(home):
            tags.add(TAG_NATIVE)
    if home.joinpath(*JAVAFX_PROPERTIES).exists():
        tags.add(TAG_JAVAFX)
    tags.add(release_tag(version))
    return frozenset(tags)


def jre2jdk(jdk_home: Path) -> Path:
    """
    Map a ``jre`` folder inside an old-style JDK to the JDK's real home.

    Paths that already contain a ``release`` file are returned unchanged.
    """
    jdk_home = Path(jdk_home)
    if not (jdk_home / RELEASE_FILE_NAME).is_file():
        jh = jdk_home.absolute()
        try:
            jh = jh.resolve(strict=True)
        except OSError:
            pass
        if jh.name == "jre" and (jh.parent / RELEASE_FILE_NAME).is_file():
            return jh.parent
    return jdk_home
