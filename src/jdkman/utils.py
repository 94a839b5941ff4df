# src/jdkman/utils.py
import importlib.metadata
import os
import platform
import re
import subprocess  # nosec B404
from pathlib import Path
from typing import Iterator, Optional

from jdkman.log_utils import logger

_NON_ALNUM_RX = re.compile(r"[^a-z0-9]+")

_ARCH_PATTERNS = (
    ("x64", re.compile(r"^(x8664|amd64|ia32e|em64t|x64)$")),
    ("x32", re.compile(r"^(x8632|x86|i[3-6]86|ia32|x32)$")),
    ("aarch64", re.compile(r"^(aarch64)$")),
    ("arm", re.compile(r"^(arm|armv7l|armv7)$")),
    ("ppc64", re.compile(r"^(ppc64)$")),
    ("ppc64le", re.compile(r"^(ppc64le)$")),
    ("s390x", re.compile(r"^(s390x)$")),
    ("arm64", re.compile(r"^(arm64)$")),
    ("riscv64", re.compile(r"^(riscv64)$")),
)

_WINDOWS_EXECUTABLE_EXTENSIONS = (".exe", ".bat", ".cmd", ".ps1")

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE: Optional[str] = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `jdkman/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version("jdkman")
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"jdkman/{app_version}"

    return _USER_AGENT_CACHE


def get_os() -> str:
    """
    Identify the operating system by name matching.

    Returns:
        str: One of "linux", "mac", "windows", "aix" or "unknown".
    """
    os_name = _NON_ALNUM_RX.sub("", platform.system().lower())
    if os_name.startswith("mac") or os_name.startswith("osx") or os_name == "darwin":
        return "mac"
    if os_name.startswith("linux"):
        return "linux"
    if os_name.startswith("win"):
        return "windows"
    if os_name.startswith("aix"):
        return "aix"
    logger.debug(f"Unknown OS: {os_name}")
    return "unknown"


def get_arch() -> str:
    """
    Identify the CPU architecture by name matching.

    Returns:
        str: One of "x32", "x64", "aarch64", "arm", "arm64", "ppc64", "ppc64le", "s390x", "riscv64" or "unknown".
    """
    arch = _NON_ALNUM_RX.sub("", platform.machine().lower())
    for name, pattern in _ARCH_PATTERNS:
        if pattern.match(arch):
            return name
    logger.debug(f"Unknown Arch: {arch}")
    return "unknown"


def is_windows() -> bool:
    return get_os() == "windows"


def is_mac() -> bool:
    return get_os() == "mac"


def _executables(base: Path) -> Iterator[Path]:
    if is_windows():
        for ext in _WINDOWS_EXECUTABLE_EXTENSIONS:
            yield Path(f"{base}{ext}")
    else:
        yield base


def _is_executable(file: Path) -> bool:
    if not file.is_file():
        return False
    if is_windows():
        return file.name.lower().endswith(_WINDOWS_EXECUTABLE_EXTENSIONS)
    return os.access(file, os.X_OK)


def search_path(cmd: str, paths: Optional[str] = None) -> Optional[Path]:
    """
    Search a PATH-style list of directories for an executable.

    Parameters:
        cmd (str): Name of the executable, without any Windows extension.
        paths (Optional[str]): `os.pathsep` separated directories; defaults to the `PATH` environment variable.

    Returns:
        Optional[Path]: The first matching executable, or `None` if none was found.
    """
    if paths is None:
        paths = os.environ.get("PATH", "")
    for directory in paths.split(os.pathsep):
        if not directory:
            continue
        for candidate in _executables(Path(directory) / cmd):
            if _is_executable(candidate):
                return candidate
    return None


def run_command(*cmd: str) -> Optional[str]:
    """
    Run a command and capture its combined stdout and stderr.

    Returns:
        Optional[str]: The command output with trailing whitespace removed, or `None` if the command could not be started or exited with a non-zero status.
    """
    try:
        result = subprocess.run(  # nosec B603
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except (OSError, ValueError) as e:
        logger.debug(f"Error running: {' '.join(cmd)}: {e}")
        return None
    if result.returncode != 0:
        logger.debug(f"Command failed: #{result.returncode} - {result.stdout}")
        return None
    return result.stdout.rstrip()
