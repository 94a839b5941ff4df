"""
Providers that find a JDK through the environment.

These providers never install anything; they report the JDK currently on the
``PATH``, the one ``JAVA_HOME`` points to, the ones any ``JAVA_HOME_*`` variable
points to, and the runtime the ``java`` command reports as its home.
"""

import os
from abc import abstractmethod
from pathlib import Path
from typing import List, Optional

from jdkman.constants import (
    JAVA_HOME_ENV_VAR,
    JAVA_HOME_PREFIX,
    JAVA_HOME_PROPERTY,
    PROVIDER_CURRENT,
    PROVIDER_JAVAHOME,
    PROVIDER_MULTIHOME,
    PROVIDER_PATH,
)
from jdkman.jdk.homes import jre2jdk
from jdkman.jdk.interfaces import InstalledJdk, JdkProvider
from jdkman.log_utils import logger
from jdkman.utils import run_command, search_path


class _SingleJdkProvider(JdkProvider):
    """A provider that reports at most one JDK, whose id is the provider name."""

    has_fixed_versions = False

    @abstractmethod
    def find_home(self) -> Optional[Path]:
        """Return the JDK home this provider points at, if any."""

    def list_installed(self) -> List[InstalledJdk]:
        home = self.find_home()
        if home is None or not home.is_dir():
            return []
        jdk = self.create_jdk(self.name, home, fixed_version=False)
        return [jdk] if jdk is not None else []


def parse_java_home_property(output: Optional[str]) -> Optional[Path]:
    """Extract ``java.home`` from ``java -XshowSettings:properties`` output."""
    if not output:
        return None
    prefix = f"{JAVA_HOME_PROPERTY} = "
    for line in output.splitlines():
        line = line.strip()
        if line.startswith(prefix):
            value = line[len(prefix) :].strip()
            return Path(value) if value else None
    return None


class CurrentJdkProvider(_SingleJdkProvider):
    """The runtime the ``java`` command on the PATH runs with."""

    @property
    def name(self) -> str:
        return PROVIDER_CURRENT

    @property
    def description(self) -> str:
        return "The JDK that runs when invoking java from the command line."

    def find_home(self) -> Optional[Path]:
        java = search_path("java")
        if java is None:
            return None
        output = run_command(str(java), "-XshowSettings:properties", "-version")
        home = parse_java_home_property(output)
        if home is None:
            logger.debug(f"Unable to determine the home of {java}")
            return None
        return jre2jdk(home)


class JavaHomeJdkProvider(_SingleJdkProvider):
    """The JDK pointed to by ``JAVA_HOME``."""

    @property
    def name(self) -> str:
        return PROVIDER_JAVAHOME

    @property
    def description(self) -> str:
        return "The JDK pointed to by the JAVA_HOME environment variable."

    def find_home(self) -> Optional[Path]:
        java_home = os.environ.get(JAVA_HOME_ENV_VAR)
        return Path(java_home) if java_home else None


class PathJdkProvider(_SingleJdkProvider):
    """The JDK whose ``javac`` is found on the ``PATH``."""

    @property
    def name(self) -> str:
        return PROVIDER_PATH

    @property
    def description(self) -> str:
        return "The JDK pointed to by the PATH environment variable."

    def find_home(self) -> Optional[Path]:
        javac = search_path("javac")
        if javac is None:
            return None
        # Follow links such as /usr/bin/javac to the real JDK
        return Path(os.path.realpath(javac)).parent.parent


class MultiHomeJdkProvider(JdkProvider):
    """
    JDKs pointed to by ``JAVA_HOME_*`` variables, as set up by CI runners.

    ``JAVA_HOME_17_X64`` yields the JDK ``multihome_17_x64``.
    """

    has_fixed_versions = False

    @property
    def name(self) -> str:
        return PROVIDER_MULTIHOME

    @property
    def description(self) -> str:
        return "JDKs pointed to by any environment variable starting with JAVA_HOME_"

    def is_valid_id(self, jdk_id: str) -> bool:
        return jdk_id.startswith(f"{self.name}_")

    def list_installed(self) -> List[InstalledJdk]:
        result: List[InstalledJdk] = []
        for key, value in sorted(os.environ.items()):
            if not key.startswith(JAVA_HOME_PREFIX) or not value:
                continue
            jdk_home = Path(value)
            if not jdk_home.is_dir():
                continue
            suffix = key[len(JAVA_HOME_PREFIX) :].lower()
            jdk = self.create_jdk(f"{self.name}_{suffix}", jdk_home, fixed_version=False)
            if jdk is not None:
                result.append(jdk)
        return result
