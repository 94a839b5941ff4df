import io
import os
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional

import platformdirs
import pytest
import requests

from jdkman.jdk.interfaces import AvailableJdk, Distro, InstalledJdk, JdkInstaller

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)

_ISOLATED_ENV_VARS = ("JDKMAN_JDKS_DIR", "JDKMAN_CACHE_DIR", "JAVA_HOME")


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used to group the test suite.

    Parameters:
        config: pytest.Config
            The pytest configuration object the markers are added to.
    """
    for marker, description in (
        ("unit", "fast tests of a single module"),
        ("integration", "tests exercising several modules on a real filesystem"),
        ("core", "tests of the resolution engine"),
        ("infrastructure", "tests of configuration, logging and remote access"),
        ("user_interface", "tests of the command-line interface"),
    ):
        config.addinivalue_line("markers", f"{marker}: {description}")


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs at a temporary folder layout and clear the environment variables jdkman reads.

    This fixture creates temp directories for cache, config and data, patches the platformdirs user_* functions to return them, removes `JDKMAN_*`, `JAVA_HOME` and every `JAVA_HOME_*` variable, and points the home folder at a temp directory so the sdkman, mise and scoop providers find nothing.
    """
    base = tmp_path_factory.mktemp("jdkman")
    cache_dir = base / "cache"
    config_dir = base / "config"
    data_dir = base / "data"
    home_dir = base / "home"

    for path in (cache_dir, config_dir, data_dir, home_dir):
        path.mkdir(parents=True, exist_ok=True)

    for name in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("JAVA_HOME_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))

    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_data_dir", lambda *_args, **_kwargs: str(data_dir)
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.head = _block_network
    requests.Session.request = _block_network


# =============================================================================
# Fake JDKs
# =============================================================================


def _write_executable(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def make_fake_jdk(
    home: Path,
    version: str = "17.0.6",
    javac: bool = True,
    graalvm: Optional[str] = None,
    native_image: bool = False,
    javafx: bool = False,
) -> Path:
    """
    Create a folder that looks like a JDK: a `release` file plus `bin/java` and `bin/javac` stubs.
    """
    home = Path(home)
    home.mkdir(parents=True, exist_ok=True)
    lines = [f'JAVA_VERSION="{version}"']
    if graalvm:
        lines.append(f'GRAALVM_VERSION="{graalvm}"')
    (home / "release").write_text("\n".join(lines) + "\n")
    _write_executable(home / "bin" / "java", "#!/bin/sh\nexit 0\n")
    if javac:
        _write_executable(home / "bin" / "javac", "#!/bin/sh\nexit 0\n")
    if native_image:
        _write_executable(home / "bin" / "native-image", "#!/bin/sh\nexit 0\n")
    if javafx:
        (home / "lib").mkdir(exist_ok=True)
        (home / "lib" / "javafx.properties").write_text("javafx.version=17\n")
    return home


@pytest.fixture
def fake_jdk():
    """Provide the `make_fake_jdk` helper to tests."""
    return make_fake_jdk


def _fake_jdk_members(version: str, root: str) -> List[tuple]:
    script = b"#!/bin/sh\nexit 0\n"
    return [
        (f"{root}/release", f'JAVA_VERSION="{version}"\n'.encode(), 0o644),
        (f"{root}/bin/java", script, 0o755),
        (f"{root}/bin/javac", script, 0o755),
    ]


def make_jdk_archive(
    target_dir: Path,
    version: str = "21.0.2",
    kind: str = "tar.gz",
    root: str = "jdk-root",
    extra: Iterable[tuple] = (),
) -> Path:
    """
    Build a small JDK archive with a single root folder.

    `extra` holds additional `(name, data, mode)` members, written as-is.
    """
    members = _fake_jdk_members(version, root) + list(extra)
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    if kind == "zip":
        archive = target_dir / f"jdk-{version}.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            for name, data, mode in members:
                info = zipfile.ZipInfo(name)
                info.external_attr = (stat.S_IFREG | mode) << 16
                zf.writestr(info, data)
        return archive
    archive = target_dir / f"jdk-{version}.tar.gz"
    with tarfile.open(archive, "w:gz") as tf:
        for name, data, mode in members:
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tf.addfile(info, io.BytesIO(data))
    return archive


@pytest.fixture
def jdk_archive():
    """Provide the `make_jdk_archive` helper to tests."""
    return make_jdk_archive


class FakeInstaller(JdkInstaller):
    """An installer whose catalog is a fixed list of versions and whose installs create fake JDKs."""

    def __init__(self, provider, versions: Iterable[str] = ()):
        self.provider = provider
        self.versions = list(versions)
        self.installed: List[str] = []

    def list_distros(self) -> List[Distro]:
        return [Distro("fake")]

    def list_available(self, distros=None, tags=None) -> List[AvailableJdk]:
        jdks = [
            AvailableJdk(self.provider, self.provider.jdk_id(v), v, frozenset({"Jdk", "Ga"}))
            for v in self.versions
        ]
        return [j for j in jdks if j.has_tags(tags)]

    def get_available_by_version(self, version, open_ended):
        matches = [
            j
            for j in self.list_available()
            if (j.major_version >= version if open_ended else j.major_version == version)
        ]
        return max(matches, key=lambda j: j.major_version) if matches else None

    def install(self, jdk, install_dir) -> InstalledJdk:
        make_fake_jdk(install_dir, jdk.version)
        self.installed.append(jdk.version)
        return self.provider.create_jdk(self.provider.jdk_id(install_dir.name), install_dir)


@pytest.fixture
def fake_installer():
    """Provide the `FakeInstaller` class to tests."""
    return FakeInstaller
