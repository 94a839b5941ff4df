"""
Tests for platform detection and process helpers.
"""

import os
import stat

import pytest

from jdkman import utils

pytestmark = [pytest.mark.unit, pytest.mark.infrastructure]


class TestPlatformDetection:
    @pytest.mark.parametrize(
        "system, expected",
        [
            ("Linux", "linux"),
            ("Darwin", "mac"),
            ("Mac OS X", "mac"),
            ("Windows", "windows"),
            ("AIX", "aix"),
            ("SunOS", "unknown"),
        ],
    )
    def test_get_os(self, mocker, system, expected):
        mocker.patch("jdkman.utils.platform.system", return_value=system)
        assert utils.get_os() == expected

    @pytest.mark.parametrize(
        "machine, expected",
        [
            ("x86_64", "x64"),
            ("AMD64", "x64"),
            ("i686", "x32"),
            ("aarch64", "aarch64"),
            ("arm64", "arm64"),
            ("armv7l", "arm"),
            ("ppc64le", "ppc64le"),
            ("s390x", "s390x"),
            ("riscv64", "riscv64"),
            ("mips", "unknown"),
        ],
    )
    def test_get_arch(self, mocker, machine, expected):
        mocker.patch("jdkman.utils.platform.machine", return_value=machine)
        assert utils.get_arch() == expected

    def test_is_windows_and_mac(self, mocker):
        mocker.patch("jdkman.utils.platform.system", return_value="Darwin")
        assert utils.is_mac()
        assert not utils.is_windows()


@pytest.mark.skipif(os.name == "nt", reason="uses POSIX executables")
class TestSearchPath:
    """Test looking up executables on a PATH-style list."""

    def _executable(self, path, mode=0o755):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n")
        path.chmod(mode)
        return path

    def test_first_match_wins(self, tmp_path):
        first = self._executable(tmp_path / "a" / "java")
        self._executable(tmp_path / "b" / "java")
        paths = os.pathsep.join(["", str(tmp_path / "missing"), str(tmp_path / "a"), str(tmp_path / "b")])
        assert utils.search_path("java", paths) == first

    def test_skips_non_executable(self, tmp_path):
        self._executable(tmp_path / "a" / "java", mode=stat.S_IRUSR | stat.S_IWUSR)
        second = self._executable(tmp_path / "b" / "java")
        paths = os.pathsep.join([str(tmp_path / "a"), str(tmp_path / "b")])
        assert utils.search_path("java", paths) == second

    def test_uses_path_variable(self, tmp_path, monkeypatch):
        javac = self._executable(tmp_path / "bin" / "javac")
        monkeypatch.setenv("PATH", str(tmp_path / "bin"))
        assert utils.search_path("javac") == javac
        assert utils.search_path("jshell") is None


@pytest.mark.skipif(os.name == "nt", reason="uses POSIX shell commands")
class TestRunCommand:
    def test_output_is_captured(self, tmp_path):
        script = tmp_path / "tool"
        script.write_text("#!/bin/sh\necho out\necho err >&2\n")
        script.chmod(0o755)
        assert utils.run_command(str(script)) == "out\nerr"

    def test_failure_returns_none(self, tmp_path):
        script = tmp_path / "tool"
        script.write_text("#!/bin/sh\nexit 3\n")
        script.chmod(0o755)
        assert utils.run_command(str(script)) is None

    def test_missing_command_returns_none(self, tmp_path):
        assert utils.run_command(str(tmp_path / "nothing-here")) is None


def test_get_user_agent(mocker):
    mocker.patch.object(utils, "_USER_AGENT_CACHE", None)
    mocker.patch("jdkman.utils.importlib.metadata.version", return_value="0.4.0")
    assert utils.get_user_agent() == "jdkman/0.4.0"
    # cached
    mocker.patch("jdkman.utils.importlib.metadata.version", return_value="9.9.9")
    assert utils.get_user_agent() == "jdkman/0.4.0"


def test_get_user_agent_unknown_version(mocker):
    mocker.patch.object(utils, "_USER_AGENT_CACHE", None)
    mocker.patch(
        "jdkman.utils.importlib.metadata.version",
        side_effect=utils.importlib.metadata.PackageNotFoundError("jdkman"),
    )
    assert utils.get_user_agent() == "jdkman/unknown"
