"""
Tests for the jdkman command-line interface.
"""

import os

import pytest

from jdkman import cli
from jdkman.jdk.manager import JdkManager
from jdkman.providers import DefaultJdkProvider, LinkedJdkProvider, ManagedJdkProvider

pytestmark = [
    pytest.mark.user_interface,
    pytest.mark.skipif(os.name == "nt", reason="uses POSIX executables and links"),
]

OFFLINE_PROVIDERS = "default,linked"


@pytest.fixture
def jdks_dir(tmp_path):
    return tmp_path / "jdks"


@pytest.fixture
def offline_args(jdks_dir):
    """Global options selecting providers that never touch the network."""

    def _args(*command):
        return ["--providers", OFFLINE_PROVIDERS, "--install-path", str(jdks_dir), *command]

    return _args


@pytest.fixture
def manager(jdks_dir, fake_installer, mocker):
    """Make `JdkManager.create` hand out a manager whose catalog is a `FakeInstaller`."""
    managed = ManagedJdkProvider(jdks_dir)
    managed.use_installer(fake_installer(managed, ["21.0.2", "17.0.10"]))
    jdk_manager = JdkManager(
        [DefaultJdkProvider(jdks_dir / "default"), LinkedJdkProvider(jdks_dir), managed]
    )
    mocker.patch.object(JdkManager, "create", return_value=jdk_manager)
    return jdk_manager


class TestParser:
    def test_list_modes_are_exclusive(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["list", "--installed", "--available"])
        assert exc_info.value.code == 2

    def test_global_options(self):
        args = cli.build_parser().parse_args(
            ["--default-java-version", "17", "--providers", "managed", "home", "17+"]
        )
        assert args.default_java_version == 17
        assert args.providers == "managed"
        assert args.command == "home"
        assert args.version_or_id == "17+"


class TestOfflineCommands:
    """Commands run against real providers on a temp folder."""

    def test_no_command_prints_help(self, capsys):
        cli.main([])
        assert "usage: jdkman" in capsys.readouterr().out

    def test_list_empty(self, offline_args, capsys):
        cli.main(offline_args("list"))
        assert "No JDKs installed." in capsys.readouterr().out

    def test_link_and_list(self, offline_args, tmp_path, fake_jdk, capsys):
        home = fake_jdk(tmp_path / "elsewhere", "17.0.6")
        cli.main(offline_args("link", str(home), "mine"))
        cli.main(offline_args("list"))
        out = capsys.readouterr().out
        assert "17 (mine-linked)" in out

    def test_list_details_and_tags(self, offline_args, tmp_path, fake_jdk, capsys):
        home = fake_jdk(tmp_path / "elsewhere", "17.0.6")
        cli.main(offline_args("link", str(home), "mine"))
        capsys.readouterr()
        cli.main(offline_args("list", "--show-details", "--tags", "jdk"))
        assert "17.0.6 [fixed]" in capsys.readouterr().out
        cli.main(offline_args("list", "--tags", "graalvm"))
        assert "No JDKs installed." in capsys.readouterr().out

    def test_providers(self, offline_args, capsys):
        cli.main(offline_args("providers"))
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "default - The JDK that is set as the default JDK.",
            "linked - Any unmanaged JDKs that the user has linked to.",
        ]

    def test_default_not_set(self, offline_args, capsys):
        cli.main(offline_args("default"))
        assert "No default JDK set." in capsys.readouterr().out

    def test_unknown_provider_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--providers", "nope", "--install-path", str(tmp_path), "list"])
        assert exc_info.value.code == 1

    def test_link_to_missing_path_exits(self, offline_args, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(offline_args("link", str(tmp_path / "missing"), "mine"))
        assert exc_info.value.code == 1

    def test_config_file(self, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text(
            f"providers:\n  - linked\n  - default\ninstall_path: {tmp_path / 'jdks'}\n"
        )
        cli.main(["--config", str(config), "providers"])
        out = capsys.readouterr().out
        assert out.splitlines()[0].startswith("linked - ")

    def test_version(self, mocker):
        mocker.patch("jdkman.cli.get_jdkman_version", return_value="1.2.3")
        info = mocker.patch.object(cli.log_utils.logger, "info")
        cli.main(["version"])
        info.assert_called_once_with("jdkman v1.2.3")


class TestInstallingCommands:
    """Commands that resolve and install JDKs through a fake catalog."""

    def test_get_or_install(self, manager, jdks_dir, capsys):
        cli.main(["get-or-install", "17"])
        assert "17-managed" in capsys.readouterr().out
        assert (jdks_dir / "17" / "bin" / "javac").is_file()

    def test_home(self, manager, jdks_dir, capsys):
        cli.main(["home", "21"])
        assert capsys.readouterr().out.strip() == str(jdks_dir / "21")

    def test_set_default_and_show(self, manager, capsys):
        cli.main(["get-or-install", "17"])
        cli.main(["set-default", "21"])
        capsys.readouterr()
        cli.main(["default"])
        assert capsys.readouterr().out.startswith("21 (")
        cli.main(["default", "--version", "17"])
        assert capsys.readouterr().out.startswith("17 (")

    def test_set_versioned_default_only(self, manager):
        cli.main(["get-or-install", "17"])
        cli.main(["set-default", "--version", "21"])
        assert manager.get_default_jdk().major_version == 17
        assert manager.get_default_jdk_for_version(21) is not None

    def test_uninstall(self, manager, jdks_dir):
        cli.main(["get-or-install", "17"])
        cli.main(["uninstall", "17-managed"])
        assert not (jdks_dir / "17").exists()

    def test_uninstall_missing_exits(self, manager):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["uninstall", "15"])
        assert exc_info.value.code == 1

    def test_not_found_exits(self, manager):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["get-or-install", "15"])
        assert exc_info.value.code == 1

    def test_list_available(self, manager, capsys):
        cli.main(["list", "--available"])
        out = capsys.readouterr().out
        assert "21 (21-managed)" in out
        assert "17 (17-managed)" in out

    def test_distros(self, manager, capsys):
        cli.main(["distros"])
        assert capsys.readouterr().out.strip() == "fake"
