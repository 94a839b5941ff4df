# src/jdkman/cli.py

import argparse
import sys
from typing import List, Optional

from jdkman import log_utils
from jdkman.config import Settings, load_settings, split_names
from jdkman.exceptions import JdkManagerError, JdkNotFoundError
from jdkman.jdk.interfaces import Jdk
from jdkman.jdk.manager import JdkManager


def get_jdkman_version() -> str:
    """
    Retrieve the installed jdkman package version.

    Returns:
        version (str): The installed jdkman version string, or "unknown" if the version cannot be determined.
    """
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("jdkman")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jdkman", description="jdkman - Resolve, install and link JDKs"
    )
    parser.add_argument("--config", help="Path of the YAML configuration file")
    parser.add_argument(
        "--providers",
        help="Comma separated list of providers to use, e.g. 'default,linked,managed;installer=metadata'",
    )
    parser.add_argument(
        "--install-path", help="Folder where JDKs are installed and linked"
    )
    parser.add_argument(
        "--default-java-version",
        type=int,
        help="Major Java version used when nothing better matches",
    )
    parser.add_argument(
        "--log-level", help="Logging level (DEBUG, INFO, WARNING or ERROR)"
    )
    subparsers = parser.add_subparsers(dest="command")

    get_parser = subparsers.add_parser(
        "get-or-install", help="Get a JDK, installing it if necessary"
    )
    get_parser.add_argument(
        "version_or_id", nargs="?", help="Version ('17', '17+') or id of the JDK"
    )

    list_parser = subparsers.add_parser("list", help="List installed or available JDKs")
    list_mode_group = list_parser.add_mutually_exclusive_group()
    list_mode_group.add_argument(
        "--installed",
        action="store_true",
        help="List the installed JDKs (the default)",
    )
    list_mode_group.add_argument(
        "--available",
        action="store_true",
        help="List the JDKs available for installation",
    )
    list_parser.add_argument(
        "--distro", help="Comma separated distributions to list available JDKs for"
    )
    list_parser.add_argument(
        "--tags", help="Comma separated tags every listed JDK must have"
    )
    list_parser.add_argument(
        "--show-details", action="store_true", help="Show versions, homes and tags"
    )

    uninstall_parser = subparsers.add_parser("uninstall", help="Uninstall a JDK")
    uninstall_parser.add_argument("version_or_id", help="Version or id of the JDK")

    link_parser = subparsers.add_parser(
        "link", help="Link a JDK installed elsewhere under a name"
    )
    link_parser.add_argument("path", help="Home folder of the JDK")
    link_parser.add_argument("id", help="Name for the link")

    set_default_parser = subparsers.add_parser(
        "set-default", help="Set the default JDK, installing it if necessary"
    )
    set_default_parser.add_argument("version_or_id", help="Version or id of the JDK")
    set_default_parser.add_argument(
        "--version",
        action="store_true",
        help="Only set the default for the JDK's major version",
    )

    default_parser = subparsers.add_parser("default", help="Show the default JDK")
    default_parser.add_argument(
        "--version", type=int, help="Show the default for this major version"
    )

    home_parser = subparsers.add_parser(
        "home", help="Print the home folder of a JDK, installing it if necessary"
    )
    home_parser.add_argument(
        "version_or_id", nargs="?", help="Version ('17', '17+') or id of the JDK"
    )

    subparsers.add_parser("distros", help="List the available JDK distributions")
    subparsers.add_parser("providers", help="List the providers in use")
    subparsers.add_parser("version", help="Display jdkman version")
    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    if args.providers:
        settings.providers = args.providers
    if args.install_path:
        settings.install_path = args.install_path
    if args.default_java_version is not None:
        settings.default_java_version = args.default_java_version
    if args.log_level:
        settings.log_level = args.log_level
    return settings


def create_manager(args: argparse.Namespace) -> JdkManager:
    settings = _load_settings(args)
    if settings.log_level:
        log_utils.set_log_level(settings.log_level)
    if settings.log_dir:
        log_utils.add_file_logging(settings.log_dir, settings.log_level or "INFO")
    return JdkManager.create(settings)


def _describe(jdk: Jdk, show_details: bool) -> str:
    return str(jdk) if show_details else f"{jdk.major_version} ({jdk.id})"


def run_list(manager: JdkManager, args: argparse.Namespace) -> None:
    tags = split_names(args.tags)
    if args.available:
        jdks: List[Jdk] = list(manager.list_available_jdks(args.distro, tags))
        if not jdks:
            print("No JDKs available for installation.")
    else:
        jdks = [j for j in manager.list_installed_jdks() if j.has_tags(tags)]
        if not jdks:
            print("No JDKs installed.")
    for jdk in jdks:
        print(_describe(jdk, args.show_details))


def run_uninstall(manager: JdkManager, version_or_id: str) -> None:
    jdk = manager.get_installed_jdk(version_or_id)
    if jdk is None:
        raise JdkNotFoundError(
            f"No installed JDK found for: {version_or_id}", requested=version_or_id
        )
    jdk.uninstall()


def run_set_default(manager: JdkManager, version_or_id: str, versioned: bool) -> None:
    jdk = manager.get_or_install_jdk(version_or_id)
    if versioned:
        manager.set_default_jdk_for_version(jdk)
    else:
        manager.set_default_jdk(jdk)


def run_default(manager: JdkManager, major_version: Optional[int]) -> None:
    if major_version is not None:
        jdk = manager.get_default_jdk_for_version(major_version)
    else:
        jdk = manager.get_default_jdk()
    if jdk is None:
        print("No default JDK set.")
    else:
        print(str(jdk))


def run_command(manager: JdkManager, args: argparse.Namespace) -> None:
    if args.command == "get-or-install":
        print(str(manager.get_or_install_jdk(args.version_or_id)))
    elif args.command == "list":
        run_list(manager, args)
    elif args.command == "uninstall":
        run_uninstall(manager, args.version_or_id)
    elif args.command == "link":
        jdk = manager.link_to_existing_jdk(args.path, args.id)
        print(str(jdk))
    elif args.command == "set-default":
        run_set_default(manager, args.version_or_id, args.version)
    elif args.command == "default":
        run_default(manager, args.version)
    elif args.command == "home":
        print(str(manager.get_or_install_jdk(args.version_or_id).home))
    elif args.command == "distros":
        for distro in manager.list_available_distros():
            print(f"{distro.name}{' (GraalVM)' if distro.is_graalvm else ''}")
    elif args.command == "providers":
        for provider in manager.providers:
            print(f"{provider.name} - {provider.description}")


def main(argv: Optional[List[str]] = None) -> None:
    # Logging is automatically initialized by importing log_utils

    """
    Entry point for the jdkman command-line interface.

    Parses command-line arguments, builds a JdkManager from the configuration
    file and the global options, and dispatches the subcommand. Failures are
    logged and end the process with exit status 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return
    if args.command == "version":
        log_utils.logger.info(f"jdkman v{get_jdkman_version()}")
        return

    try:
        manager = create_manager(args)
        run_command(manager, args)
    except JdkManagerError as e:
        log_utils.logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
