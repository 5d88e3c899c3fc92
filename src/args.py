"""Argument parsing functionality for nutag."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog=Constants.PROGRAM_NAME,
        description=(
            "nutag - create the next semantic version tag in Git or Jujutsu"
        ),
        add_help=True,
    )

    parser.add_argument("--version",
                        action="version",
                        version=f"%(prog)s {Constants.VERSION}")

    # Bump kinds are validated together so conflicts get one clear message.
    parser.add_argument("--major",
                        dest="MAJOR",
                        help="Bump the major version",
                        action="store_true")
    parser.add_argument("--minor",
                        dest="MINOR",
                        help="Bump the minor version",
                        action="store_true")
    parser.add_argument("--patch",
                        dest="PATCH",
                        help="Bump the patch version",
                        action="store_true")
    parser.add_argument("--pre", "--prerelease",
                        dest="PRERELEASE",
                        help="Create a -preN prerelease tag",
                        action="store_true")

    parser.add_argument("-p", "--prefix",
                        dest="PREFIX",
                        help="Monorepo component prefix (tags look like PREFIX@vX.Y.Z)",
                        action="store",
                        type=str)
    parser.add_argument("-m", "--message",
                        dest="MESSAGE",
                        help="Tag message template; {tag}, {version} and {prefix} are substituted",
                        action="store",
                        type=str)
    parser.add_argument("--no-push",
                        dest="NO_PUSH",
                        help="Create the tag locally without pushing it",
                        action="store_true")
    parser.add_argument("-y", "--yes",
                        dest="YES",
                        help="Accept the suggested version without prompting",
                        action="store_true")

    parser.add_argument("--remote",
                        dest="REMOTE",
                        help=f"Remote to list tags from and push to (default: {Constants.DEFAULT_REMOTE})",
                        action="store",
                        type=str)
    parser.add_argument("--backend",
                        dest="BACKEND",
                        help="Repository backend (default: auto-detect)",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_BACKENDS,
                        default="auto")
    parser.add_argument("-C", "--repo",
                        dest="REPO",
                        help="Path inside the repository (default: current directory)",
                        action="store",
                        type=str)
    parser.add_argument("--token",
                        dest="TOKEN",
                        help="GitHub token (default: GITHUB_TOKEN, GH_TOKEN or 'gh auth token')",
                        action="store",
                        type=str)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
