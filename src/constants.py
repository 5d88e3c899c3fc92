"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    BACKEND_ERROR = 1
    CONNECTION_ERROR = 2
    PUSH_FAILED = 3
    USAGE_ERROR = 4
    ABORTED = 130


class Backends(Enum):
    """Repository backends supported by the program.

    Args:
        Enum (string): Repository backends supported by the program.
    """

    GIT = "git"
    JUJUTSU = "jj"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PROGRAM_NAME = "nutag"
    VERSION = "0.1.1"
    SUPPORTED_BACKENDS = ["auto", Backends.GIT.value, Backends.JUJUTSU.value]
    RELEASE_BRANCHES = ("main", "master")
    RELEASE_BOOKMARK = "main"
    PRERELEASE_MARKER = "pre"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests

    # Tagging defaults
    DEFAULT_REMOTE = "origin"
    DEFAULT_MESSAGE = "Release {tag}"
    CONFIG_FILES = (".nutag.yml", ".nutag.yaml")

    # GitHub API constants
    GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"
    GITHUB_HOST = "github.com"
    GRAPHQL_PAGE_SIZE = 100
    DEFAULT_TOKEN_COMMAND = "gh auth token"
    TOKEN_COMMAND_TIMEOUT = 10

    # Environment variables
    ENV_LOG_LEVEL = "NUTAG_LOG_LEVEL"
    ENV_API_URL = "NUTAG_GITHUB_API_URL"
    ENV_TOKEN_COMMAND = "NUTAG_TOKEN_COMMAND"
    ENV_REMOTE = "NUTAG_REMOTE"
    ENV_NO_PUSH = "NUTAG_NO_PUSH"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    ENV_GH_TOKEN = "GH_TOKEN"
