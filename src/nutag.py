"""nutag - create the next semantic version tag for a Git or Jujutsu repository.

    Returns:
        int: Exit code (see constants.ExitCodes)
"""
import logging
import os
import sys

from args import parse_args
from cli_config import get_github_token, resolve_settings
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from engine import TagEngine
from errors import (
    BackendFailure,
    CommandError,
    ConfigError,
    InvalidBumpRequest,
    NutagError,
    OperationAborted,
    RepositoryNotFound,
    TagSourceError,
)
from prompt import AutoAcceptPrompt, TerminalPrompt
from repository.github import GitHubClient, parse_github_remote
from repository.tag_source import TagSource
from vcs import detect_repository, find_repository_root
from versioning.models import BumpRequest, Version

logger = logging.getLogger(__name__)


def _validate_prefix(prefix):
    if prefix is None:
        return
    try:
        Version(0, 0, 0, prefix=prefix)
    except ValueError as exc:
        raise ConfigError(f"invalid prefix {prefix!r}: must be non-empty without '@' or whitespace") from exc


def _apply_log_level(level_name):
    level_value = getattr(logging, str(level_name).upper(), None)
    if isinstance(level_value, int):
        logging.getLogger().setLevel(level_value)


def build_engine(args):
    """Wire repository, settings, tag source and prompt into a TagEngine.

    Returns:
        tuple: (engine, settings)
    """
    start = args.REPO or os.getcwd()
    root, _ = find_repository_root(start, args.BACKEND)
    settings = resolve_settings(args, repo_root=root)
    _apply_log_level(settings.log_level)
    _validate_prefix(settings.prefix)

    repository = detect_repository(root, backend=args.BACKEND, remote=settings.remote)
    owner, name = parse_github_remote(repository.remote_url())
    client = GitHubClient(get_github_token(args, settings), api_url=settings.api_url)
    source = TagSource(client, owner, name)
    prompt = AutoAcceptPrompt() if args.YES else TerminalPrompt()

    if is_debug_enabled(logger):
        logger.debug(
            "Engine configured",
            extra=extra_context(
                event="configure",
                component="cli",
                action="build_engine",
                backend=repository.backend,
                repository=source.repository,
                remote=settings.remote,
                push=settings.push,
                prefix=settings.prefix,
            )
        )
    return TagEngine(source, repository, prompt, push=settings.push, message=settings.message), settings


def run(args):
    """Run one tagging flow and map failures onto exit codes."""
    try:
        request = BumpRequest.from_flags(
            major=args.MAJOR, minor=args.MINOR, patch=args.PATCH, prerelease=args.PRERELEASE
        )
        engine, settings = build_engine(args)
        result = engine.run(request, prefix=settings.prefix)
    except (InvalidBumpRequest, ConfigError) as e:
        logging.error("%s", e)
        return ExitCodes.USAGE_ERROR.value
    except TagSourceError as e:
        logging.error("%s", e)
        logging.error("No tag was created.")
        return ExitCodes.CONNECTION_ERROR.value
    except OperationAborted as e:
        logging.warning("Aborted: %s. No tag was created.", e)
        return ExitCodes.ABORTED.value
    except (RepositoryNotFound, CommandError, BackendFailure) as e:
        logging.error("%s", e)
        return ExitCodes.BACKEND_ERROR.value
    except NutagError as e:
        logging.error("%s", e)
        return ExitCodes.BACKEND_ERROR.value

    sys.stdout.write(f"{result.tag}\n")
    if result.push_error is not None:
        return ExitCodes.PUSH_FAILED.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    log_file = getattr(args, "LOG_FILE", None)
    try:
        configure_logging(log_file)
    except OSError as e:
        logging.error("cannot open log file %s: %s", log_file, e)
        sys.exit(ExitCodes.USAGE_ERROR.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
