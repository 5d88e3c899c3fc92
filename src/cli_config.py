"""Runtime configuration: config file, environment and CLI overrides.

Precedence, highest first: CLI flags, ``NUTAG_*`` environment variables,
the YAML config file, built-in defaults from ``Constants``.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from constants import Constants
from errors import ConfigError

logger = logging.getLogger(__name__)

KNOWN_KEYS = ("remote", "push", "message", "prefix", "api_url", "token_command", "log_level")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """Effective settings for one run."""
    remote: str = Constants.DEFAULT_REMOTE
    push: bool = True
    message: str = Constants.DEFAULT_MESSAGE
    prefix: Optional[str] = None
    api_url: str = Constants.GITHUB_GRAPHQL_URL
    token_command: str = Constants.DEFAULT_TOKEN_COMMAND
    log_level: str = "INFO"


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"'{key}' must be a boolean, got {value!r}")


def find_config_file(repo_root: Optional[str]) -> Optional[str]:
    """Return the first default config file present at the repository root."""
    if not repo_root:
        return None
    for candidate in Constants.CONFIG_FILES:
        path = os.path.join(repo_root, candidate)
        if os.path.isfile(path):
            return path
    return None


def load_config_file(path: str) -> Dict[str, Any]:
    """Load a YAML config file.

    Raises:
        ConfigError: If the file cannot be read or is not a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    unknown = sorted(str(k) for k in data if k not in KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in KNOWN_KEYS and v is not None}


def _from_environment() -> Dict[str, Any]:
    env: Dict[str, Any] = {}
    if os.environ.get(Constants.ENV_REMOTE):
        env["remote"] = os.environ[Constants.ENV_REMOTE]
    if os.environ.get(Constants.ENV_API_URL):
        env["api_url"] = os.environ[Constants.ENV_API_URL]
    if os.environ.get(Constants.ENV_TOKEN_COMMAND):
        env["token_command"] = os.environ[Constants.ENV_TOKEN_COMMAND]
    if os.environ.get(Constants.ENV_NO_PUSH):
        env["push"] = not _as_bool(os.environ[Constants.ENV_NO_PUSH], Constants.ENV_NO_PUSH)
    if os.environ.get(Constants.ENV_LOG_LEVEL):
        env["log_level"] = os.environ[Constants.ENV_LOG_LEVEL]
    return env


def _from_args(args) -> Dict[str, Any]:
    cli: Dict[str, Any] = {}
    if getattr(args, "REMOTE", None):
        cli["remote"] = args.REMOTE
    if getattr(args, "NO_PUSH", False):
        cli["push"] = False
    if getattr(args, "MESSAGE", None):
        cli["message"] = args.MESSAGE
    if getattr(args, "PREFIX", None):
        cli["prefix"] = args.PREFIX
    if getattr(args, "LOG_LEVEL", None):
        cli["log_level"] = args.LOG_LEVEL
    return cli


def resolve_settings(args, repo_root: Optional[str] = None) -> Settings:
    """Merge defaults, config file, environment and CLI flags.

    Raises:
        ConfigError: On an unreadable explicit config file or bad values.
    """
    merged: Dict[str, Any] = {}

    path = getattr(args, "CONFIG", None)
    if path:
        merged.update(load_config_file(path))
    else:
        default_path = find_config_file(repo_root)
        if default_path:
            logger.debug("Loading config from %s", default_path)
            merged.update(load_config_file(default_path))

    merged.update(_from_environment())
    merged.update(_from_args(args))

    if "push" in merged:
        merged["push"] = _as_bool(merged["push"], "push")
    for key in ("remote", "message", "prefix", "api_url", "token_command", "log_level"):
        if key in merged:
            merged[key] = str(merged[key])
    if "log_level" in merged:
        merged["log_level"] = merged["log_level"].upper()
    return Settings(**merged)


def _run_token_command(command: str) -> Optional[str]:
    try:
        result = subprocess.run(
            shlex.split(command),
            capture_output=True,
            text=True,
            timeout=Constants.TOKEN_COMMAND_TIMEOUT,
            check=False,
        )
    except (OSError, ValueError, subprocess.TimeoutExpired) as exc:
        logger.debug("Token command %r could not run: %s", command, exc)
        return None
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    logger.debug("Token command %r exited with %s", command, result.returncode)
    return None


def get_github_token(args, settings: Settings) -> Optional[str]:
    """Get a GitHub token from the sources below, in priority order.

    Priority:
    1. ``--token`` CLI argument
    2. ``GITHUB_TOKEN`` then ``GH_TOKEN`` environment variables
    3. Output of the token command (``NUTAG_TOKEN_COMMAND``/config, default ``gh auth token``)

    Returns:
        Token string or None if not available
    """
    cli_token = getattr(args, "TOKEN", None)
    if cli_token and cli_token.strip():
        return cli_token.strip()

    for name in (Constants.ENV_GITHUB_TOKEN, Constants.ENV_GH_TOKEN):
        value = os.environ.get(name)
        if value and value.strip():
            return value.strip()

    if settings.token_command:
        return _run_token_command(settings.token_command)
    return None
