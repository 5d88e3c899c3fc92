"""Subprocess helper for git/jj invocations."""
from __future__ import annotations

import logging
import os
import subprocess
from typing import Optional, Sequence

from common.logging_utils import extra_context, is_debug_enabled, redact, Timer
from errors import CommandError

logger = logging.getLogger(__name__)


def _command_env():
    # Untranslated messages; callers match on stderr text.
    return {**os.environ, "LC_ALL": "C"}


def run_command(
    args: Sequence[str],
    *,
    cwd: Optional[str] = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run a version-control command and capture its output as text.

    Args:
        args: Command tokens, e.g. ["git", "tag", "-l"].
        cwd: Working directory.
        check: Raise CommandError on a non-zero exit status.

    Returns:
        The completed process.

    Raises:
        CommandError: If the binary is missing, or it fails and ``check`` is set.
    """
    with Timer() as t:
        try:
            result = subprocess.run(
                list(args),
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
                env=_command_env(),
            )
        except OSError as exc:  # binary missing or not executable
            raise CommandError(args, None, str(exc)) from exc

    if is_debug_enabled(logger):
        logger.debug(
            "Command finished",
            extra=extra_context(
                event="subprocess",
                component="vcs",
                action=args[0],
                command=" ".join(args),
                returncode=result.returncode,
                duration_ms=t.duration_ms(),
                stderr=redact(result.stderr.strip()) or None,
            )
        )
    if check and result.returncode != 0:
        raise CommandError(args, result.returncode, result.stderr)
    return result
