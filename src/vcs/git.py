"""Git backend using the git command-line client."""
from __future__ import annotations

import logging
from typing import Optional

from constants import Backends, Constants
from errors import BackendFailure, CommandError, PushError, TagAlreadyExists
from vcs.base import RepositoryContext
from vcs.process import run_command

logger = logging.getLogger(__name__)

_ALREADY_EXISTS = "already exists"


class GitRepository(RepositoryContext):
    """Repository context for a plain Git working tree."""

    backend = Backends.GIT.value

    def _git(self, *args: str, check: bool = True):
        return run_command(["git", *args], cwd=self.root, check=check)

    def current_branch_or_bookmark(self) -> Optional[str]:
        """Checked-out branch, or None on a detached HEAD."""
        result = self._git("symbolic-ref", "--short", "-q", "HEAD", check=False)
        branch = result.stdout.strip()
        if result.returncode != 0 or not branch:
            return None
        return branch

    def is_release_line(self) -> bool:
        return self.current_branch_or_bookmark() in Constants.RELEASE_BRANCHES

    def target_revision(self, is_release_line: bool) -> str:
        return "HEAD"

    def tag_exists_locally(self, name: str) -> bool:
        result = self._git("rev-parse", "-q", "--verify", f"refs/tags/{name}", check=False)
        return result.returncode == 0

    def remote_url(self) -> str:
        return self._git("remote", "get-url", self.remote).stdout.strip()

    def create_annotated_tag(self, name: str, target: str, message: str) -> None:
        try:
            self._git("tag", "-a", name, target, "-m", message)
        except CommandError as exc:
            if _ALREADY_EXISTS in exc.stderr:
                raise TagAlreadyExists(name) from exc
            raise BackendFailure(name, exc.stderr or str(exc)) from exc
        logger.info("Created tag %s at %s", name, target)

    def push_tag(self, name: str) -> None:
        try:
            self._git("push", self.remote, f"refs/tags/{name}")
        except CommandError as exc:
            raise PushError(name, self.remote, exc.stderr or str(exc)) from exc
        logger.info("Pushed tag %s to %s", name, self.remote)
