"""Jujutsu backend.

Bookmarks, revisions and remotes come from the ``jj`` client. Jujutsu has
no annotated tags of its own, so tags are written to and pushed from the
Git store backing the repository (``jj git root``), then imported back.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from constants import Backends, Constants
from errors import BackendFailure, CommandError, PushError, TagAlreadyExists
from vcs.base import RepositoryContext
from vcs.process import run_command

logger = logging.getLogger(__name__)

_ROOT_COMMIT_ID = "0" * 40
_ALREADY_EXISTS = "already exists"
_BOOKMARKS_TEMPLATE = 'local_bookmarks.map(|b| b.name()).join("\\n")'


class JujutsuRepository(RepositoryContext):
    """Repository context for a Jujutsu workspace."""

    backend = Backends.JUJUTSU.value

    def __init__(self, root: str, remote: str):
        super().__init__(root, remote)
        self._git_dir: Optional[str] = None

    def _jj(self, *args: str, check: bool = True):
        return run_command(["jj", *args], cwd=self.root, check=check)

    def _git(self, *args: str, check: bool = True):
        return run_command(["git", "--git-dir", self.git_dir, *args], cwd=self.root, check=check)

    @property
    def git_dir(self) -> str:
        """Path of the Git store behind this workspace."""
        if self._git_dir is None:
            self._git_dir = self._jj("git", "root").stdout.strip()
        return self._git_dir

    def bookmarks_at_current_change(self) -> List[str]:
        result = self._jj("log", "-r", "@", "--no-graph", "-T", _BOOKMARKS_TEMPLATE)
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def current_branch_or_bookmark(self) -> Optional[str]:
        """A bookmark on the current change, preferring the release bookmark."""
        bookmarks = self.bookmarks_at_current_change()
        if not bookmarks:
            return None
        if Constants.RELEASE_BOOKMARK in bookmarks:
            return Constants.RELEASE_BOOKMARK
        return bookmarks[0]

    def is_release_line(self) -> bool:
        return Constants.RELEASE_BOOKMARK in self.bookmarks_at_current_change()

    def target_revision(self, is_release_line: bool) -> str:
        return "trunk()" if is_release_line else "@"

    def resolve_commit(self, revision: str) -> str:
        """Commit id of a single-revision revset."""
        result = self._jj("log", "-r", revision, "--no-graph", "-T", "commit_id")
        commit = result.stdout.strip()
        if not commit or commit == _ROOT_COMMIT_ID:
            raise CommandError(
                ["jj", "log", "-r", revision], 1,
                f"revision '{revision}' does not resolve to a taggable commit",
            )
        return commit

    def tag_exists_locally(self, name: str) -> bool:
        result = self._git("rev-parse", "-q", "--verify", f"refs/tags/{name}", check=False)
        return result.returncode == 0

    def remote_url(self) -> str:
        result = self._jj("git", "remote", "list")
        for line in result.stdout.splitlines():
            parts = line.split(None, 1)
            if len(parts) == 2 and parts[0] == self.remote:
                return parts[1].strip()
        raise CommandError(
            ["jj", "git", "remote", "list"], 1, f"no remote named '{self.remote}'"
        )

    def create_annotated_tag(self, name: str, target: str, message: str) -> None:
        try:
            commit = self.resolve_commit(target)
            self._git("tag", "-a", name, commit, "-m", message)
        except CommandError as exc:
            if _ALREADY_EXISTS in exc.stderr:
                raise TagAlreadyExists(name) from exc
            raise BackendFailure(name, exc.stderr or str(exc)) from exc
        logger.info("Created tag %s at %s (%s)", name, target, commit[:12])

        result = self._jj("git", "import", check=False)
        if result.returncode != 0:
            logger.warning("Tag %s created but 'jj git import' failed: %s",
                           name, result.stderr.strip())

    def push_tag(self, name: str) -> None:
        try:
            self._git("push", self.remote, f"refs/tags/{name}")
        except CommandError as exc:
            raise PushError(name, self.remote, exc.stderr or str(exc)) from exc
        logger.info("Pushed tag %s to %s", name, self.remote)
