"""Repository backends (Git and Jujutsu) behind one interface."""
from __future__ import annotations

import logging
import os
from typing import Optional, Tuple

from constants import Backends, Constants
from errors import RepositoryNotFound
from .base import RepositoryContext
from .git import GitRepository
from .jujutsu import JujutsuRepository

logger = logging.getLogger(__name__)

_MARKERS = (
    (".jj", Backends.JUJUTSU),
    (".git", Backends.GIT),
)


def find_repository_root(start: str, backend: str = "auto") -> Tuple[str, Backends]:
    """Walk up from ``start`` to the first directory holding a repository.

    A ``.jj`` directory wins over ``.git`` so colocated workspaces use jj.

    Raises:
        RepositoryNotFound: If no repository of the requested kind is found.
    """
    current = os.path.abspath(start)
    wanted = [
        (marker, kind) for marker, kind in _MARKERS
        if backend == "auto" or kind.value == backend
    ]
    while True:
        for marker, kind in wanted:
            if os.path.exists(os.path.join(current, marker)):
                return current, kind
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    label = "Git or Jujutsu" if backend == "auto" else backend
    raise RepositoryNotFound(f"no {label} repository found at or above {os.path.abspath(start)}")


def detect_repository(
    start: Optional[str] = None,
    backend: str = "auto",
    remote: str = Constants.DEFAULT_REMOTE,
) -> RepositoryContext:
    """Build the RepositoryContext for the repository around ``start``."""
    root, kind = find_repository_root(start or os.getcwd(), backend)
    logger.debug("Using %s repository at %s", kind.value, root)
    if kind == Backends.JUJUTSU:
        return JujutsuRepository(root, remote)
    return GitRepository(root, remote)


__all__ = [
    "RepositoryContext",
    "GitRepository",
    "JujutsuRepository",
    "detect_repository",
    "find_repository_root",
]
