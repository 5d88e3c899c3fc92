"""Abstract repository context shared by the Git and Jujutsu backends."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from versioning.models import BranchContext


class RepositoryContext(ABC):
    """Interface the tag engine needs from a version-control backend.

    Implementations: GitRepository, JujutsuRepository, and in-memory fakes
    in the tests.
    """

    #: Short backend identifier used in logs ("git" or "jj").
    backend = ""

    def __init__(self, root: str, remote: str):
        self.root = root
        self.remote = remote

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def current_branch_or_bookmark(self) -> Optional[str]:
        """Name of the checked-out branch (Git) or current bookmark (jj)."""

    @abstractmethod
    def is_release_line(self) -> bool:
        """True when the working copy sits on the release line."""

    @abstractmethod
    def target_revision(self, is_release_line: bool) -> str:
        """Revision the new tag should point at."""

    @abstractmethod
    def tag_exists_locally(self, name: str) -> bool:
        """Check if a tag with this name exists in the local store."""

    @abstractmethod
    def remote_url(self) -> str:
        """URL of the configured remote."""

    def branch_context(self) -> BranchContext:
        """Derive the BranchContext for this run."""
        return BranchContext(
            is_release_line=self.is_release_line(),
            name=self.current_branch_or_bookmark(),
        )

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def create_annotated_tag(self, name: str, target: str, message: str) -> None:
        """Create an annotated tag.

        Raises:
            TagAlreadyExists: If the name is taken.
            BackendFailure: For any other failure.
        """

    @abstractmethod
    def push_tag(self, name: str) -> None:
        """Push a tag to the remote.

        Raises:
            PushError: If the push fails.
        """
