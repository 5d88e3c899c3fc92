"""Prefix-aware view over the remote tag listing."""
from __future__ import annotations

import logging
from typing import Iterator, Optional

from common.logging_utils import extra_context, is_debug_enabled
from errors import ParseError
from repository.github import GitHubClient
from versioning.models import Version
from versioning.parser import parse

logger = logging.getLogger(__name__)


class TagSource:
    """All tags of one GitHub repository, filtered by monorepo prefix.

    Listings are generators: lazy, finite and consumed once. Any failure to
    fetch a page raises TagSourceUnavailable; there is no empty fallback.
    """

    def __init__(self, client: GitHubClient, owner: str, name: str):
        self.client = client
        self.owner = owner
        self.name = name

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.name}"

    def _versions(self, prefix: Optional[str]) -> Iterator[tuple]:
        # Narrow server side; the exact prefix check below is authoritative.
        query = f"{prefix}@" if prefix else None
        for tag in self.client.iter_tag_names(self.owner, self.name, query=query):
            try:
                version = parse(tag)
            except ParseError as exc:
                if is_debug_enabled(logger):
                    logger.debug(
                        "Skipping non-version tag",
                        extra=extra_context(
                            event="skip",
                            component="tag_source",
                            action="list_tags",
                            tag=tag,
                            reason=exc.reason,
                        )
                    )
                continue
            if version.prefix == prefix:
                yield tag, version

    def list_tags(self, prefix: Optional[str] = None) -> Iterator[str]:
        """Yield tag names whose prefix equals ``prefix`` exactly.

        Without a prefix only unprefixed tags match.
        """
        for tag, _ in self._versions(prefix):
            yield tag

    def list_versions(self, prefix: Optional[str] = None) -> Iterator[Version]:
        """Yield the parsed versions of ``list_tags(prefix)``."""
        for _, version in self._versions(prefix):
            yield version
