"""GitHub GraphQL client for repository tag listings.

Provides a lightweight client that pages through the ``refs/tags/``
connection of a repository. Authentication is required: the GraphQL API
rejects anonymous requests.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterator, Optional, Tuple

from constants import Constants
from common.http_client import HttpRequestError, post_json
from common.logging_utils import extra_context, is_debug_enabled, redact
from errors import TagSourceUnavailable

logger = logging.getLogger(__name__)

TAGS_QUERY = """
query($owner: String!, $name: String!, $first: Int!, $after: String, $query: String) {
  repository(owner: $owner, name: $name) {
    refs(refPrefix: "refs/tags/", first: $first, after: $after, query: $query) {
      pageInfo { hasNextPage endCursor }
      nodes { name }
    }
  }
}
"""

_REMOTE_PATTERNS = (
    re.compile(r"^https?://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"),
    re.compile(r"^ssh://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"),
    re.compile(r"^(?:[^@/]+@)?(?P<host>[^/:]+):(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"),
)


def parse_github_remote(url: str, host: str = Constants.GITHUB_HOST) -> Tuple[str, str]:
    """Extract (owner, name) from a GitHub remote URL.

    Accepts HTTPS, ``ssh://`` and scp-style (``git@github.com:o/r.git``) URLs.

    Raises:
        TagSourceUnavailable: If the URL does not point at ``host``.
    """
    cleaned = (url or "").strip()
    for pattern in _REMOTE_PATTERNS:
        match = pattern.match(cleaned)
        if match and match.group("host").lower() == host.lower():
            return match.group("owner"), match.group("name")
    raise TagSourceUnavailable(
        f"remote '{redact(cleaned) or '<empty>'}' is not a {host} repository"
    )


class GitHubClient:
    """Minimal GraphQL client for tag listing."""

    def __init__(self, token: Optional[str], api_url: Optional[str] = None,
                 page_size: int = Constants.GRAPHQL_PAGE_SIZE):
        """Initialize GitHub client.

        Args:
            token: GitHub token; required for GraphQL.
            api_url: GraphQL endpoint (defaults to Constants.GITHUB_GRAPHQL_URL)
            page_size: Tags requested per page.
        """
        self.token = token
        self.api_url = api_url or Constants.GITHUB_GRAPHQL_URL
        self.page_size = page_size

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization."""
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": f"{Constants.PROGRAM_NAME}/{Constants.VERSION}",
        }

    def _query(self, variables: Dict[str, Any], repo_label: str) -> Dict[str, Any]:
        """Run the tag query once and return the ``refs`` connection."""
        try:
            status, _, data = post_json(
                self.api_url,
                context="github",
                payload={"query": TAGS_QUERY, "variables": variables},
                headers=self._get_headers(),
            )
        except HttpRequestError as exc:
            raise TagSourceUnavailable(f"could not list tags for {repo_label}: {exc.detail}") from exc

        if status != 200:
            detail = ""
            if isinstance(data, dict):
                detail = str(data.get("message") or "")
            raise TagSourceUnavailable(
                f"could not list tags for {repo_label}: HTTP {status}"
                + (f" ({detail})" if detail else "")
            )
        if not isinstance(data, dict):
            raise TagSourceUnavailable(f"could not list tags for {repo_label}: response was not JSON")

        errors = data.get("errors")
        if errors:
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise TagSourceUnavailable(f"could not list tags for {repo_label}: {messages}")

        repository = (data.get("data") or {}).get("repository")
        if not repository:
            raise TagSourceUnavailable(f"repository {repo_label} not found or not accessible")
        refs = repository.get("refs")
        if not isinstance(refs, dict):
            raise TagSourceUnavailable(f"could not list tags for {repo_label}: malformed response")
        return refs

    def iter_tag_names(self, owner: str, name: str,
                       query: Optional[str] = None) -> Iterator[str]:
        """Yield tag names page by page.

        Args:
            owner: Repository owner
            name: Repository name
            query: Optional server-side name filter (substring match)

        Raises:
            TagSourceUnavailable: On missing token or any failed page.
        """
        repo_label = f"{owner}/{name}"
        if not self.token:
            raise TagSourceUnavailable(
                f"no GitHub token available to list tags for {repo_label}; "
                f"set {Constants.ENV_GITHUB_TOKEN} or log in with 'gh auth login'"
            )

        cursor = None
        page = 0
        while True:
            page += 1
            refs = self._query(
                {
                    "owner": owner,
                    "name": name,
                    "first": self.page_size,
                    "after": cursor,
                    "query": query,
                },
                repo_label,
            )
            nodes = refs.get("nodes") or []
            if is_debug_enabled(logger):
                logger.debug(
                    "Fetched tag page",
                    extra=extra_context(
                        event="tag_page",
                        component="github",
                        action="iter_tag_names",
                        repository=repo_label,
                        page=page,
                        count=len(nodes),
                    )
                )
            for node in nodes:
                if isinstance(node, dict) and node.get("name"):
                    yield node["name"]

            page_info = refs.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                return
            cursor = page_info.get("endCursor")
            if not cursor:
                return
