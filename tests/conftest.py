"""Shared fakes and fixtures for the nutag test suite."""

from typing import Iterable, List, Optional

import pytest

from constants import Constants
from errors import OperationAborted, PushError, TagAlreadyExists, TagSourceUnavailable
from prompt import Prompt
from repository.tag_source import TagSource
from vcs.base import RepositoryContext

_ENV_VARS = (
    Constants.ENV_LOG_LEVEL,
    Constants.ENV_API_URL,
    Constants.ENV_TOKEN_COMMAND,
    Constants.ENV_REMOTE,
    Constants.ENV_NO_PUSH,
    Constants.ENV_GITHUB_TOKEN,
    Constants.ENV_GH_TOKEN,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeGitHubClient:
    """Stands in for GitHubClient, serving a fixed tag list."""

    def __init__(self, tags: Iterable[str] = (), error: Optional[Exception] = None):
        self.tags = list(tags)
        self.error = error
        self.queries: List[Optional[str]] = []

    def iter_tag_names(self, owner, name, query=None):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        for tag in self.tags:
            yield tag


class FakeRepository(RepositoryContext):
    """In-memory repository context.

    Args:
        branch: Current branch/bookmark name.
        local_tags: Tags already present locally.
        remote_only: Names that collide only when created (a racing operator).
        push_error: Detail for a failing push, or None.
        create_error: Exception raised by every create call, or None.
    """

    backend = "fake"

    def __init__(self, branch="main", local_tags=(), remote_only=(),
                 push_error=None, create_error=None, release_target="HEAD"):
        super().__init__("/repo", "origin")
        self.branch = branch
        self.local_tags = set(local_tags)
        self.remote_only = set(remote_only)
        self.push_error = push_error
        self.create_error = create_error
        self.release_target = release_target
        self.created = []
        self.create_attempts = []
        self.pushed = []

    def current_branch_or_bookmark(self):
        return self.branch

    def is_release_line(self):
        return self.branch in Constants.RELEASE_BRANCHES

    def target_revision(self, is_release_line):
        return self.release_target if is_release_line else "@"

    def tag_exists_locally(self, name):
        return name in self.local_tags

    def remote_url(self):
        return "git@github.com:octo/widgets.git"

    def create_annotated_tag(self, name, target, message):
        self.create_attempts.append(name)
        if self.create_error is not None:
            raise self.create_error
        if name in self.remote_only:
            self.remote_only.discard(name)
            self.local_tags.add(name)
            raise TagAlreadyExists(name)
        self.local_tags.add(name)
        self.created.append((name, target, message))

    def push_tag(self, name):
        if self.push_error:
            raise PushError(name, self.remote, self.push_error)
        self.pushed.append(name)


class ScriptedPrompt(Prompt):
    """Prompt answering from a list of canned responses.

    ``None`` accepts the suggestion; running out of responses aborts.
    """

    def __init__(self, responses=None):
        self.responses = list(responses if responses is not None else [None])
        self.calls = []

    def ask(self, label, initial, error=None):
        self.calls.append({"label": label, "initial": initial, "error": error})
        if not self.responses:
            raise OperationAborted("no more scripted answers")
        answer = self.responses.pop(0)
        return initial if answer is None else answer


@pytest.fixture
def make_source():
    """Build a TagSource over a fixed tag list."""
    def _make(tags=(), error=None):
        return TagSource(FakeGitHubClient(tags, error), "octo", "widgets")
    return _make


@pytest.fixture
def unavailable_source(make_source):
    return make_source(error=TagSourceUnavailable("could not list tags for octo/widgets: HTTP 502"))
