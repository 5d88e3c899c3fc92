"""Tag creation engine.

Drives one run through an explicit state machine::

    FETCHING -> RESOLVING -> CONFIRMING -> CREATING -> PUSHING -> DONE
                                 ^             |
                                 +-- collision-+

Parse errors keep the run in CONFIRMING; a name collision in CREATING goes
back to CONFIRMING with a fresh candidate. Nothing is written before the
operator confirms, and the only retry is the operator picking another version.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from errors import ConfigError, ParseError, PushError, TagAlreadyExists
from prompt import Prompt
from repository.tag_source import TagSource
from vcs.base import RepositoryContext
from versioning.models import BumpRequest, ResolutionOutcome, Version
from versioning.parser import format_tag, parse
from versioning.resolver import resolve_after_collision, resolve_outcome

logger = logging.getLogger(__name__)

CONFIRM_LABEL = "Tag to create"


class EngineState(Enum):
    """States of a tagging run."""
    FETCHING = "fetching"
    RESOLVING = "resolving"
    CONFIRMING = "confirming"
    CREATING = "creating"
    PUSHING = "pushing"
    DONE = "done"


@dataclass
class TagResult:
    """What a successful run produced."""
    tag: str
    version: Version
    target: str
    outcome: ResolutionOutcome
    pushed: bool = False
    push_error: Optional[PushError] = None
    attempts: int = 1


def render_message(template: str, version: Version) -> str:
    """Fill ``{tag}``, ``{version}`` and ``{prefix}`` in a tag message template.

    Raises:
        ConfigError: If the template uses any other placeholder.
    """
    bare = format_tag(replace(version, prefix=None))[1:]
    try:
        return template.format(tag=format_tag(version), version=bare, prefix=version.prefix or "")
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigError(f"invalid tag message template {template!r}: {exc}") from exc


@dataclass
class TagEngine:
    """Resolve, confirm, create and push one tag.

    Args:
        tag_source: Remote listing of existing tags.
        repository: Backend used for branch facts and tag writes.
        prompt: Confirmation/edit service.
        push: Push the tag after creating it.
        message: Tag message template.
    """
    tag_source: TagSource
    repository: RepositoryContext
    prompt: Prompt
    push: bool = True
    message: str = Constants.DEFAULT_MESSAGE
    state: Optional[EngineState] = field(default=None, init=False)
    history: List[EngineState] = field(default_factory=list, init=False)

    def __post_init__(self):
        render_message(self.message, Version(0, 0, 0))

    def _enter(self, state: EngineState) -> None:
        if is_debug_enabled(logger):
            logger.debug(
                "State transition",
                extra=extra_context(
                    event="state",
                    component="engine",
                    action="transition",
                    source=self.state.value if self.state else None,
                    destination=state.value,
                )
            )
        self.state = state
        self.history.append(state)

    def _confirm(self, candidate: Version, error: Optional[str]) -> Version:
        """Ask until the operator answers with a parseable tag."""
        initial = str(candidate)
        while True:
            answer = self.prompt.ask(CONFIRM_LABEL, initial, error)
            try:
                return parse(answer)
            except ParseError as exc:
                logger.debug("Rejected tag input %r: %s", answer, exc.reason)
                error = str(exc)
                initial = answer

    def _create(self, tag: str, target: str, version: Version) -> None:
        if self.repository.tag_exists_locally(tag):
            raise TagAlreadyExists(tag)
        self.repository.create_annotated_tag(tag, target, render_message(self.message, version))

    def run(self, request: BumpRequest, prefix: Optional[str] = None) -> TagResult:
        """Run the whole tagging flow.

        Raises:
            TagSourceError: Existing tags could not be listed; nothing created.
            OperationAborted: The operator cancelled; nothing created.
            BackendFailure: Tag creation failed for a reason other than a collision.
        """
        self.history.clear()
        self._enter(EngineState.FETCHING)
        existing = list(self.tag_source.list_versions(prefix))
        logger.info("Found %d existing tag(s)%s", len(existing),
                    f" for prefix '{prefix}'" if prefix else "")

        self._enter(EngineState.RESOLVING)
        context = self.repository.branch_context()
        outcome = resolve_outcome(existing, request, context, prefix=prefix)
        target = self.repository.target_revision(context.is_release_line)
        if outcome.highest is not None:
            logger.info("Highest existing version: %s", outcome.highest)
        if not context.is_release_line:
            logger.info("Not on the release line (%s); defaulting to a prerelease",
                        context.name or "no branch")

        error: Optional[str] = None
        attempts = 0
        while True:
            self._enter(EngineState.CONFIRMING)
            version = self._confirm(outcome.candidate, error)
            tag = str(version)

            self._enter(EngineState.CREATING)
            attempts += 1
            try:
                self._create(tag, target, version)
            except TagAlreadyExists as exc:
                logger.warning("%s", exc)
                error = f"{exc}, choose another version"
                outcome = resolve_after_collision(outcome, version, request, context, prefix=prefix)
                continue
            break

        result = TagResult(tag=tag, version=version, target=target,
                           outcome=outcome, attempts=attempts)
        if self.push:
            self._enter(EngineState.PUSHING)
            try:
                self.repository.push_tag(tag)
                result.pushed = True
            except PushError as exc:
                logger.error("%s; the local tag %s was kept", exc, tag)
                result.push_error = exc
        else:
            logger.info("Push disabled; tag %s only exists locally", tag)

        self._enter(EngineState.DONE)
        return result
