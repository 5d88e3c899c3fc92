"""Next-version resolution.

``bump`` applies a BumpRequest to one version; ``resolve`` picks the highest
existing version and applies the branch policy before bumping. Both are pure.
"""

import logging
from dataclasses import replace
from typing import Iterable, Optional

from common.logging_utils import extra_context, is_debug_enabled
from .models import BranchContext, BumpKind, BumpRequest, ResolutionOutcome, Version

logger = logging.getLogger(__name__)


def bump(version: Version, request: BumpRequest) -> Version:
    """Return the version that follows ``version`` under ``request``."""
    kind = request.kind
    if kind == BumpKind.MAJOR:
        core = (version.major + 1, 0, 0)
    elif kind == BumpKind.MINOR:
        core = (version.major, version.minor + 1, 0)
    elif kind == BumpKind.PATCH:
        core = (version.major, version.minor, version.patch + 1)
    elif request.prerelease:
        if version.is_prerelease:
            # Consecutive prereleases on the same line keep counting up.
            return version.with_core(*version.core, prerelease=version.prerelease + 1)
        core = (version.major, version.minor, version.patch + 1)
    elif version.is_prerelease:
        return version.finalized()
    else:
        core = (version.major, version.minor, version.patch + 1)

    return version.with_core(*core, prerelease=0 if request.prerelease else None)


def effective_request(request: BumpRequest, context: BranchContext) -> BumpRequest:
    """Apply the branch policy: off the release line, plain runs become prereleases."""
    if (
        not context.is_release_line
        and request.kind == BumpKind.NONE
        and not request.prerelease
    ):
        return replace(request, prerelease=True)
    return request


def resolve(
    existing: Iterable[Version],
    request: BumpRequest,
    context: BranchContext,
    prefix: Optional[str] = None,
) -> Version:
    """Compute the candidate next version.

    Args:
        existing: Versions already tagged for ``prefix``.
        request: Bump flags.
        context: Branch context of the working copy.
        prefix: Prefix for the synthetic v0.0.0 baseline when nothing exists.

    Returns:
        The candidate Version.
    """
    versions = list(existing)
    highest = max(versions) if versions else Version(0, 0, 0, prefix=prefix)
    applied = effective_request(request, context)
    candidate = bump(highest, applied)
    if is_debug_enabled(logger):
        logger.debug(
            "Resolved candidate version",
            extra=extra_context(
                event="decision",
                component="resolver",
                action="resolve",
                highest=str(highest),
                candidate=str(candidate),
                bump=applied.kind.value,
                prerelease=applied.prerelease,
                release_line=context.is_release_line,
            )
        )
    return candidate


def resolve_outcome(
    existing: Iterable[Version],
    request: BumpRequest,
    context: BranchContext,
    prefix: Optional[str] = None,
) -> ResolutionOutcome:
    """Like ``resolve`` but keeps the sorted set the candidate came from."""
    ordered = tuple(sorted(set(existing)))
    candidate = resolve(ordered, request, context, prefix=prefix)
    return ResolutionOutcome(candidate=candidate, existing=ordered)


def resolve_after_collision(
    outcome: ResolutionOutcome,
    collided: Version,
    request: BumpRequest,
    context: BranchContext,
    prefix: Optional[str] = None,
) -> ResolutionOutcome:
    """Re-resolve after ``collided`` turned out to be taken.

    The collided version joins the known set, so the new candidate is
    distinct from it whenever it shares the requested prefix.
    """
    known = set(outcome.existing)
    if collided.prefix == prefix:
        known.add(collided)
    return resolve_outcome(known, request, context, prefix=prefix)
