"""Tag version model, parser and resolver."""

from .models import BranchContext, BumpKind, BumpRequest, ResolutionOutcome, Version, compare
from .parser import format_tag, parse, try_parse
from .resolver import bump, resolve, resolve_after_collision, resolve_outcome

__all__ = [
    "BranchContext",
    "BumpKind",
    "BumpRequest",
    "ResolutionOutcome",
    "Version",
    "compare",
    "format_tag",
    "parse",
    "try_parse",
    "bump",
    "resolve",
    "resolve_after_collision",
    "resolve_outcome",
]
