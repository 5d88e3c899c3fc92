"""Data models for tag versions and bump resolution."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

import semantic_version

from constants import Constants
from errors import InvalidBumpRequest


class BumpKind(Enum):
    """Which component of the version a bump increments."""
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


@dataclass(frozen=True)
class BumpRequest:
    """Bump flags for one invocation."""
    kind: BumpKind = BumpKind.NONE
    prerelease: bool = False

    @classmethod
    def from_flags(
        cls,
        major: bool = False,
        minor: bool = False,
        patch: bool = False,
        prerelease: bool = False,
    ) -> "BumpRequest":
        """Build a request from CLI flags.

        Raises:
            InvalidBumpRequest: If more than one of major/minor/patch is set.
        """
        chosen = [
            kind for kind, flag in (
                (BumpKind.MAJOR, major),
                (BumpKind.MINOR, minor),
                (BumpKind.PATCH, patch),
            ) if flag
        ]
        if len(chosen) > 1:
            names = ", ".join(f"--{kind.value}" for kind in chosen)
            raise InvalidBumpRequest(f"only one bump kind may be given, got {names}")
        kind = chosen[0] if chosen else BumpKind.NONE
        return cls(kind=kind, prerelease=bool(prerelease))


@dataclass(frozen=True)
class BranchContext:
    """Branch/bookmark facts derived once per run."""
    is_release_line: bool
    name: Optional[str] = None


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """A tag version: optional monorepo prefix, numeric core, optional preN.

    Versions with different prefixes are unrelated; ordering them raises
    ValueError. Equality between them is simply False.
    """
    major: int
    minor: int
    patch: int
    prerelease: Optional[int] = None
    prefix: Optional[str] = None

    def __post_init__(self):
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if self.prerelease is not None and (
            not isinstance(self.prerelease, int) or self.prerelease < 0
        ):
            raise ValueError(f"prerelease must be a non-negative integer, got {self.prerelease!r}")
        if self.prefix is not None:
            if not self.prefix or "@" in self.prefix or any(c.isspace() for c in self.prefix):
                raise ValueError(f"invalid prefix {self.prefix!r}")

    @property
    def core(self) -> Tuple[int, int, int]:
        """The (major, minor, patch) triple."""
        return self.major, self.minor, self.patch

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @property
    def semver(self) -> semantic_version.Version:
        """Equivalent semantic_version.Version, used for ordering.

        The prerelease number becomes a separate numeric identifier so that
        pre10 sorts above pre9.
        """
        prerelease: Tuple[str, ...] = ()
        if self.prerelease is not None:
            prerelease = (Constants.PRERELEASE_MARKER, str(self.prerelease))
        return semantic_version.Version(
            major=self.major,
            minor=self.minor,
            patch=self.patch,
            prerelease=prerelease,
            build=(),
        )

    def with_core(self, major: int, minor: int, patch: int,
                  prerelease: Optional[int] = None) -> "Version":
        """Return a copy with a new core and prerelease, keeping the prefix."""
        return replace(self, major=major, minor=minor, patch=patch, prerelease=prerelease)

    def finalized(self) -> "Version":
        """Return the release this prerelease leads to."""
        return replace(self, prerelease=None)

    def _check_related(self, other: "Version") -> None:
        if self.prefix != other.prefix:
            raise ValueError(
                f"cannot compare versions with different prefixes "
                f"({self.prefix!r} vs {other.prefix!r})"
            )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        self._check_related(other)
        return self.semver < other.semver

    def __str__(self) -> str:
        from .parser import format_tag  # pylint: disable=import-outside-toplevel
        return format_tag(self)


def compare(a: Version, b: Version) -> int:
    """Three-way comparison: -1, 0 or 1.

    Raises:
        ValueError: If the versions carry different prefixes.
    """
    if a == b:
        return 0
    return -1 if a < b else 1


@dataclass(frozen=True)
class ResolutionOutcome:
    """A candidate version and the sorted versions it was computed against."""
    candidate: Version
    existing: Tuple[Version, ...] = field(default_factory=tuple)

    @property
    def highest(self) -> Optional[Version]:
        return self.existing[-1] if self.existing else None
