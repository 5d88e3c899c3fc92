"""Exception hierarchy shared by the resolver, backends and tag engine."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class NutagError(Exception):
    """Base class for all errors raised by nutag."""


class ParseErrorKind(Enum):
    """Why a tag name failed to parse."""
    MALFORMED = "malformed"
    INVALID_PREFIX = "invalid_prefix"


class ParseError(NutagError):
    """Tag text does not follow ``[prefix@]vMAJOR.MINOR.PATCH[-preN]``."""

    def __init__(self, text: str, kind: ParseErrorKind, reason: str):
        self.text = text
        self.kind = kind
        self.reason = reason
        super().__init__(f"'{text}' is not a valid version tag: {reason}")


class InvalidBumpRequest(NutagError):
    """Conflicting bump flags were given."""


class ConfigError(NutagError):
    """Configuration file could not be used."""


class TagSourceError(NutagError):
    """Base class for tag listing failures."""


class TagSourceUnavailable(TagSourceError):
    """The remote tag listing could not be retrieved."""


class RepositoryNotFound(NutagError):
    """No Git or Jujutsu repository around the working directory."""


class CommandError(NutagError):
    """A version-control subprocess failed or could not be started."""

    def __init__(self, args, returncode: Optional[int], stderr: str = ""):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = self.stderr or "no output"
        if returncode is None:
            message = f"could not run '{self.command[0]}': {detail}"
        else:
            message = f"'{' '.join(self.command)}' exited with {returncode}: {detail}"
        super().__init__(message)


class TagCreateError(NutagError):
    """Base class for tag creation failures."""

    def __init__(self, tag: str, message: str):
        self.tag = tag
        super().__init__(message)


class TagAlreadyExists(TagCreateError):
    """A tag with the requested name is already present."""

    def __init__(self, tag: str):
        super().__init__(tag, f"tag '{tag}' already exists")


class BackendFailure(TagCreateError):
    """The backend failed to create the tag for another reason."""

    def __init__(self, tag: str, detail: str):
        self.detail = detail
        super().__init__(tag, f"could not create tag '{tag}': {detail}")


class PushError(NutagError):
    """Pushing a created tag to the remote failed."""

    def __init__(self, tag: str, remote: str, detail: str):
        self.tag = tag
        self.remote = remote
        self.detail = detail
        super().__init__(f"could not push tag '{tag}' to '{remote}': {detail}")


class OperationAborted(NutagError):
    """The operator cancelled the run before a tag was created."""
