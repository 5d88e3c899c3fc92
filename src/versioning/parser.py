"""Tag name parsing and formatting.

Grammar: ``[prefix@]vMAJOR.MINOR.PATCH[-preN]``. The prefix is whatever
precedes the last ``@``; it must be non-empty and free of ``@`` and
whitespace.
"""

import re
from typing import Optional

import semantic_version

from constants import Constants
from errors import ParseError, ParseErrorKind
from .models import Version

_NUMBER = r"(?:0|[1-9]\d*)"
_BODY_RE = re.compile(
    rf"^v(?P<core>{_NUMBER}\.{_NUMBER}\.{_NUMBER})"
    rf"(?:-{Constants.PRERELEASE_MARKER}(?P<pre>{_NUMBER}))?$"
)


def _split_prefix(text: str) -> tuple:
    """Return (prefix or None, body) using the last '@' as separator."""
    if "@" not in text:
        return None, text
    prefix, _, body = text.rpartition("@")
    if not prefix:
        raise ParseError(text, ParseErrorKind.INVALID_PREFIX, "prefix before '@' is empty")
    if "@" in prefix:
        raise ParseError(text, ParseErrorKind.INVALID_PREFIX, "prefix must not contain '@'")
    if any(c.isspace() for c in prefix):
        raise ParseError(text, ParseErrorKind.INVALID_PREFIX, "prefix must not contain whitespace")
    return prefix, body


def _malformed_reason(body: str) -> str:
    """Pick the most helpful message for a body that did not match."""
    if not body.startswith("v"):
        return "missing 'v' marker before the version number"
    core, sep, suffix = body[1:].partition("-")
    parts = core.split(".")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return "expected numeric MAJOR.MINOR.PATCH"
    if any(len(p) > 1 and p.startswith("0") for p in parts):
        return "version numbers must not have leading zeros"
    if sep:
        return f"prerelease suffix must look like '-{Constants.PRERELEASE_MARKER}N'"
    return "unrecognised version"


def parse(text: str) -> Version:
    """Parse a tag name into a Version.

    Raises:
        ParseError: ``MALFORMED`` for a bad version body, ``INVALID_PREFIX``
            for a bad monorepo prefix.
    """
    if text is None:
        raise ParseError("", ParseErrorKind.MALFORMED, "empty input")
    cleaned = text.strip()
    if not cleaned:
        raise ParseError(text, ParseErrorKind.MALFORMED, "empty input")

    prefix, body = _split_prefix(cleaned)
    match = _BODY_RE.match(body)
    if not match:
        raise ParseError(cleaned, ParseErrorKind.MALFORMED, _malformed_reason(body))

    try:
        core = semantic_version.Version(match.group("core"))
    except ValueError as exc:
        raise ParseError(cleaned, ParseErrorKind.MALFORMED, str(exc)) from exc

    pre = match.group("pre")
    return Version(
        major=core.major,
        minor=core.minor,
        patch=core.patch,
        prerelease=int(pre) if pre is not None else None,
        prefix=prefix,
    )


def try_parse(text: str) -> Optional[Version]:
    """Parse ``text``, returning None instead of raising."""
    try:
        return parse(text)
    except ParseError:
        return None


def format_tag(version: Version) -> str:
    """Serialize a Version back into its tag name."""
    body = f"v{version.major}.{version.minor}.{version.patch}"
    if version.prerelease is not None:
        body += f"-{Constants.PRERELEASE_MARKER}{version.prerelease}"
    if version.prefix:
        return f"{version.prefix}@{body}"
    return body
