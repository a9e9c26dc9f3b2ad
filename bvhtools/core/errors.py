"""
Error types raised while reading, decoding and recording BVH data.

Every failure propagates synchronously to the caller; nothing here is retried
or recovered from.
"""

from typing import Optional


class BVHError(Exception):
    """Base class for all bvhtools errors."""


class ParseError(BVHError):
    """
    Grammar violation in BVH text.

    Attributes:
        offset: Cursor position at which parsing failed
        expected: Description of the token that was expected
        context: Excerpt of the text around the failure
    """

    def __init__(self, offset: int, expected: str, context: str = ""):
        self.offset = offset
        self.expected = expected
        self.context = context
        super().__init__(
            f"Failed to parse BVH data at position {offset}. "
            f"Expected {expected} around here: {context}"
        )


# Structural violations (missing keyword, brace, bad channel count) use the
# base class directly.
StructuralParseError = ParseError


class NumericParseError(ParseError):
    """Malformed integer or float at a known position."""


class NameResolutionError(BVHError, LookupError):
    """A BVH joint name has no matching rig node."""

    def __init__(self, name: str, parent: Optional[str] = None):
        self.name = name
        self.parent = parent
        if parent is None:
            message = f'No root bone "{name}" found.'
        else:
            message = f'Could not find bone "{name}" under bone "{parent}".'
        super().__init__(message)


class PreconditionError(BVHError, RuntimeError):
    """An operation was called before the state it needs was set up."""
