"""
Character-level scanner for BVH text.

The scanner owns an immutable text buffer and a cursor that only moves
forward. Primitive readers return a ``(value, ok)`` pair; callers must test
``ok`` rather than the value, because the failure values (-1, NaN) can also
be legitimate results. ``require`` and ``expect`` turn a failed primitive
into a ParseError that carries the offset and a context excerpt.
"""

import math
from typing import Optional, Tuple

from bvhtools.core.errors import NumericParseError, ParseError
from bvhtools.data.document import ChannelKind

WHITESPACE = " \t\n\r"
INLINE_WHITESPACE = " \t"
NEWLINES = "\n\r"

# Fractional digits past this count are consumed but ignored.
MAX_FRACTION_DIGITS = 128

# Half-width of the excerpt included in error messages.
CONTEXT_RADIUS = 15


def fold(c: str) -> str:
    """Fold a character for keyword comparison: ASCII upper case, tab and newlines to space."""
    if c in "\t\n\r":
        return " "
    if "a" <= c <= "z":
        return chr(ord(c) - 32)
    return c


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


class Scanner:
    """Forward-only cursor over BVH text."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> Optional[str]:
        """Character at the cursor without consuming it, None at the end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def expect_literal(self, literal: str) -> bool:
        """
        Consume ``literal`` case-insensitively.

        On a mismatch the cursor is restored to where the attempt started.
        """
        start = self.pos
        text = self.text
        for c in literal:
            if self.pos >= len(text) or fold(c) != fold(text[self.pos]):
                self.pos = start
                return False
            self.pos += 1
        return True

    def skip_whitespace(self):
        text = self.text
        while self.pos < len(text) and text[self.pos] in WHITESPACE:
            self.pos += 1

    def skip_inline_whitespace(self):
        text = self.text
        while self.pos < len(text) and text[self.pos] in INLINE_WHITESPACE:
            self.pos += 1

    def expect_newline(self):
        """Skip spaces and tabs, then require at least one newline character."""
        self.skip_inline_whitespace()
        text = self.text
        found = False
        while self.pos < len(text) and text[self.pos] in NEWLINES:
            found = True
            self.pos += 1
        self.require("newline", found)

    def read_line_string(self) -> Tuple[str, bool]:
        """Read up to the end of the line and trim; fails on an empty result."""
        text = self.text
        start = self.pos
        while self.pos < len(text) and text[self.pos] not in NEWLINES:
            self.pos += 1
        value = text[start:self.pos].strip()
        return value, len(value) != 0

    def read_int(self) -> Tuple[int, bool]:
        """
        Read an optionally signed decimal integer.

        Returns:
            (value, True) on success, (-1, False) when no digit was found
        """
        text = self.text
        start = self.pos
        negate = False
        digit_found = False
        value = 0

        if self.pos < len(text) and text[self.pos] == "-":
            negate = True
            self.pos += 1
        elif self.pos < len(text) and text[self.pos] == "+":
            self.pos += 1

        while self.pos < len(text) and _is_digit(text[self.pos]):
            value = value * 10 + (ord(text[self.pos]) - ord("0"))
            self.pos += 1
            digit_found = True

        if not digit_found:
            self.pos = start
            return -1, False
        return (-value if negate else value), True

    def read_float(self) -> Tuple[float, bool]:
        """
        Read an optionally signed decimal number.

        Both '.' and ',' are accepted as decimal separator. Fractional digits
        are accumulated by repeated multiplication with 0.1, so results carry
        the usual binary rounding of that scheme.

        Returns:
            (value, True) on success, (nan, False) when no digit was found
        """
        text = self.text
        start = self.pos
        negate = False
        digit_found = False
        value = 0.0

        if self.pos < len(text) and text[self.pos] == "-":
            negate = True
            self.pos += 1
        elif self.pos < len(text) and text[self.pos] == "+":
            self.pos += 1

        while self.pos < len(text) and _is_digit(text[self.pos]):
            value = value * 10 + (ord(text[self.pos]) - ord("0"))
            self.pos += 1
            digit_found = True

        if self.pos < len(text) and text[self.pos] in ".,":
            self.pos += 1
            factor = 0.1
            digits = 0
            while self.pos < len(text) and _is_digit(text[self.pos]):
                if digits < MAX_FRACTION_DIGITS:
                    value += factor * (ord(text[self.pos]) - ord("0"))
                    factor *= 0.1
                    digits += 1
                self.pos += 1
                digit_found = True

        if not digit_found:
            self.pos = start
            return math.nan, False
        return (-value if negate else value), True

    def read_channel(self) -> Tuple[Optional[ChannelKind], bool]:
        """
        Read a channel token such as ``Xposition`` or ``zrotation``.

        The axis letter picks X/Y/Z and the following p/r picks position or
        rotation; the rest of the word must follow.
        """
        text = self.text
        start = self.pos
        if self.pos + 1 >= len(text):
            return None, False

        axis = "XYZ".find(fold(text[self.pos]))
        if axis < 0:
            return None, False
        self.pos += 1

        kind_letter = fold(text[self.pos])
        self.pos += 1
        if kind_letter == "P":
            ok = self.expect_literal("osition")
            rotation = False
        elif kind_letter == "R":
            ok = self.expect_literal("otation")
            rotation = True
        else:
            ok = False
            rotation = False

        if not ok:
            self.pos = start
            return None, False
        return ChannelKind.from_axis(axis, rotation), True

    def context(self) -> str:
        """Excerpt around the cursor with the current character marked."""
        text = self.text
        pieces = []
        for i in range(max(0, self.pos - CONTEXT_RADIUS), min(len(text), self.pos + CONTEXT_RADIUS)):
            if i == self.pos:
                pieces.append(">>>")
            pieces.append(text[i])
            if i == self.pos:
                pieces.append("<<<")
        if self.pos >= len(text):
            pieces.append(">>><<<")
        return "".join(pieces)

    def fail(self, expected: str, numeric: bool = False):
        error_type = NumericParseError if numeric else ParseError
        raise error_type(self.pos, expected, self.context())

    def require(self, expected: str, ok: bool, numeric: bool = False):
        if not ok:
            self.fail(expected, numeric)

    def expect(self, literal: str):
        """Consume a keyword or fail with a ParseError naming it."""
        self.require(literal, self.expect_literal(literal))
