"""
Line and character primitives for org-meta.

A ``Cursor`` is a position over the full document text.  Parsers are
plain functions with the signature ``parser(cursor, state) -> result``
that either advance the cursor and return a value, or raise
``ParseFailure``.

Backtracking:
  ``attempt()`` runs a parser speculatively.  On failure it restores the
  cursor position *and* the persistent parser state to what they were
  before the attempt, so a failed alternative never leaves a trace.
  ``choice()`` builds an ordered alternative out of ``attempt()``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, TypeVar

from org_meta.exceptions import ParseFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")
Parser = Callable[["Cursor", Any], T]

_SPACES_RE = re.compile(r"[ \t]*")
_LINE_END_CHARS = "\n\r"


class Cursor:
    """Read position over a document string."""

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    def __repr__(self) -> str:
        preview = self.text[self.pos:self.pos + 20]
        return f"Cursor(pos={self.pos}, next={preview!r})"

    # -- Position -----------------------------------------------------------

    def mark(self) -> int:
        return self.pos

    def reset(self, mark: int) -> None:
        self.pos = mark

    def at_eof(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, n: int = 1) -> str:
        return self.text[self.pos:self.pos + n]

    def fail(self, message: str = "no match") -> ParseFailure:
        """Build a ``ParseFailure`` located at the current position."""
        return ParseFailure(message, position=self.pos)

    # -- Consumers ----------------------------------------------------------

    def match(self, pattern: re.Pattern[str]) -> re.Match[str]:
        """Match *pattern* at the cursor and advance past it.

        Raises:
            ParseFailure: If the pattern does not match here.
        """
        m = pattern.match(self.text, self.pos)
        if m is None:
            raise self.fail(f"expected {pattern.pattern!r}")
        self.pos = m.end()
        return m

    def skip_spaces(self) -> str:
        """Skip horizontal whitespace (spaces and tabs only)."""
        return self.match(_SPACES_RE).group(0)

    def newline(self) -> None:
        if self.peek() != "\n":
            raise self.fail("expected newline")
        self.pos += 1

    def rest_of_line(self) -> str:
        """Consume the text up to, but not including, the line terminator."""
        end = self.pos
        while end < len(self.text) and self.text[end] not in _LINE_END_CHARS:
            end += 1
        value = self.text[self.pos:end]
        self.pos = end
        return value

    def any_line(self) -> str:
        """Consume the rest of the line *and* its newline.

        Raises:
            ParseFailure: If the line is not newline-terminated.
        """
        end = self.text.find("\n", self.pos)
        if end == -1:
            raise self.fail("unterminated line")
        value = self.text[self.pos:end]
        self.pos = end + 1
        return value

    def skip_line_end(self) -> None:
        """Consume one line terminator, or nothing at end of input."""
        if self.text.startswith("\r\n", self.pos):
            self.pos += 2
        elif self.peek() in ("\n", "\r"):
            self.pos += 1


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------

def attempt(parser: Parser[T], cursor: Cursor, state: Any) -> T:
    """Run *parser*, rolling back cursor and state if it fails.

    ``state`` must provide ``snapshot()`` and ``restore(snapshot)``.

    Raises:
        ParseFailure: Re-raised from *parser* after the rollback.
    """
    mark = cursor.mark()
    saved = state.snapshot()
    try:
        return parser(cursor, state)
    except ParseFailure:
        cursor.reset(mark)
        state.restore(saved)
        raise


def choice(*parsers: Parser[Any]) -> Parser[Any]:
    """Ordered alternative: the first parser that succeeds wins."""

    def _choice(cursor: Cursor, state: Any) -> Any:
        for parser in parsers:
            try:
                return attempt(parser, cursor, state)
            except ParseFailure as exc:
                logger.debug("Alternative %s failed: %s", getattr(parser, "__name__", parser), exc)
        raise cursor.fail("no alternative matched")

    return _choice
