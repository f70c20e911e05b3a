"""
Inline text parsing for org-meta.

Turns the text of a single line into a flat-ish inline AST.  Only the
constructs that show up in document metadata are recognised:

  *strong*  /emph/  _underline_  +strikeout+   -> nested inline content
  =verbatim=  ~code~                          -> literal text
  $math$  \\(math\\)                          -> literal TeX
  [[target]]  [[target][description]]         -> links

Everything else becomes ``Str`` words separated by single ``Space``
elements.  Markup is only recognised at Org's word boundaries: an
opening delimiter must follow whitespace or opening punctuation and be
followed by a non-space character; a closing delimiter must follow a
non-space character and be followed by whitespace or punctuation.

Link targets are kept as written.  ``resolve_links()`` applies the
registered link abbreviations afterwards, once the whole document has
been scanned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Union

from org_meta.parsing import Cursor

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Inline AST
# ---------------------------------------------------------------------------

@dataclass
class Str:
    text: str


@dataclass
class Space:
    pass


@dataclass
class Emph:
    content: list[Inline] = field(default_factory=list)


@dataclass
class Strong:
    content: list[Inline] = field(default_factory=list)


@dataclass
class Underline:
    content: list[Inline] = field(default_factory=list)


@dataclass
class Strikeout:
    content: list[Inline] = field(default_factory=list)


@dataclass
class Code:
    text: str


@dataclass
class Verbatim:
    text: str


@dataclass
class Math:
    text: str


@dataclass
class Link:
    """A hyperlink.  ``target`` may still be an abbreviated ``type:path``."""
    target: str
    content: list[Inline] = field(default_factory=list)


@dataclass
class RawInline:
    """Text passed through untouched to one output format (e.g. ``latex``)."""
    format: str
    text: str


Inline = Union[Str, Space, Emph, Strong, Underline, Strikeout, Code, Verbatim, Math, Link, RawInline]

_NESTED = {"*": Strong, "/": Emph, "_": Underline, "+": Strikeout}
_LITERAL = {"=": Verbatim, "~": Code}

# Characters allowed right before an opening / right after a closing marker
_PRE_CHARS = "-({'\""
_POST_CHARS = "-.,:!?;'\")}["


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _valid_open(text: str, pos: int) -> bool:
    if pos > 0 and not text[pos - 1].isspace() and text[pos - 1] not in _PRE_CHARS:
        return False
    return pos + 1 < len(text) and not text[pos + 1].isspace()


def _valid_close(text: str, pos: int) -> bool:
    if text[pos - 1].isspace():
        return False
    return pos + 1 >= len(text) or text[pos + 1].isspace() or text[pos + 1] in _POST_CHARS


def _find_close(text: str, start: int, delim: str) -> int:
    """Index of the closing *delim* for an opener at *start*, or -1."""
    j = start + 2
    while j < len(text):
        if text[j] == delim and _valid_close(text, j):
            return j
        j += 1
    return -1


def _parse_link(text: str, i: int) -> tuple[Link, int] | None:
    end = text.find("]]", i + 2)
    if end == -1:
        return None
    inner = text[i + 2:end]
    if "][" in inner:
        target, description = inner.split("][", 1)
        content = parse_inlines(description)
    else:
        target = inner
        content = [Str(inner)]
    if not target:
        return None
    return Link(target=target, content=content), end + 2


def _parse_math(text: str, i: int) -> tuple[Math, int] | None:
    if text.startswith("\\(", i):
        end = text.find("\\)", i + 2)
        if end == -1:
            return None
        return Math(text[i + 2:end]), end + 2
    end = text.find("$", i + 1)
    if end == -1:
        return None
    inner = text[i + 1:end]
    if not inner or inner[0].isspace() or inner[-1].isspace():
        return None
    return Math(inner), end + 1


def parse_inlines(text: str) -> list[Inline]:
    """Parse one line of Org text into inline elements (untrimmed)."""
    result: list[Inline] = []
    word: list[str] = []

    def flush_word() -> None:
        if word:
            result.append(Str("".join(word)))
            word.clear()

    i = 0
    while i < len(text):
        ch = text[i]

        if ch.isspace():
            flush_word()
            while i < len(text) and text[i].isspace():
                i += 1
            result.append(Space())
            continue

        parsed: tuple[Inline, int] | None = None
        if text.startswith("[[", i):
            parsed = _parse_link(text, i)
        elif ch == "$" or text.startswith("\\(", i):
            parsed = _parse_math(text, i)
        elif (ch in _NESTED or ch in _LITERAL) and _valid_open(text, i):
            close = _find_close(text, i, ch)
            if close != -1:
                inner = text[i + 1:close]
                if ch in _NESTED:
                    parsed = _NESTED[ch](parse_inlines(inner)), close + 1
                else:
                    parsed = _LITERAL[ch](inner), close + 1

        if parsed is None:
            word.append(ch)
            i += 1
            continue

        flush_word()
        element, i = parsed
        result.append(element)

    flush_word()
    return result


def trim_inlines(inlines: list[Inline]) -> list[Inline]:
    """Drop leading and trailing ``Space`` elements."""
    start, end = 0, len(inlines)
    while start < end and isinstance(inlines[start], Space):
        start += 1
    while end > start and isinstance(inlines[end - 1], Space):
        end -= 1
    return inlines[start:end]


def inlines_till_newline(cursor: Cursor) -> list[Inline]:
    """Parse the rest of the current line as trimmed inline content.

    Consumes the terminating newline.

    Raises:
        ParseFailure: If the line has no terminating newline.
    """
    line = cursor.any_line()
    return trim_inlines(parse_inlines(line))


def parse_inlines_from_string(text: str) -> list[Inline]:
    """Parse *text* as if it were its own newline-terminated line."""
    return inlines_till_newline(Cursor(text + "\n"))


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

def expand_link_target(target: str, link_formatters: dict[str, Callable[[str], str]]) -> str:
    """Apply a registered link abbreviation to ``type:path`` targets.

    Targets without a registered type are returned unchanged.
    """
    link_type, sep, rest = target.partition(":")
    if not sep:
        return target
    formatter = link_formatters.get(link_type)
    if formatter is None:
        return target
    return formatter(rest)


def resolve_links(
    inlines: list[Inline],
    link_formatters: dict[str, Callable[[str], str]],
) -> list[Inline]:
    """Return a copy of *inlines* with all link abbreviations expanded."""
    resolved: list[Inline] = []
    for element in inlines:
        if isinstance(element, Link):
            resolved.append(
                Link(
                    target=expand_link_target(element.target, link_formatters),
                    content=resolve_links(element.content, link_formatters),
                )
            )
        elif isinstance(element, (Emph, Strong, Underline, Strikeout)):
            resolved.append(type(element)(resolve_links(element.content, link_formatters)))
        else:
            resolved.append(element)
    return resolved


def stringify(inlines: list[Inline]) -> str:
    """Plain-text rendering, dropping all markup."""
    parts: list[str] = []
    for element in inlines:
        if isinstance(element, Space):
            parts.append(" ")
        elif isinstance(element, (Str, Code, Verbatim, Math, RawInline)):
            parts.append(element.text)
        else:
            parts.append(stringify(element.content))
    return "".join(parts)
