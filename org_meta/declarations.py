"""
Metadata declaration values for org-meta.

Each recognised ``#+KEY:`` declaration has its own value parser; every
other key stores the rest of the line verbatim.  The table below maps a
(lowercased) key to the key the value is stored under and the parser
that reads it:

    author               -> author            comma separated inline list
    title, date          -> title, date       inline content
    header-includes      -> header-includes   inline content, accumulated
    latex_header         -> header-includes   raw LaTeX, accumulated
    html_head            -> header-includes   raw HTML, accumulated
    latex_class          -> documentclass     verbatim string
    latex_class_options  -> classoption       string without [ and ]
    (anything else)      -> (the key)         verbatim string

Accumulated keys collect one list element per declaration line, in
document order, across all directives sharing the storage key.

Value parsers return ``Deferred`` values: inline content is only
resolved (link abbreviations expanded) once the document is complete.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from org_meta.inlines import (
    Inline,
    RawInline,
    inlines_till_newline,
    parse_inlines_from_string,
    resolve_links,
)
from org_meta.parsing import Cursor
from org_meta.state import Deferred, OrgParserState
from org_meta.values import MetaInlines, MetaList, MetaString, MetaValue

logger = logging.getLogger(__name__)

ValueParser = Callable[[Cursor, OrgParserState], Deferred[MetaValue]]

HEADER_INCLUDES_KEY = "header-includes"

_AUTHOR_SEGMENT_RE = re.compile(r"[^,\n]+")


# ---------------------------------------------------------------------------
# Value parsers
# ---------------------------------------------------------------------------

def _deferred_inlines(inlines: list[Inline]) -> Deferred[MetaValue]:
    return Deferred(lambda final: MetaInlines(resolve_links(inlines, final.link_formatters)))


def meta_inlines(cursor: Cursor, state: OrgParserState) -> Deferred[MetaValue]:
    """Rest of the line as trimmed inline content."""
    return _deferred_inlines(inlines_till_newline(cursor))


def meta_inlines_comma_separated(cursor: Cursor, state: OrgParserState) -> Deferred[MetaValue]:
    """Rest of the line split at commas, each part parsed as inline content.

    Raises:
        ParseFailure: On an empty part (``a,,b``), an empty line, or a
            missing newline.
    """
    segments = [cursor.match(_AUTHOR_SEGMENT_RE).group(0)]
    while cursor.peek() == ",":
        cursor.pos += 1
        segments.append(cursor.match(_AUTHOR_SEGMENT_RE).group(0))
    cursor.newline()

    parts = [parse_inlines_from_string(segment) for segment in segments]
    return Deferred(
        lambda final: MetaList(
            [MetaInlines(resolve_links(part, final.link_formatters)) for part in parts]
        )
    )


def meta_modified_string(modify: Callable[[str], str]) -> ValueParser:
    """Rest of the line, passed through *modify*, as a plain string."""

    def _parse(cursor: Cursor, state: OrgParserState) -> Deferred[MetaValue]:
        return Deferred.pure(MetaString(modify(cursor.any_line())))

    return _parse


meta_string: ValueParser = meta_modified_string(lambda line: line)


def meta_export_snippet(fmt: str) -> ValueParser:
    """Rest of the line as a raw snippet for output format *fmt*."""

    def _parse(cursor: Cursor, state: OrgParserState) -> Deferred[MetaValue]:
        return Deferred.pure(MetaInlines([RawInline(fmt, cursor.any_line())]))

    return _parse


def _strip_brackets(text: str) -> str:
    return text.replace("[", "").replace("]", "")


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------

def _current_items(value: MetaValue | None) -> list[MetaValue]:
    if value is None:
        return []
    if isinstance(value, MetaList):
        return list(value.items)
    return [value]


class AccumulatedList(Deferred[MetaValue]):
    """One link in a chain of accumulated values.

    Each node points at the value stored before it; earlier nodes are
    never modified.  Resolution walks the chain iteratively, oldest
    value first.
    """

    def __init__(self, previous: Deferred[MetaValue] | None, value: Deferred[MetaValue]) -> None:
        super().__init__(self._collect)
        self.previous = previous
        self.value = value

    def _collect(self, final: OrgParserState) -> MetaValue:
        values: list[Deferred[MetaValue]] = []
        node: Deferred[MetaValue] | None = self
        while isinstance(node, AccumulatedList):
            values.append(node.value)
            node = node.previous
        items = _current_items(node.resolve(final) if node is not None else None)
        items.extend(value.resolve(final) for value in reversed(values))
        return MetaList(items)


def accumulating_list(key: str, parser: ValueParser) -> ValueParser:
    """Wrap *parser* so its value is appended to the list stored under *key*.

    The wrapped parser only computes the new full list; storing it is up
    to the caller.  An existing non-list value becomes the first element.
    """

    def _accumulate(cursor: Cursor, state: OrgParserState) -> Deferred[MetaValue]:
        value = parser(cursor, state)
        return AccumulatedList(state.meta.get(key), value)

    return _accumulate


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_VALUE_PARSERS: dict[str, tuple[str, ValueParser]] = {
    "author": ("author", meta_inlines_comma_separated),
    "title": ("title", meta_inlines),
    "date": ("date", meta_inlines),
    "header-includes": (
        HEADER_INCLUDES_KEY,
        accumulating_list(HEADER_INCLUDES_KEY, meta_inlines),
    ),
    "latex_header": (
        HEADER_INCLUDES_KEY,
        accumulating_list(HEADER_INCLUDES_KEY, meta_export_snippet("latex")),
    ),
    "latex_class": ("documentclass", meta_string),
    # Org keeps the brackets around class options, the metadata does not
    "latex_class_options": ("classoption", meta_modified_string(_strip_brackets)),
    "html_head": (
        HEADER_INCLUDES_KEY,
        accumulating_list(HEADER_INCLUDES_KEY, meta_export_snippet("html")),
    ),
}


def meta_value(key: str, cursor: Cursor, state: OrgParserState) -> tuple[str, Deferred[MetaValue]]:
    """Parse the value of declaration *key*.

    Returns:
        Tuple of (storage key, deferred value).

    Raises:
        ParseFailure: If the key-specific parser does not match.
    """
    storage_key, parser = _VALUE_PARSERS.get(key, (key, meta_string))
    return storage_key, parser(cursor, state)
