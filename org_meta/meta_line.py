"""
``#+KEY: value`` line handling for org-meta.

A meta line is either a *directive* that changes parser state, or a
*declaration* that stores a document metadata value:

    #+LINK: wiki https://en.wikipedia.org/wiki/%s    directive
    #+OPTIONS: author:nil                              directive
    #+TODO: TODO NEXT | DONE                           directive (also SEQ_TODO, TYP_TODO)
    #+TITLE: A *bold* title                            declaration
    #+WHATEVER: some text                              declaration

The key is read once, then the directive interpretation is tried first.
If it does not apply (unknown key, or a directive whose value does not
parse) the line is read again as a declaration, which accepts any key.
Each attempt runs through ``attempt()``, so a failed directive leaves
neither the cursor nor the state changed.

Meta lines never contribute document content.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from org_meta.declarations import meta_value
from org_meta.exceptions import ParseFailure, ParsingError
from org_meta.export_settings import parse_export_settings
from org_meta.links import parse_link_format
from org_meta.parsing import Cursor, attempt, choice
from org_meta.state import OrgParserState
from org_meta.todo import todo_sequence

logger = logging.getLogger(__name__)

META_LINE_START_RE = re.compile(r"[ \t]*#\+")
_META_KEY_RE = re.compile(r"([^: \n\r]+):[ \t]*")

LineParser = Callable[[Cursor, OrgParserState], None]


def meta_key(cursor: Cursor, state: OrgParserState | None = None) -> str:
    """Read ``KEY:`` plus trailing blanks and return the lowercased key.

    Raises:
        ParseFailure: If no colon-terminated key follows.
    """
    return cursor.match(_META_KEY_RE).group(1).lower()


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------

def _link_directive(cursor: Cursor, state: OrgParserState) -> None:
    link_type, formatter = parse_link_format(cursor, state)
    state.add_link_format(link_type, formatter)
    logger.debug("Registered link abbreviation %r", link_type)


def _options_directive(cursor: Cursor, state: OrgParserState) -> None:
    parse_export_settings(cursor, state)


def _todo_directive(cursor: Cursor, state: OrgParserState) -> None:
    state.register_todo_sequence(todo_sequence(cursor, state))


_DIRECTIVES: dict[str, LineParser] = {
    "link": _link_directive,
    "options": _options_directive,
    "todo": _todo_directive,
    "seq_todo": _todo_directive,
    "typ_todo": _todo_directive,
}


def option_line(key: str) -> LineParser:
    """Parser for the value of directive *key*.

    Raises (from the returned parser):
        ParseFailure: If *key* is not a directive or its value does not parse.
    """

    def _option_line(cursor: Cursor, state: OrgParserState) -> None:
        directive = _DIRECTIVES.get(key)
        if directive is None:
            raise cursor.fail(f"{key!r} is not a directive")
        try:
            directive(cursor, state)
        except ParseFailure:
            logger.warning(
                "Could not parse #+%s: directive; reading it as a metadata declaration",
                key,
            )
            raise

    return _option_line


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

def declaration_line(key: str) -> LineParser:
    """Parser that stores the value of *key* in the metadata container."""

    def _declaration_line(cursor: Cursor, state: OrgParserState) -> None:
        storage_key, value = meta_value(key, cursor, state)
        state.set_meta(storage_key, value)
        logger.debug("Stored metadata %r (declared as %r)", storage_key, key)

    return _declaration_line


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _meta_line(cursor: Cursor, state: OrgParserState) -> None:
    cursor.match(META_LINE_START_RE)
    key = meta_key(cursor)
    choice(option_line(key), declaration_line(key))(cursor, state)


def meta_line(cursor: Cursor, state: OrgParserState) -> list:
    """Parse one meta line at *cursor*, updating *state*.

    Returns:
        An empty list: meta lines add nothing to the document body.

    Raises:
        ParsingError: If the cursor is not at a ``#+`` line start.
        ParseFailure: If the line is not a ``#+KEY:`` line or its value
            does not parse; cursor and state are left unchanged.
    """
    if META_LINE_START_RE.match(cursor.text, cursor.pos) is None:
        raise ParsingError(f"meta_line called outside a '#+' line at offset {cursor.pos}")
    attempt(_meta_line, cursor, state)
    return []
