"""
TODO keyword sequences for org-meta.

A ``#+TODO:`` (or ``#+SEQ_TODO:`` / ``#+TYP_TODO:``) line declares the
task keywords of a document, split into open and closed states:

    #+TODO: TODO NEXT WAITING | DONE CANCELLED

When no ``|`` separator is given, the last keyword is taken as the only
closed ("done") state:

    #+TODO: TODO NEXT DONE      ->  TODO, NEXT open; DONE closed

Every resolved sequence lists its open markers first and contains at
least one closed marker.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Any

from org_meta.exceptions import ParseFailure
from org_meta.parsing import Cursor

logger = logging.getLogger(__name__)

_KEYWORD_RE = re.compile(r"[^ \t\n\r]+")
# '|' surrounded by optional whitespace, with at least one blank after it
_SEPARATOR_RE = re.compile(r"[ \t]*\|[ \t]+")


class TodoState(enum.Enum):
    TODO = "todo"
    DONE = "done"


@dataclass(frozen=True)
class TodoMarker:
    state: TodoState
    keyword: str


TodoSequence = list[TodoMarker]

DEFAULT_TODO_SEQUENCE: TodoSequence = [
    TodoMarker(TodoState.TODO, "TODO"),
    TodoMarker(TodoState.DONE, "DONE"),
]


def keywords_to_sequence(todo: list[str], done: list[str]) -> TodoSequence:
    """Open markers for *todo*, then closed markers for *done*, in order."""
    return [TodoMarker(TodoState.TODO, kw) for kw in todo] + [
        TodoMarker(TodoState.DONE, kw) for kw in done
    ]


def resolve_todo_keywords(todo: list[str], done: list[str] | None) -> TodoSequence:
    """Turn raw keyword groups into a sequence with at least one DONE marker.

    Args:
        todo: Keywords before the ``|`` separator (or all keywords).
        done: Keywords after the separator; ``None`` when there was none.

    Raises:
        ParseFailure: If no keyword at all was given.
    """
    if done:
        return keywords_to_sequence(todo, done)
    if not todo:
        raise ParseFailure("TODO directive without keywords")
    # The last declared keyword doubles as the only closed state
    return keywords_to_sequence(todo[:-1], todo[-1:])


def _at_separator(cursor: Cursor) -> bool:
    return _SEPARATOR_RE.match(cursor.text, cursor.pos) is not None


def _todo_keywords(cursor: Cursor) -> list[str]:
    keywords: list[str] = []
    while not _at_separator(cursor) and cursor.peek() != "\n":
        keywords.append(cursor.match(_KEYWORD_RE).group(0))
        cursor.skip_spaces()
    return keywords


def todo_sequence(cursor: Cursor, state: Any = None) -> TodoSequence:
    """Parse the value of a TODO directive up to and including the newline.

    Raises:
        ParseFailure: If the line holds no keywords or is unterminated.
    """
    todo = _todo_keywords(cursor)
    done: list[str] | None = None
    if _at_separator(cursor):
        cursor.match(_SEPARATOR_RE)
        done = _todo_keywords(cursor)
    cursor.newline()
    sequence = resolve_todo_keywords(todo, done)
    logger.debug("Resolved TODO sequence: %s", [m.keyword for m in sequence])
    return sequence


def parse_todo_sequence(text: str) -> TodoSequence:
    """Resolve a TODO sequence from the value text of a single directive."""
    if not text.endswith("\n"):
        text += "\n"
    return todo_sequence(Cursor(text))


def classify_keyword(word: str, markers: list[TodoMarker]) -> TodoMarker | None:
    """Return the first marker whose keyword is exactly *word*."""
    for marker in markers:
        if marker.keyword == word:
            return marker
    return None
