"""
Export settings (``#+OPTIONS:``) for org-meta.

``ExportSettings`` is the flag set that decides what a later export
stage includes.  The metadata layer only consults ``with_author``,
``with_creator`` and ``with_email`` (see ``org_meta.meta.meta_export``),
but the whole option line is parsed so the settings are complete for
downstream consumers.

Option syntax (whitespace separated):

    #+OPTIONS: author:nil toc:2 H:4 d:(not "LOGBOOK" "NOTES") ^:{}

Known-but-unsupported options and unknown options are skipped.  A value
that does not parse for a known option leaves the setting unchanged.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Literal

from pydantic import BaseModel, Field

from org_meta.parsing import Cursor

logger = logging.getLogger(__name__)


class ExportSettings(BaseModel):
    """Export flags, with the defaults Org-mode uses when no option is set."""

    archived_trees: Literal["headline", "export", "no-export"] = Field(
        "headline", description="How archived subtrees are exported (arch:)"
    )
    drawers: list[str] = Field(
        default_factory=lambda: ["LOGBOOK"],
        description="Drawer names, interpreted according to drawers_mode (d:)",
    )
    drawers_mode: Literal["exclude", "include"] = Field(
        "exclude", description="'exclude' drops the listed drawers, 'include' keeps only them"
    )
    emphasized_text: bool = True
    headline_levels: int = Field(3, ge=0, description="Deepest headline exported as a section (H:)")
    preserve_breaks: bool = False
    smart_quotes: bool = True
    special_strings: bool = True
    sub_superscripts: bool = True
    with_author: bool = True
    with_creator: bool = True
    with_email: bool = True
    with_planning: bool = False
    with_tags: bool = True
    with_todo_keywords: bool = True


_OPTION_RE = re.compile(r"([^\s:]+|:):(\S*)")
_DRAWER_NAMES_RE = re.compile(r'"([^"]*)"')
_BLANK_RE = re.compile(r"\s")

_BOOLEAN_OPTIONS: dict[str, str] = {
    "^": "sub_superscripts",
    "'": "smart_quotes",
    "*": "emphasized_text",
    "-": "special_strings",
    "\\n": "preserve_breaks",
    "author": "with_author",
    "creator": "with_creator",
    "email": "with_email",
    "p": "with_planning",
    "tags": "with_tags",
    "todo": "with_todo_keywords",
}

IGNORED_OPTIONS = frozenset(
    {":", "<", "c", "date", "e", "f", "inline", "num", "pri", "prop",
     "stat", "tasks", "tex", "timestamp", "title", "toc", "|"}
)


def elisp_boolean(value: str) -> bool:
    """``nil``, ``{}`` and ``()`` are false; any other word is true."""
    return value.lower() not in ("nil", "{}", "()")


def _parse_integer(value: str) -> int:
    if not value.isdigit():
        raise ValueError(f"not a number: {value!r}")
    return int(value)


def _parse_archived(value: str) -> str:
    if value == "headline":
        return "headline"
    return "export" if elisp_boolean(value) else "no-export"


def _parse_drawers(value: str) -> tuple[str, list[str]]:
    """``(not "A")`` excludes, ``("A")`` includes, a boolean means all/none."""
    if value.startswith("(not ") and value.endswith(")"):
        return "exclude", _DRAWER_NAMES_RE.findall(value)
    if value.startswith("(") and value.endswith(")") and value != "()":
        return "include", _DRAWER_NAMES_RE.findall(value)
    return ("exclude", []) if elisp_boolean(value) else ("include", [])


def _apply_option(settings: ExportSettings, key: str, value: str) -> None:
    setters: dict[str, Callable[[str], dict[str, Any]]] = {
        "H": lambda v: {"headline_levels": _parse_integer(v)},
        "arch": lambda v: {"archived_trees": _parse_archived(v)},
        "d": lambda v: dict(zip(("drawers_mode", "drawers"), _parse_drawers(v))),
    }
    if not value:
        logger.debug("Export option %s has no value; skipped", key)
    elif key in _BOOLEAN_OPTIONS:
        setattr(settings, _BOOLEAN_OPTIONS[key], elisp_boolean(value))
    elif key in setters:
        try:
            updates = setters[key](value)
        except ValueError as exc:
            logger.debug("Ignoring malformed export option %s:%s (%s)", key, value, exc)
            return
        for name, new in updates.items():
            setattr(settings, name, new)
    elif key in IGNORED_OPTIONS:
        logger.debug("Export option %s is not supported; skipped", key)
    else:
        logger.debug("Unknown export option %s:%s; skipped", key, value)


def _split_options(line: str) -> list[tuple[str, str]]:
    """Split an option line into ``(key, value)`` pairs.

    Drawer lists may contain spaces inside their parentheses, so a value
    that opens a parenthesis extends to the matching ``)``.
    """
    pairs: list[tuple[str, str]] = []
    pos = 0
    while pos < len(line):
        while pos < len(line) and line[pos].isspace():
            pos += 1
        m = _OPTION_RE.match(line, pos)
        if m is None:
            # A stray word without a colon
            blank = _BLANK_RE.search(line, pos)
            pos = len(line) if blank is None else blank.start()
            continue
        key, value = m.group(1), m.group(2)
        pos = m.end()
        if value.startswith("(") and not value.endswith(")"):
            close = line.find(")", pos)
            close = len(line) - 1 if close == -1 else close
            value += line[pos:close + 1]
            pos = close + 1
        pairs.append((key, value))
    return pairs


def apply_export_options(settings: ExportSettings, line: str) -> ExportSettings:
    """Return a copy of *settings* updated with the options in *line*."""
    updated = settings.model_copy(deep=True)
    for key, value in _split_options(line):
        _apply_option(updated, key, value)
    return updated


def parse_export_settings(cursor: Cursor, state: Any) -> ExportSettings:
    """Parse the rest of an ``#+OPTIONS:`` line into ``state.export_settings``."""
    line = cursor.rest_of_line()
    cursor.skip_line_end()
    state.export_settings = apply_export_options(state.export_settings, line)
    logger.debug("Export settings updated from options %r", line)
    return state.export_settings
