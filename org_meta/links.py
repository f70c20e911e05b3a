"""
Link abbreviations (``#+LINK:``) for org-meta.

    #+LINK: wiki https://en.wikipedia.org/wiki/%s
    #+LINK: search https://duckduckgo.com/?q=%h
    #+LINK: gh https://github.com/

declare that ``[[wiki:Org-mode]]`` points to
``https://en.wikipedia.org/wiki/Org-mode``.  The format string knows
exactly three forms:

1. ``%s``: the link path is inserted at the first ``%s``.
2. ``%h``: the link path is percent-encoded, then inserted at the first ``%h``.
3. No placeholder: the link path is appended to the format.

Only the first placeholder is substituted; later ``%s``/``%h`` stay as
written.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable
from urllib.parse import quote

from org_meta.parsing import Cursor

logger = logging.getLogger(__name__)

LinkFormatter = Callable[[str], str]

_LINK_TYPE_RE = re.compile(r"[^\W\d_][\w-]*")


def is_valid_link_type(link_type: str) -> bool:
    """A letter followed by letters, digits, ``-`` or ``_``."""
    return _LINK_TYPE_RE.fullmatch(link_type) is not None


def percent_encode(text: str) -> str:
    """URL-encode everything except ASCII letters, digits and ``-_.~``."""
    return quote(text, safe="")


def _interleave(prefix: str, suffix: str, encode: Callable[[str], str] | None) -> LinkFormatter:
    def formatter(path: str) -> str:
        return prefix + (encode(path) if encode else path) + suffix

    return formatter


def compile_format(fmt: str) -> LinkFormatter:
    """Compile a ``#+LINK:`` format string into a substitution function."""
    if "%s" in fmt:
        prefix, suffix = fmt.split("%s", 1)
        return _interleave(prefix, suffix, None)
    if "%h" in fmt:
        prefix, suffix = fmt.split("%h", 1)
        return _interleave(prefix, suffix, percent_encode)
    return _interleave(fmt, "", None)


def parse_format(cursor: Cursor, state: Any = None) -> LinkFormatter:
    """Read the rest of the line (and its terminator) as a link format."""
    fmt = cursor.rest_of_line()
    cursor.skip_line_end()
    return compile_format(fmt)


def parse_link_format(cursor: Cursor, state: Any = None) -> tuple[str, LinkFormatter]:
    """Parse ``TYPE FORMAT`` from a ``#+LINK:`` line.

    Raises:
        ParseFailure: If the link type does not start with a letter.
    """
    link_type = cursor.match(_LINK_TYPE_RE).group(0)
    cursor.skip_spaces()
    return link_type, parse_format(cursor, state)
