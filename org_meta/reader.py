"""
Document reader for org-meta.

Scans an Org document line by line and feeds every ``#+KEY:`` line to
``meta_line()``.  Everything else is skipped: this reader builds the
document's metadata and parser state, not a document tree.

Scan rules:

1. Input is normalised first: ``\\r\\n`` becomes ``\\n`` and a final
   newline is added when missing, so every line is newline-terminated.
2. With ``skip_blocks`` enabled, a ``#+BEGIN_name`` line and everything
   up to the matching ``#+END_name`` is skipped, so example or source
   blocks that *show* meta lines do not change the metadata.  A begin
   line without a matching end is treated like any other line.
3. Affiliated keywords (``#+CAPTION:``, ``#+NAME:``, ``#+ATTR_HTML:``,
   ...) describe the next element and are skipped.
4. A ``#+`` line that does not parse as a meta line is skipped; the
   parser state is unchanged by it.
"""

from __future__ import annotations

import logging
import re

from org_meta.config import ReaderConfig, compile_link_abbreviations
from org_meta.exceptions import ParseFailure
from org_meta.meta_line import META_LINE_START_RE, meta_line
from org_meta.parsing import Cursor
from org_meta.state import OrgParserState

logger = logging.getLogger(__name__)

_BLOCK_BEGIN_RE = re.compile(r"[ \t]*#\+begin_(\S+)", re.IGNORECASE)
_LINE_KEY_RE = re.compile(r"[ \t]*#\+([^: \n\r]+):")


def normalize_text(text: str) -> str:
    """Unix line endings and a guaranteed final newline."""
    text = text.replace("\r\n", "\n")
    if not text.endswith("\n"):
        text += "\n"
    return text


class MetaReader:
    """Reads the metadata lines of Org documents.

    The reader itself is **stateless** -- each call to ``read()`` starts
    from a fresh ``OrgParserState`` seeded from the config:

    - ``export``: copied into the state as the initial export settings.
    - ``link_abbreviations``: compiled and registered before the scan;
      ``#+LINK:`` lines in the document overwrite them.
    - ``skip_blocks`` / ``affiliated_keywords``: see the module docstring.
    """

    def __init__(self, config: ReaderConfig | None = None) -> None:
        self.config = config or ReaderConfig()

    def new_state(self) -> OrgParserState:
        return OrgParserState(
            link_formatters=compile_link_abbreviations(self.config),
            export_settings=self.config.export.model_copy(deep=True),
        )

    def read(self, text: str) -> OrgParserState:
        """Scan *text* and return the final parser state."""
        cursor = Cursor(normalize_text(text))
        state = self.new_state()
        meta_lines = 0
        skipped_blocks = 0

        while not cursor.at_eof():
            if self.config.skip_blocks and self._skip_block(cursor):
                skipped_blocks += 1
                continue

            if META_LINE_START_RE.match(cursor.text, cursor.pos) and not self._is_affiliated(cursor):
                try:
                    meta_line(cursor, state)
                    meta_lines += 1
                    continue
                except ParseFailure as exc:
                    logger.debug("Skipping unparsable #+ line: %s", exc)

            cursor.any_line()

        logger.info(
            "Read %d meta line(s): %d metadata key(s), %d TODO sequence(s), %d block(s) skipped",
            meta_lines,
            len(state.meta),
            len(state.todo_sequences),
            skipped_blocks,
        )
        return state

    # -- Helpers ------------------------------------------------------------

    def _is_affiliated(self, cursor: Cursor) -> bool:
        m = _LINE_KEY_RE.match(cursor.text, cursor.pos)
        if m is None or not self.config.is_affiliated(m.group(1)):
            return False
        logger.debug("Skipping affiliated keyword #+%s", m.group(1))
        return True

    def _skip_block(self, cursor: Cursor) -> bool:
        """Skip a complete ``#+BEGIN_x`` ... ``#+END_x`` block at the cursor.

        Returns False (cursor unchanged) when the cursor is not at a
        block start or the block is never closed.
        """
        m = _BLOCK_BEGIN_RE.match(cursor.text, cursor.pos)
        if m is None:
            return False
        name = m.group(1)
        end_re = re.compile(
            rf"^[ \t]*#\+end_{re.escape(name)}[ \t]*$", re.IGNORECASE | re.MULTILINE
        )
        end = end_re.search(cursor.text, m.end())
        if end is None:
            logger.debug("Block #+begin_%s is never closed; not skipping it", name)
            return False
        cursor.reset(end.end())
        cursor.skip_line_end()
        logger.debug("Skipped #+begin_%s block", name)
        return True


def read_meta(text: str, config: ReaderConfig | None = None) -> OrgParserState:
    """Convenience wrapper: ``MetaReader(config).read(text)``."""
    return MetaReader(config).read(text)
