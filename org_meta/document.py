"""
Document handle for org-meta.

The ``MetaDocument`` class is a **handle object** over the final parser
state of one Org document.  Created via ``org_meta.parse()`` or
``org_meta.open()``, it exposes everything the metadata lines declared:

- ``meta``: metadata as an export stage should see it (author, creator
  and email removed when ``#+OPTIONS:`` disables them).
- ``raw_meta``: the full, unfiltered metadata.
- ``link_formatters`` / ``expand_link()``: ``#+LINK:`` abbreviations.
- ``todo_sequences`` / ``todo_markers`` / ``classify_keyword()``: task
  keywords from ``#+TODO:`` lines (or the configured default).
- ``describe()`` and ``to_frame()`` for a quick overview.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pandas as pd

from org_meta.config import ReaderConfig
from org_meta.export_settings import ExportSettings
from org_meta.inlines import expand_link_target
from org_meta.links import LinkFormatter
from org_meta.meta import build_meta_table, get_filtered_meta
from org_meta.state import OrgParserState
from org_meta.todo import TodoMarker, TodoSequence, TodoState, classify_keyword
from org_meta.values import Meta

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DocumentInfo -- lightweight summary
# ---------------------------------------------------------------------------

@dataclass
class DocumentInfo:
    """Summary of a document's metadata, returned by ``MetaDocument.describe()``.

    Attributes:
        source: Where the document came from (file path or ``"<string>"``).
        keys: Exported metadata keys, in declaration order.
        hidden_keys: Keys present in the document but removed by export options.
        link_types: Registered link abbreviation types.
        todo_keywords: Open TODO keywords in effect.
        done_keywords: Closed TODO keywords in effect.
    """

    source: str
    keys: list[str] = field(default_factory=list)
    hidden_keys: list[str] = field(default_factory=list)
    link_types: list[str] = field(default_factory=list)
    todo_keywords: list[str] = field(default_factory=list)
    done_keywords: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# MetaDocument -- the main handle class
# ---------------------------------------------------------------------------

class MetaDocument:
    """Handle object for the metadata of one Org document.

    Metadata is resolved lazily on first access, against the final state.

    Attributes:
        state: The parser state after the whole document was read.
        config: The ``ReaderConfig`` the document was read with.
        source: Source name used in summaries.
    """

    def __init__(
        self,
        state: OrgParserState,
        config: ReaderConfig | None = None,
        source: str = "<string>",
    ) -> None:
        self.state = state
        self.config = config or ReaderConfig()
        self.source = source
        self._meta: Meta | None = None
        self._raw_meta: Meta | None = None

    def __repr__(self) -> str:
        return (
            f"MetaDocument(source={self.source!r}, keys={list(self.meta)}, "
            f"todo_sequences={len(self.state.todo_sequences)})"
        )

    # -- Metadata -----------------------------------------------------------

    @property
    def meta(self) -> Meta:
        """Resolved metadata, filtered by the document's export options."""
        if self._meta is None:
            self._meta = get_filtered_meta(self.state)
        return self._meta

    @property
    def raw_meta(self) -> Meta:
        """Resolved metadata including keys hidden by export options."""
        if self._raw_meta is None:
            self._raw_meta = self.state.resolved_meta()
        return self._raw_meta

    @property
    def export_settings(self) -> ExportSettings:
        return self.state.export_settings

    # -- Links --------------------------------------------------------------

    @property
    def link_formatters(self) -> dict[str, LinkFormatter]:
        return self.state.link_formatters

    def expand_link(self, target: str) -> str:
        """Expand ``type:path`` through the registered link abbreviations."""
        return expand_link_target(target, self.state.link_formatters)

    # -- TODO keywords ------------------------------------------------------

    @property
    def todo_sequences(self) -> list[TodoSequence]:
        return self.state.todo_sequences

    @property
    def todo_markers(self) -> list[TodoMarker]:
        """Markers in effect: all registered ones, else the configured default."""
        return self.state.active_todo_markers(self.config.default_todo_sequence())

    def classify_keyword(self, word: str) -> TodoMarker | None:
        """Return the TODO marker for a headline keyword, or None."""
        return classify_keyword(word, self.todo_markers)

    # -- Summaries ----------------------------------------------------------

    def describe(self) -> DocumentInfo:
        markers = self.todo_markers
        return DocumentInfo(
            source=self.source,
            keys=list(self.meta),
            hidden_keys=[key for key in self.raw_meta if key not in self.meta],
            link_types=list(self.link_formatters),
            todo_keywords=[m.keyword for m in markers if m.state is TodoState.TODO],
            done_keywords=[m.keyword for m in markers if m.state is TodoState.DONE],
        )

    def to_frame(self) -> pd.DataFrame:
        """Exported metadata as a flat table (see ``build_meta_table``)."""
        return build_meta_table({self.source: self.meta})
