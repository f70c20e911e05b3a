"""
Metadata views for org-meta.

Two read-side views over the metadata container:

- ``meta_export()`` / ``get_filtered_meta()``: the metadata as a later
  export stage should see it.  ``#+OPTIONS: author:nil`` (likewise
  ``creator:nil`` and ``email:nil``) removes the corresponding key.
  Filtering returns a copy; the container in the parser state is never
  modified.
- ``build_meta_table()``: a flat pandas table with one row per
  ``(source, key)``, handy for inspecting the metadata of many documents
  at once.
"""

from __future__ import annotations

import logging
from typing import Mapping, TypeVar

import pandas as pd

from org_meta.export_settings import ExportSettings
from org_meta.state import Deferred, OrgParserState
from org_meta.values import Meta, MetaList, MetaValue, meta_kind, meta_to_text

logger = logging.getLogger(__name__)

V = TypeVar("V")

META_TABLE_COLUMNS = ["source", "key", "kind", "items", "value"]


def remove_meta(key: str, meta: Mapping[str, V]) -> dict[str, V]:
    """Copy of *meta* without *key*."""
    return {k: v for k, v in meta.items() if k != key}


def filter_meta(meta: Mapping[str, V], settings: ExportSettings) -> dict[str, V]:
    """Drop author/creator/email when the export settings disable them."""
    filtered = dict(meta)
    if not settings.with_author:
        filtered = remove_meta("author", filtered)
    if not settings.with_creator:
        filtered = remove_meta("creator", filtered)
    if not settings.with_email:
        filtered = remove_meta("email", filtered)
    return filtered


def meta_export(state: OrgParserState) -> dict[str, Deferred[MetaValue]]:
    """The (still deferred) metadata container, respecting export options."""
    return filter_meta(state.meta, state.export_settings)


def get_filtered_meta(state: OrgParserState) -> Meta:
    """Resolved metadata, respecting export options.

    Call this once the whole document has been read: deferred values
    resolve against *state* as it is now.
    """
    return {key: value.resolve(state) for key, value in meta_export(state).items()}


def build_meta_table(documents: Mapping[str, Meta]) -> pd.DataFrame:
    """Build a flat metadata table over several documents.

    Args:
        documents: Maps a source name (usually a file path) to its
            resolved, filtered metadata.

    Returns:
        DataFrame with columns ``source``, ``key``, ``kind``
        (``string``/``inlines``/``list``), ``items`` (list length, 1 for
        scalars) and ``value`` (plain text; list elements joined by
        ``"; "``).  Rows follow document order, then key order.
    """
    rows: list[dict] = []
    for source, meta in documents.items():
        for key, value in meta.items():
            rows.append(
                {
                    "source": source,
                    "key": key,
                    "kind": meta_kind(value),
                    "items": len(value.items) if isinstance(value, MetaList) else 1,
                    "value": meta_to_text(value),
                }
            )

    logger.info("Built metadata table: %d rows from %d document(s)", len(rows), len(documents))

    # Explicit columns keep the schema stable when there are no rows
    return pd.DataFrame(rows, columns=META_TABLE_COLUMNS)
