"""
Persistent parser state for org-meta.

One ``OrgParserState`` lives for the duration of a single document read.
Every parser receives it next to the cursor and is its only writer:

- ``meta``: metadata container, key -> ``Deferred`` metadata value.
- ``link_formatters``: link type -> substitution function (``#+LINK:``).
- ``todo_sequences``: TODO sequences in registration order (``#+TODO:``).
- ``export_settings``: current ``#+OPTIONS:`` flags.

Metadata values are stored *deferred*: a value is a function of the
final state, evaluated only after the whole document has been scanned.
That way a ``#+LINK:`` declared after ``#+TITLE:`` still expands the
links inside the title.

``snapshot()``/``restore()`` support the backtracking combinators in
``org_meta.parsing``: a failed alternative restores the state it saw.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, NamedTuple, TypeVar

from org_meta.export_settings import ExportSettings
from org_meta.links import LinkFormatter
from org_meta.todo import DEFAULT_TODO_SEQUENCE, TodoMarker, TodoSequence
from org_meta.values import Meta, MetaValue

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Deferred(Generic[T]):
    """A value computed from the final parser state."""

    def __init__(self, compute: Callable[[OrgParserState], T]) -> None:
        self._compute = compute

    @classmethod
    def pure(cls, value: T) -> Deferred[T]:
        """Wrap a value that does not depend on the state."""
        return cls(lambda _state: value)

    def resolve(self, state: OrgParserState) -> T:
        return self._compute(state)


class _Snapshot(NamedTuple):
    meta: dict[str, Deferred[MetaValue]]
    link_formatters: dict[str, LinkFormatter]
    todo_sequences: list[TodoSequence]
    export_settings: ExportSettings


@dataclass
class OrgParserState:
    meta: dict[str, Deferred[MetaValue]] = field(default_factory=dict)
    link_formatters: dict[str, LinkFormatter] = field(default_factory=dict)
    todo_sequences: list[TodoSequence] = field(default_factory=list)
    export_settings: ExportSettings = field(default_factory=ExportSettings)

    # -- Backtracking -------------------------------------------------------

    def snapshot(self) -> _Snapshot:
        return _Snapshot(
            meta=dict(self.meta),
            link_formatters=dict(self.link_formatters),
            todo_sequences=list(self.todo_sequences),
            export_settings=self.export_settings.model_copy(deep=True),
        )

    def restore(self, snapshot: _Snapshot) -> None:
        self.meta = snapshot.meta
        self.link_formatters = snapshot.link_formatters
        self.todo_sequences = snapshot.todo_sequences
        self.export_settings = snapshot.export_settings

    # -- Mutations ----------------------------------------------------------

    def set_meta(self, key: str, value: Deferred[MetaValue]) -> None:
        """Store *value* under *key*; a later value replaces an earlier one."""
        self.meta[key] = value

    def add_link_format(self, link_type: str, formatter: LinkFormatter) -> None:
        self.link_formatters[link_type] = formatter

    def register_todo_sequence(self, sequence: TodoSequence) -> None:
        self.todo_sequences.append(sequence)

    # -- Queries ------------------------------------------------------------

    def active_todo_markers(self, default: TodoSequence | None = None) -> list[TodoMarker]:
        """All registered markers in registration order, or the default."""
        if not self.todo_sequences:
            return list(default if default is not None else DEFAULT_TODO_SEQUENCE)
        return [marker for sequence in self.todo_sequences for marker in sequence]

    def resolved_meta(self) -> Meta:
        """Evaluate every deferred metadata value against this state."""
        return {key: value.resolve(self) for key, value in self.meta.items()}
