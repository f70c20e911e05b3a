"""
Metadata value types for org-meta.

A metadata value is one of three variants:

- ``MetaString``: plain text taken verbatim from the line.
- ``MetaInlines``: formatted inline content (see ``org_meta.inlines``).
- ``MetaList``: an ordered list of values, in document order.

The container that maps keys to values is a plain ordered ``dict``
(``Meta``); insertion order is the order in which keys first appeared.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from org_meta.inlines import Inline, stringify


@dataclass
class MetaString:
    text: str


@dataclass
class MetaInlines:
    inlines: list[Inline] = field(default_factory=list)


@dataclass
class MetaList:
    items: list[MetaValue] = field(default_factory=list)


MetaValue = Union[MetaString, MetaInlines, MetaList]
Meta = dict[str, MetaValue]


def meta_kind(value: MetaValue) -> str:
    """Short type tag used in summaries: ``string``, ``inlines`` or ``list``."""
    if isinstance(value, MetaString):
        return "string"
    if isinstance(value, MetaInlines):
        return "inlines"
    return "list"


def meta_to_text(value: MetaValue, separator: str = "; ") -> str:
    """Plain-text rendering of a metadata value."""
    if isinstance(value, MetaString):
        return value.text
    if isinstance(value, MetaInlines):
        return stringify(value.inlines)
    return separator.join(meta_to_text(item, separator) for item in value.items)
