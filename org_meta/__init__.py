"""
org-meta: Python library for reading Org-mode document metadata.

Reads the ``#+KEY: value`` lines of an Org document into a structured
metadata container, together with the parser state those lines
configure: export options (``#+OPTIONS:``), link abbreviations
(``#+LINK:``) and TODO keyword sequences (``#+TODO:``).

Public API surface:

- ``open(path, ...)`` -- **recommended entry point**. Reads an ``.org``
  file and returns a ``MetaDocument`` handle.

- ``parse(text, ...)`` -- Same, for Org text already in memory.

- ``MetaReader`` -- the reader itself, for callers that want the raw
  ``OrgParserState``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from org_meta.config import ReaderConfig, generate_default_config, load_config, save_config
from org_meta.document import DocumentInfo, MetaDocument
from org_meta.exceptions import ParsingError
from org_meta.reader import MetaReader

__all__ = [
    "open",
    "parse",
    "MetaDocument",
    "DocumentInfo",
    "MetaReader",
    "ReaderConfig",
    "load_config",
    "save_config",
    "generate_default_config",
]

logger = logging.getLogger(__name__)


def _resolve_config(config: ReaderConfig | None, config_path: str | Path | None) -> ReaderConfig:
    if config is not None and config_path is not None:
        raise ValueError("Pass either config or config_path, not both")
    if config_path is not None:
        return load_config(config_path)
    return config or generate_default_config()


def parse(
    text: str,
    config: ReaderConfig | None = None,
    config_path: str | Path | None = None,
    source: str = "<string>",
) -> MetaDocument:
    """Read the metadata lines of an Org document given as a string.

    Args:
        text: The Org document.
        config: Reader configuration; defaults to the built-in defaults.
        config_path: Path to an ``orgmeta.yaml`` to load instead of *config*.
        source: Name used for the document in summaries.

    Returns:
        A ``MetaDocument`` handle.

    Raises:
        ValueError: If both *config* and *config_path* are given.
        FileNotFoundError: If *config_path* does not exist.
        pydantic.ValidationError: If the config fails validation.
    """
    config = _resolve_config(config, config_path)
    state = MetaReader(config).read(text)
    return MetaDocument(state, config=config, source=source)


def open(
    path: str | Path,
    config: ReaderConfig | None = None,
    config_path: str | Path | None = None,
) -> MetaDocument:
    """Read the metadata lines of an Org file.

    Args:
        path: Path to the ``.org`` file (read as UTF-8).
        config: Reader configuration; defaults to the built-in defaults.
        config_path: Path to an ``orgmeta.yaml`` to load instead of *config*.

    Returns:
        A ``MetaDocument`` handle whose ``source`` is *path*.

    Raises:
        ParsingError: If *path* is a YAML file (pass it as *config_path*).
        FileNotFoundError: If *path* or *config_path* does not exist.

    Examples::

        doc = org_meta.open("notes/project.org")
        doc.meta["title"]
        doc.classify_keyword("NEXT")
        doc.to_frame()
    """
    p = Path(path)
    if p.suffix.lower() in (".yaml", ".yml"):
        raise ParsingError(
            f"{path} looks like a config file; pass it as config_path= instead"
        )

    logger.info("open() -- reading %s", path)
    text = p.read_text(encoding="utf-8")
    return parse(text, config=config, config_path=config_path, source=str(path))
