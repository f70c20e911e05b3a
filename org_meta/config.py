"""
Configuration models and YAML I/O for org-meta.

This module defines the Pydantic model that maps 1:1 to an
``orgmeta.yaml`` file, plus helpers for loading, saving, and generating
the default config.

Key model:
- ReaderConfig: initial export settings, the fallback TODO sequence,
  predefined link abbreviations, and which ``#+`` lines to skip.

Key functions:
- load_config(path) -> ReaderConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
- generate_default_config() -> ReaderConfig: The built-in defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from org_meta.exceptions import ConfigValidationError, ParseFailure
from org_meta.export_settings import ExportSettings
from org_meta.links import LinkFormatter, compile_format, is_valid_link_type
from org_meta.todo import TodoSequence, parse_todo_sequence

logger = logging.getLogger(__name__)

DEFAULT_AFFILIATED_KEYWORDS = ["caption", "name", "label", "results", "plot", "header"]


class ReaderConfig(BaseModel):
    """Top-level configuration for reading Org metadata."""

    export: ExportSettings = Field(
        default_factory=ExportSettings,
        description="Export settings in effect before any #+OPTIONS: line",
    )
    default_todo: str = Field(
        "TODO | DONE",
        description="TODO sequence used when a document declares none",
    )
    link_abbreviations: dict[str, str] = Field(
        default_factory=dict,
        description="Link type -> format string, registered before the document is read",
    )
    skip_blocks: bool = Field(
        True, description="If True, #+KEY: lines inside #+BEGIN_/#+END_ blocks are ignored"
    )
    affiliated_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_AFFILIATED_KEYWORDS),
        description=(
            "Keys that describe the following element rather than the document. "
            "Keys starting with 'attr_' are always treated as affiliated."
        ),
    )

    @field_validator("affiliated_keywords")
    @classmethod
    def _lowercase_affiliated_keywords(cls, keywords: list[str]) -> list[str]:
        return [keyword.lower() for keyword in keywords]

    @model_validator(mode="after")
    def _check_default_todo(self) -> ReaderConfig:
        """Validate that default_todo resolves to a TODO sequence."""
        try:
            parse_todo_sequence(self.default_todo)
        except ParseFailure as exc:
            raise ValueError(
                f"default_todo {self.default_todo!r} does not name any TODO keyword"
            ) from exc
        return self

    def default_todo_sequence(self) -> TodoSequence:
        return parse_todo_sequence(self.default_todo)

    def is_affiliated(self, key: str) -> bool:
        key = key.lower()
        return key.startswith("attr_") or key in self.affiliated_keywords


def load_config(path: str | Path) -> ReaderConfig:
    """Load and validate an orgmeta.yaml into a ReaderConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return ReaderConfig.model_validate(raw)


def save_config(config: ReaderConfig, path: str | Path) -> None:
    """Serialize a ReaderConfig to YAML.

    Writes a human-readable YAML file with a header comment.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# org-meta configuration\n")
        f.write("# Edit this file to change export defaults, link abbreviations, etc.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)


def generate_default_config() -> ReaderConfig:
    """Build a ReaderConfig holding the built-in defaults."""
    return ReaderConfig()


def compile_link_abbreviations(config: ReaderConfig) -> dict[str, LinkFormatter]:
    """Compile ``config.link_abbreviations`` into link formatters.

    Entries whose link type could never appear in a ``type:path`` target
    (it must start with a letter) are skipped with a warning.
    """
    formatters: dict[str, LinkFormatter] = {}
    for link_type, fmt in config.link_abbreviations.items():
        if not is_valid_link_type(link_type):
            logger.warning("Skipping link abbreviation with invalid type %r", link_type)
            continue
        formatters[link_type] = compile_format(fmt)
    return formatters
