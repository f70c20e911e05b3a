"""
Demo script: read the metadata of Org files via the public API.

Usage:
    uv run python scripts/run_meta.py notes/a.org notes/b.org
    uv run python scripts/run_meta.py notes/*.org --config orgmeta.yaml

Each file is read with ``org_meta.open()``; the exported metadata of all
files is printed as one table at the end.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_meta")


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _split_args(argv: list[str]) -> tuple[list[str], str | None]:
    """Separate input paths from an optional ``--config PATH``."""
    paths: list[str] = []
    config_path: str | None = None
    args = iter(argv)
    for arg in args:
        if arg == "--config":
            config_path = next(args, None)
        else:
            paths.append(arg)
    return paths, config_path


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    import org_meta
    from org_meta.meta import build_meta_table

    input_files, config_path = _split_args(sys.argv[1:])
    if not input_files:
        log.error("Usage: run_meta.py FILE.org [FILE.org ...] [--config orgmeta.yaml]")
        sys.exit(2)

    documents = {}
    for input_path in input_files:
        if not Path(input_path).exists():
            log.warning("SKIP  %s  (file not found)", input_path)
            continue

        doc = org_meta.open(input_path, config_path=config_path)
        info = doc.describe()
        log.info("%s", input_path)
        log.info("  keys          : %s", ", ".join(info.keys) or "-")
        log.info("  hidden keys   : %s", ", ".join(info.hidden_keys) or "-")
        log.info("  link types    : %s", ", ".join(info.link_types) or "-")
        log.info("  TODO | DONE   : %s | %s", " ".join(info.todo_keywords), " ".join(info.done_keywords))
        documents[input_path] = doc.meta

    table = build_meta_table(documents)
    print(table.to_string(index=False))


if __name__ == "__main__":
    main()
