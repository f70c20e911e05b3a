"""
Shared test fixtures and path constants for org-meta tests.

All input file paths are defined here as module-level constants for
easy discovery and modification. If input files move or new ones are
added, update this file.
"""

from pathlib import Path

import pytest

from org_meta.state import OrgParserState

# ---------------------------------------------------------------------------
# Input file paths -- edit here if files move or new ones are added
# ---------------------------------------------------------------------------
INPUT_DIR = Path(__file__).resolve().parent / "inputs"

PROJECT_ORG = INPUT_DIR / "project.org"
READER_CONFIG_YAML = INPUT_DIR / "orgmeta.yaml"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def state() -> OrgParserState:
    """A fresh parser state with default export settings."""
    return OrgParserState()


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs against files in tests/inputs)",
    )
