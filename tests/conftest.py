"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from embedding_index.config import IndexSettings
from embedding_index.table.models import Entry


@pytest.fixture
def index_path(tmp_path: Path) -> Path:
    """Location for a vector table inside the test's temp directory."""
    return tmp_path / "textEmbeddingsIndex.csv"


@pytest.fixture
def index_settings(index_path: Path) -> IndexSettings:
    """Index settings pointing at the temp table."""
    return IndexSettings(path=index_path, max_results=10)


@pytest.fixture
def axis_entries() -> list[Entry]:
    """Three 2-d unit vectors: +x, +y and -x."""
    return [
        Entry(id="east", vector=(1.0, 0.0)),
        Entry(id="north", vector=(0.0, 1.0)),
        Entry(id="west", vector=(-1.0, 0.0)),
    ]
