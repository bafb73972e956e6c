"""Vector table module."""

from embedding_index.table.models import Entry
from embedding_index.table.vector_table import VectorTable

__all__ = [
    "Entry",
    "VectorTable",
]
