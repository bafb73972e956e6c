"""Observability module for metrics and monitoring."""

from embedding_index.observability.metrics import (
    get_metrics,
    track_embedding_request,
    track_llm_request,
    track_query,
    track_reindex,
    track_storage_operation,
)

__all__ = [
    "get_metrics",
    "track_embedding_request",
    "track_llm_request",
    "track_query",
    "track_reindex",
    "track_storage_operation",
]
