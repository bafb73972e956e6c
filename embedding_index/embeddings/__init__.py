"""Embedding service module."""

from embedding_index.embeddings.models import EmbeddingResult
from embedding_index.embeddings.service import EmbeddingService, HTTPEmbeddingService

__all__ = [
    "EmbeddingResult",
    "EmbeddingService",
    "HTTPEmbeddingService",
]
