"""Similarity index module."""

from embedding_index.index.models import SearchResult
from embedding_index.index.similarity import SimilarityIndex, cosine_similarity

__all__ = [
    "SearchResult",
    "SimilarityIndex",
    "cosine_similarity",
]
