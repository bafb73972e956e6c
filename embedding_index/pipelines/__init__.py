"""Indexing and query pipelines."""

from embedding_index.pipelines.factory import create_indexing_pipeline, create_query_pipeline
from embedding_index.pipelines.indexing import IndexingPipeline
from embedding_index.pipelines.models import IndexingReport, RecordMatch, SearchResponse
from embedding_index.pipelines.query import QueryPipeline

__all__ = [
    "IndexingPipeline",
    "IndexingReport",
    "QueryPipeline",
    "RecordMatch",
    "SearchResponse",
    "create_indexing_pipeline",
    "create_query_pipeline",
]
