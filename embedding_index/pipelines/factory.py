"""Wiring of pipelines from application settings."""

from embedding_index.config import Settings, get_settings
from embedding_index.embeddings.service import HTTPEmbeddingService
from embedding_index.index.similarity import SimilarityIndex
from embedding_index.llm.client import OpenAICompatibleClient
from embedding_index.llm.rewriter import LLMQueryRewriter
from embedding_index.pipelines.indexing import IndexingPipeline
from embedding_index.pipelines.query import QueryPipeline
from embedding_index.records.store import RecordStore


def create_indexing_pipeline(
    record_store: RecordStore,
    settings: Settings | None = None,
) -> IndexingPipeline:
    """Build an indexing pipeline backed by the configured HTTP services."""
    settings = settings or get_settings()
    # Table loads before any HTTP client is opened
    index = SimilarityIndex(settings=settings.index)
    return IndexingPipeline(
        record_store=record_store,
        embedding_service=HTTPEmbeddingService(settings.embedding),
        index=index,
    )


def create_query_pipeline(
    record_store: RecordStore,
    settings: Settings | None = None,
) -> QueryPipeline:
    """Build a query pipeline, with LLM rewriting when enabled."""
    settings = settings or get_settings()
    index = SimilarityIndex(settings=settings.index)
    rewriter = None
    if settings.llm.rewrite_enabled:
        rewriter = LLMQueryRewriter(OpenAICompatibleClient(settings.llm))
    return QueryPipeline(
        index=index,
        embedding_service=HTTPEmbeddingService(settings.embedding),
        record_store=record_store,
        rewriter=rewriter,
        settings=settings.index,
    )
