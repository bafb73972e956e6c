"""Query pipeline: query text -> rewrite -> embedding -> ranked records."""

from embedding_index.config import IndexSettings, get_settings
from embedding_index.embeddings.service import EmbeddingService
from embedding_index.exceptions import EmbeddingIndexError, IndexConsistencyError
from embedding_index.index.similarity import SimilarityIndex
from embedding_index.llm.rewriter import QueryRewriter
from embedding_index.logging_config import get_logger
from embedding_index.pipelines.models import RecordMatch, SearchResponse
from embedding_index.records.store import RecordStore

logger = get_logger(__name__)


class QueryPipeline:
    """Answers free-text searches with records from the record store."""

    def __init__(
        self,
        index: SimilarityIndex,
        embedding_service: EmbeddingService,
        record_store: RecordStore,
        rewriter: QueryRewriter | None = None,
        settings: IndexSettings | None = None,
        model: str | None = None,
    ) -> None:
        """Initialize the query pipeline.

        Args:
            index: Loaded similarity index.
            embedding_service: Service that embeds the query.
            record_store: Store used to resolve result ids.
            rewriter: Optional step producing the text that gets embedded.
            settings: Index configuration (result limit, consistency mode).
            model: Embedding model override; must match the indexing model.
        """
        self._index = index
        self._embedding_service = embedding_service
        self._record_store = record_store
        self._rewriter = rewriter
        self._settings = settings or get_settings().index
        self._model = model

    async def search(self, text: str, max_results: int | None = None) -> SearchResponse:
        """Search for records matching ``text``.

        Args:
            text: Raw query text.
            max_results: Result limit; defaults to the configured limit.

        Returns:
            SearchResponse with matches best first.

        Raises:
            UpstreamServiceError: If the rewrite or embedding service fails.
            DimensionMismatchError: If the query embedding does not fit the table.
            IndexConsistencyError: In strict mode, if a hit has no record.
        """
        if not text.strip():
            return SearchResponse(query=text, final_query=text)

        top_k = self._settings.max_results if max_results is None else max_results

        try:
            final_query = await self._rewriter.rewrite(text) if self._rewriter else text
            logger.info(f"Searching with final query: {final_query}")

            embedding = await self._embedding_service.embed(final_query, model=self._model)
            results = self._index.query(embedding.embedding, top_k)
        except EmbeddingIndexError as e:
            e.details.setdefault("operation", "search")
            e.details.setdefault("query", text[:100])
            raise

        logger.info(f"Finished with {len(results)} result(s).")

        matches: list[RecordMatch] = []
        missing_ids: list[str] = []
        for result in results:
            record = await self._record_store.get_record(result.id)
            if record is None:
                missing_ids.append(result.id)
                continue
            matches.append(
                RecordMatch(rank=len(matches) + 1, record=record, score=result.score)
            )

        if missing_ids:
            logger.error(
                "Index returned ids missing from the record store",
                extra={"missing_ids": missing_ids[:10], "missing_count": len(missing_ids)},
            )
            if self._settings.strict_consistency:
                raise IndexConsistencyError(
                    f"{len(missing_ids)} indexed id(s) have no matching record",
                    details={"ids": missing_ids[:10], "query": text[:100]},
                )

        return SearchResponse(
            query=text,
            final_query=final_query,
            matches=matches,
            missing_ids=missing_ids,
        )

    async def close(self) -> None:
        """Close the embedding service and rewriter."""
        await self._embedding_service.close()
        if self._rewriter is not None:
            await self._rewriter.close()
