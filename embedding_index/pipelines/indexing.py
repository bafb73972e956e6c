"""Indexing pipeline: record store -> descriptions -> embeddings -> table."""

from collections import Counter
from collections.abc import Callable

import pydantic

from embedding_index.embeddings.service import EmbeddingService
from embedding_index.exceptions import (
    EmbeddingError,
    EmbeddingIndexError,
    ErrorCode,
    ValidationError,
)
from embedding_index.index.similarity import SimilarityIndex
from embedding_index.logging_config import get_logger
from embedding_index.pipelines.models import IndexingReport
from embedding_index.records.description import describe_record
from embedding_index.records.models import Record
from embedding_index.records.store import RecordStore
from embedding_index.table.models import Entry

logger = get_logger(__name__)


class IndexingPipeline:
    """Keeps the similarity index in step with the record store.

    Every record is described, the descriptions are embedded in one ordered
    batch and the resulting vectors replace the table. Nothing is embedded
    while the table size already matches the record count.
    """

    def __init__(
        self,
        record_store: RecordStore,
        embedding_service: EmbeddingService,
        index: SimilarityIndex,
        describe: Callable[[Record], str] = describe_record,
        model: str | None = None,
    ) -> None:
        """Initialize the indexing pipeline.

        Args:
            record_store: Source of records.
            embedding_service: Service that embeds descriptions.
            index: Index to rebuild.
            describe: Maps a record to the text that gets embedded.
            model: Embedding model override.
        """
        self._record_store = record_store
        self._embedding_service = embedding_service
        self._index = index
        self._describe = describe
        self._model = model

    async def index_all(self) -> IndexingReport:
        """Rebuild the index if the record count changed.

        Returns:
            IndexingReport saying whether work was done.

        Raises:
            ValidationError: If two records share an id.
            UpstreamServiceError: If the embedding service fails.
            StorageError: If the new table cannot be saved.
        """
        records = await self._record_store.fetch_all_records()

        duplicates = sorted(rid for rid, n in Counter(r.id for r in records).items() if n > 1)
        if duplicates:
            raise ValidationError(
                f"Record store holds {len(duplicates)} duplicate id(s)",
                details={"ids": duplicates[:10]},
            )

        async def compute_entries() -> list[Entry]:
            return await self._embed_records(records)

        try:
            reindexed = await self._index.reindex_if_stale_async(
                len(records), compute_entries
            )
        except EmbeddingIndexError as e:
            e.details.setdefault("operation", "index_all")
            raise

        report = IndexingReport(
            reindexed=reindexed,
            record_count=len(records),
            entry_count=self._index.count,
        )
        logger.info("Indexing finished", extra=report.model_dump())
        return report

    async def _embed_records(self, records: list[Record]) -> list[Entry]:
        # Ordered (id, description) pairs; vectors come back in input order
        described = [(record.id, self._describe(record)) for record in records]

        results = await self._embedding_service.embed_batch(
            [description for _, description in described],
            model=self._model,
        )
        if len(results) != len(described):
            raise EmbeddingError(
                f"Embedding service returned {len(results)} vectors "
                f"for {len(described)} descriptions",
                code=ErrorCode.EMBEDDING_RESPONSE_INVALID,
            )

        entries = []
        for (record_id, _), result in zip(described, results, strict=True):
            try:
                entries.append(Entry(id=record_id, vector=tuple(result.embedding)))
            except pydantic.ValidationError as e:
                raise EmbeddingError(
                    f"Unusable embedding for record {record_id}",
                    code=ErrorCode.EMBEDDING_RESPONSE_INVALID,
                    details={"id": record_id, "error": str(e)},
                ) from e
        return entries

    async def close(self) -> None:
        """Close the embedding service."""
        await self._embedding_service.close()
