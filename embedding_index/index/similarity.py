"""Similarity index over a persisted vector table."""

import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from pathlib import Path

import numpy as np

from embedding_index.config import IndexSettings, get_settings
from embedding_index.exceptions import DimensionMismatchError
from embedding_index.index.models import SearchResult
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import track_query, track_reindex
from embedding_index.table.models import Entry
from embedding_index.table.vector_table import VectorTable

logger = get_logger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(expected=len(a), actual=len(b))
    if len(a) == 0:
        return 0.0
    unit_a, unit_b = _unit_rows(np.asarray([a, b], dtype=np.float64))
    return float(np.clip(np.dot(unit_a, unit_b), -1.0, 1.0))


def _unit_rows(matrix: np.ndarray) -> np.ndarray:
    """Scale each row of ``matrix`` to unit length. All-zero rows stay zero.

    Rows are divided by their largest magnitude before taking the norm, so
    finite components never overflow or underflow the norm.
    """
    scale = np.max(np.abs(matrix), axis=1, keepdims=True)
    scaled = np.divide(matrix, scale, out=np.zeros_like(matrix), where=scale > 0.0)
    norms = np.linalg.norm(scaled, axis=1, keepdims=True)
    return np.divide(scaled, norms, out=np.zeros_like(scaled), where=norms > 0.0)


class SimilarityIndex:
    """Exact cosine-similarity search over a file-backed vector table.

    The index owns one ``VectorTable`` value loaded from ``path`` at
    construction. Reindexing builds a replacement table, persists it and
    only then swaps it in, so a failed reindex leaves both the file and the
    in-memory table as they were.

    Staleness is decided by entry count alone: a record set that changed
    composition but kept its size is treated as up to date. Another process
    rewriting the file is not noticed either; construct a new index to pick
    up its changes.
    """

    def __init__(
        self,
        path: Path | str | None = None,
        settings: IndexSettings | None = None,
    ) -> None:
        """Load the index from disk.

        Args:
            path: Table location. Defaults to the configured index path.
            settings: Index configuration.

        Raises:
            CorruptFormatError: If the table file cannot be parsed.
            IndexIOError: If the table file cannot be read.
        """
        self._settings = settings or get_settings().index
        self._path = Path(path) if path is not None else self._settings.path
        self._table = VectorTable.load(self._path)

    @property
    def path(self) -> Path:
        """Location of the persisted table."""
        return self._path

    @property
    def table(self) -> VectorTable:
        """The currently owned table."""
        return self._table

    @property
    def count(self) -> int:
        """Number of indexed entries."""
        return self._table.count

    def is_stale(self, current_record_count: int) -> bool:
        """Whether the table size differs from the record count."""
        return self._table.count != current_record_count

    def reindex_if_stale(
        self,
        current_record_count: int,
        compute_entries: Callable[[], Iterable[Entry]],
    ) -> bool:
        """Rebuild the table when its size differs from ``current_record_count``.

        Args:
            current_record_count: Number of records in the source store.
            compute_entries: Produces the full set of fresh entries. Only
                called when the table is stale.

        Returns:
            True if the table was rebuilt and saved, False if nothing was done.

        Raises:
            Whatever ``compute_entries`` raises, plus ``DimensionMismatchError``
            or ``IndexIOError`` from building and saving the new table.
        """
        if not self._check_stale(current_record_count):
            return False

        try:
            entries = compute_entries()
            self._replace(entries)
        except Exception:
            track_reindex("error")
            raise
        return True

    async def reindex_if_stale_async(
        self,
        current_record_count: int,
        compute_entries: Callable[[], Awaitable[Iterable[Entry]]],
    ) -> bool:
        """Awaitable variant of ``reindex_if_stale``.

        ``compute_entries`` is awaited only when the table is stale, so
        embedding calls are skipped entirely for an up-to-date index.
        """
        if not self._check_stale(current_record_count):
            return False

        try:
            entries = await compute_entries()
            self._replace(entries)
        except Exception:
            track_reindex("error")
            raise
        return True

    def query(self, vector: Sequence[float], top_k: int) -> list[SearchResult]:
        """Rank stored entries by cosine similarity to ``vector``.

        Results are ordered by descending score; equal scores keep table
        insertion order. Entries or queries with zero norm score 0.

        Args:
            vector: Query embedding.
            top_k: Maximum number of results. Values <= 0 return nothing.

        Returns:
            At most ``top_k`` results, best first.

        Raises:
            DimensionMismatchError: If ``vector`` does not match the table's
                dimensionality.
        """
        start = time.perf_counter()
        dimensions = self._table.dimensions

        if dimensions is not None and len(vector) != dimensions:
            raise DimensionMismatchError(
                expected=dimensions,
                actual=len(vector),
                details={"path": str(self._path)},
            )

        if top_k <= 0 or dimensions is None:
            track_query(time.perf_counter() - start, 0, None)
            return []

        scores = self._scores(np.asarray(vector, dtype=np.float64))
        # Stable sort on negated scores keeps insertion order among ties
        order = np.argsort(-scores, kind="stable")[:top_k]

        ids = self._table.ids
        results = [SearchResult(id=ids[i], score=float(scores[i])) for i in order]

        track_query(
            time.perf_counter() - start,
            len(results),
            results[0].score if results else None,
        )
        logger.debug(
            f"Query returned {len(results)} results",
            extra={"top_k": top_k, "entries": self._table.count},
        )
        return results

    def _scores(self, query: np.ndarray) -> np.ndarray:
        unit_query = _unit_rows(query[np.newaxis, :])[0]
        return np.clip(_unit_rows(self._table.matrix()) @ unit_query, -1.0, 1.0)

    def _check_stale(self, current_record_count: int) -> bool:
        if not self.is_stale(current_record_count):
            track_reindex("unchanged", self._table.count)
            logger.info(
                "Index is up to date",
                extra={"count": current_record_count, "path": str(self._path)},
            )
            return False

        logger.info(
            "Index is stale, rebuilding",
            extra={
                "indexed": self._table.count,
                "records": current_record_count,
                "path": str(self._path),
            },
        )
        return True

    def _replace(self, entries: Iterable[Entry]) -> None:
        table = VectorTable(entries)
        table.save(self._path)
        self._table = table
        track_reindex("reindexed", table.count)
        logger.info(
            "Reindexed vector table",
            extra={"count": table.count, "dimensions": table.dimensions},
        )
