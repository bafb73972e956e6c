#!/usr/bin/env python
"""Rebuild the embedding index from a JSON export of records.

Usage:
    python -m scripts.reindex --records data/movies.json --index textEmbeddingsIndex.csv

The index is only rebuilt when its entry count differs from the number of
records, or always with --rebuild. Exits non-zero if indexing fails.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from embedding_index.config import get_settings
from embedding_index.exceptions import CorruptFormatError, EmbeddingIndexError
from embedding_index.logging_config import get_logger, setup_logging
from embedding_index.pipelines.factory import create_indexing_pipeline
from embedding_index.pipelines.indexing import IndexingPipeline
from embedding_index.records.store import JSONRecordStore

logger = get_logger(__name__)


async def run_reindex(
    records_path: Path,
    index_path: Path | None = None,
    rebuild: bool = False,
) -> bool:
    """Run the indexing pipeline once.

    Args:
        records_path: JSON array of records.
        index_path: Table location override.
        rebuild: Delete any existing table first, forcing a full rebuild.

    Returns:
        True if indexing succeeded, False otherwise.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)

    if index_path is not None:
        settings = settings.model_copy(
            update={"index": settings.index.model_copy(update={"path": index_path})}
        )

    if rebuild and settings.index.path.exists():
        logger.info(f"Removing existing index at {settings.index.path}")
        settings.index.path.unlink()

    logger.info(f"Indexing records from {records_path} into {settings.index.path}")
    pipeline: IndexingPipeline | None = None

    try:
        pipeline = create_indexing_pipeline(JSONRecordStore(records_path), settings)
        report = await pipeline.index_all()
    except EmbeddingIndexError as e:
        logger.error(
            f"Indexing failed: {e.message}",
            extra={"code": e.code.value, "details": e.details},
        )
        if isinstance(e, CorruptFormatError):
            logger.error("Rerun with --rebuild to discard the unreadable index")
        return False
    finally:
        if pipeline is not None:
            await pipeline.close()

    status = "rebuilt" if report.reindexed else "already up to date"
    print(f"Index {status}: {report.entry_count} entries for {report.record_count} records")
    return True


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Rebuild the embedding index from a JSON export of records",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--records",
        type=Path,
        required=True,
        help="Path to a JSON array of records, each with an 'id' key",
    )
    parser.add_argument(
        "--index",
        type=Path,
        default=None,
        help="Path to the index CSV (defaults to INDEX_PATH)",
    )
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="Delete the existing index before indexing, e.g. when it is corrupt",
    )

    args = parser.parse_args()

    ok = asyncio.run(run_reindex(records_path=args.records, index_path=args.index, rebuild=args.rebuild))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
