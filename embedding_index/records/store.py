"""Record store interface and implementations."""

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

import pydantic

from embedding_index.exceptions import RecordStoreError
from embedding_index.logging_config import get_logger
from embedding_index.records.models import Record

logger = get_logger(__name__)


class RecordStore(ABC):
    """Source of the records that get indexed and returned by searches."""

    @abstractmethod
    async def fetch_all_records(self) -> list[Record]:
        """Return every record.

        Raises:
            RecordStoreError: If the store cannot be read.
        """
        ...

    @abstractmethod
    async def get_record(self, record_id: str) -> Record | None:
        """Return the record with ``record_id``, or None if unknown.

        Raises:
            RecordStoreError: If the store cannot be read.
        """
        ...


class InMemoryRecordStore(RecordStore):
    """Record store backed by a list kept in memory."""

    def __init__(self, records: Iterable[Record] | None = None) -> None:
        self._records: list[Record] = list(records or [])

    def add(self, record: Record) -> None:
        """Append a record."""
        self._records.append(record)

    async def fetch_all_records(self) -> list[Record]:
        """Return every record in insertion order."""
        return list(self._records)

    async def get_record(self, record_id: str) -> Record | None:
        """Return the first record with ``record_id``."""
        for record in self._records:
            if record.id == record_id:
                return record
        return None


class JSONRecordStore(RecordStore):
    """Read-only record store over a JSON array of objects.

    Each object needs an ``id`` key; the remaining keys become the record's
    fields. The file is read once, on first access.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._records: list[Record] | None = None
        self._by_id: dict[str, Record] = {}

    def _load(self) -> list[Record]:
        if self._records is not None:
            return self._records

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise RecordStoreError(
                f"Failed to read records: {e}",
                details={"path": str(self._path)},
            ) from e
        except json.JSONDecodeError as e:
            raise RecordStoreError(
                f"Records file is not valid JSON: {e}",
                details={"path": str(self._path), "line": e.lineno},
            ) from e

        if not isinstance(data, list):
            raise RecordStoreError(
                "Records file must contain a JSON array",
                details={"path": str(self._path)},
            )

        try:
            records = [Record.from_mapping(item) for item in data]
        except (AttributeError, KeyError, TypeError, pydantic.ValidationError) as e:
            raise RecordStoreError(
                f"Invalid record in {self._path.name}: {e}",
                details={"path": str(self._path)},
            ) from e

        self._records = records
        self._by_id = {}
        for record in records:
            self._by_id.setdefault(record.id, record)

        logger.info(
            f"Loaded {len(records)} records",
            extra={"path": str(self._path)},
        )
        return records

    async def fetch_all_records(self) -> list[Record]:
        """Return every record in file order."""
        return list(self._load())

    async def get_record(self, record_id: str) -> Record | None:
        """Return the record with ``record_id``."""
        self._load()
        return self._by_id.get(record_id)
