"""In-memory vector table with a CSV snapshot format.

File layout::

    id,v0,v1,...,v{D-1}
    <id>,<float>,<float>,...

One header line, then one row per entry in insertion order. Components are
written with ``repr(float)``, the shortest string that parses back to the
same double, so a save/load cycle is lossless and locale-independent.
"""

import csv
import math
import os
import re
import tempfile
import time
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TextIO

import numpy as np

from embedding_index.exceptions import (
    CorruptFormatError,
    DimensionMismatchError,
    IndexIOError,
)
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import track_storage_operation
from embedding_index.table.models import Entry

logger = get_logger(__name__)

ID_COLUMN = "id"

# Plain decimal literal with optional exponent; rejects nan/inf, underscores
# and whitespace that float() would otherwise accept.
_FLOAT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def header_for(dimensions: int) -> list[str]:
    """Column names for a table of the given dimensionality."""
    return [ID_COLUMN, *(f"v{i}" for i in range(dimensions))]


class VectorTable:
    """Ordered collection of (id, vector) entries sharing one dimensionality.

    The table does not deduplicate ids: callers that need unique ids reset
    the table before inserting a full set.
    """

    def __init__(self, entries: Iterable[Entry] | None = None) -> None:
        self._entries: list[Entry] = []
        self._dimensions: int | None = None
        self._matrix: np.ndarray | None = None
        if entries is not None:
            self.insert(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"VectorTable(count={self.count}, dimensions={self._dimensions})"

    @property
    def count(self) -> int:
        """Number of entries."""
        return len(self._entries)

    @property
    def dimensions(self) -> int | None:
        """Shared vector length, or None while the table is empty."""
        return self._dimensions

    @property
    def entries(self) -> tuple[Entry, ...]:
        """Entries in insertion order."""
        return tuple(self._entries)

    @property
    def ids(self) -> list[str]:
        """Identifiers in insertion order."""
        return [entry.id for entry in self._entries]

    def get(self, entry_id: str) -> Entry | None:
        """Return the first entry with the given id, if any."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def insert(self, entries: Iterable[Entry]) -> None:
        """Append entries in order.

        Raises:
            DimensionMismatchError: If an entry's vector length differs from
                the table's (or from earlier entries in the same batch).
        """
        batch = list(entries)
        dimensions = self._dimensions
        for entry in batch:
            if dimensions is None:
                dimensions = entry.dimensions
            elif entry.dimensions != dimensions:
                raise DimensionMismatchError(
                    expected=dimensions,
                    actual=entry.dimensions,
                    details={"id": entry.id},
                )

        if not batch:
            return
        self._entries.extend(batch)
        self._dimensions = dimensions
        self._matrix = None

    def reset(self) -> None:
        """Remove every entry."""
        self._entries.clear()
        self._dimensions = None
        self._matrix = None

    def matrix(self) -> np.ndarray:
        """Vectors stacked as a ``(count, dimensions)`` float64 array.

        Cached until the next insert or reset.
        """
        if self._matrix is None:
            if not self._entries:
                self._matrix = np.empty((0, self._dimensions or 0), dtype=np.float64)
            else:
                self._matrix = np.array(
                    [entry.vector for entry in self._entries], dtype=np.float64
                )
        return self._matrix

    @classmethod
    def load(cls, path: Path | str) -> "VectorTable":
        """Read a table from ``path``.

        A missing file yields an empty table.

        Raises:
            CorruptFormatError: If the file exists but cannot be parsed.
            IndexIOError: If the file exists but cannot be read.
        """
        path = Path(path)
        start = time.perf_counter()

        if not path.exists():
            logger.info("No vector table at path, starting empty", extra={"path": str(path)})
            return cls()

        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                entries = list(_read_rows(handle, path))
        except (CorruptFormatError, IndexIOError):
            track_storage_operation("load", time.perf_counter() - start, success=False)
            raise
        except UnicodeDecodeError as e:
            track_storage_operation("load", time.perf_counter() - start, success=False)
            raise CorruptFormatError(
                f"Vector table is not valid UTF-8: {path}",
                details={"path": str(path), "error": str(e)},
            ) from e
        except csv.Error as e:
            track_storage_operation("load", time.perf_counter() - start, success=False)
            raise CorruptFormatError(
                f"Malformed CSV in vector table: {e}",
                details={"path": str(path), "error": str(e)},
            ) from e
        except OSError as e:
            track_storage_operation("load", time.perf_counter() - start, success=False)
            raise IndexIOError(
                f"Failed to read vector table: {e}",
                details={"path": str(path), "error": str(e)},
            ) from e

        table = cls(entries)
        track_storage_operation("load", time.perf_counter() - start)
        logger.info(
            "Loaded vector table",
            extra={"path": str(path), "count": table.count, "dimensions": table.dimensions},
        )
        return table

    def save(self, path: Path | str) -> None:
        """Write the whole table to ``path``, replacing any existing file.

        The snapshot is written to a temporary file in the same directory,
        fsynced and renamed over the target, so readers only ever see the
        old or the new table.

        Raises:
            IndexIOError: If the file cannot be written.
        """
        destination = Path(path)
        start = time.perf_counter()

        fd: int | None = None
        tmp_path: str | None = None

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(destination.parent),
                prefix=destination.name,
                suffix=".tmp",
                text=True,
            )

            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                fd = None  # Ownership transferred to file object
                writer = csv.writer(handle, lineterminator="\n")
                writer.writerow(header_for(self._dimensions or 0))
                for entry in self._entries:
                    writer.writerow([entry.id, *(repr(float(c)) for c in entry.vector)])
                handle.flush()
                os.fsync(handle.fileno())

            os.replace(tmp_path, destination)
            tmp_path = None

        except OSError as e:
            track_storage_operation("save", time.perf_counter() - start, success=False)
            logger.error(
                f"Failed to save vector table: {e}",
                extra={"path": str(destination)},
            )
            raise IndexIOError(
                f"Failed to write vector table: {e}",
                details={"path": str(destination), "error": str(e)},
            ) from e
        finally:
            if fd is not None:
                os.close(fd)
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except FileNotFoundError:
                    pass

        track_storage_operation("save", time.perf_counter() - start)
        logger.info(
            "Saved vector table",
            extra={"path": str(destination), "count": self.count},
        )


def _read_rows(handle: TextIO, path: Path) -> Iterator[Entry]:
    reader = csv.reader(handle)
    try:
        header = next(reader)
    except StopIteration:
        raise CorruptFormatError(
            f"Vector table has no header: {path}",
            details={"path": str(path)},
        ) from None

    dimensions = len(header) - 1
    if dimensions < 0 or header != header_for(dimensions):
        raise CorruptFormatError(
            f"Unexpected vector table header: {path}",
            details={"path": str(path), "header": header[:5]},
        )

    for row in reader:
        line = reader.line_num
        if len(row) != len(header):
            raise CorruptFormatError(
                f"Row has {len(row)} columns, header has {len(header)}",
                details={"path": str(path), "line": line},
            )
        if dimensions == 0:
            raise CorruptFormatError(
                "Vector table has rows but no vector columns",
                details={"path": str(path), "line": line},
            )

        entry_id, *components = row
        if not entry_id:
            raise CorruptFormatError(
                "Row has an empty id",
                details={"path": str(path), "line": line},
            )

        bad = next((c for c in components if not _FLOAT_RE.fullmatch(c)), None)
        if bad is not None:
            raise CorruptFormatError(
                f"Non-numeric vector component {bad!r}",
                details={"path": str(path), "line": line, "id": entry_id},
            )

        vector = tuple(float(c) for c in components)
        if not all(math.isfinite(c) for c in vector):
            raise CorruptFormatError(
                "Vector component out of range",
                details={"path": str(path), "line": line, "id": entry_id},
            )
        yield Entry(id=entry_id, vector=vector)
