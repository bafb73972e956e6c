"""Exception hierarchy for the embedding index.

All custom exceptions inherit from EmbeddingIndexError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "IDX-1000"
    VALIDATION_ERROR = "IDX-1002"

    # Storage errors (2xxx)
    STORAGE_ERROR = "IDX-2000"
    CORRUPT_FORMAT = "IDX-2001"
    INDEX_IO_ERROR = "IDX-2002"

    # Index errors (3xxx)
    DIMENSION_MISMATCH = "IDX-3001"

    # Embedding errors (4xxx)
    EMBEDDING_SERVICE_ERROR = "IDX-4000"
    EMBEDDING_TIMEOUT = "IDX-4001"
    EMBEDDING_RESPONSE_INVALID = "IDX-4002"

    # LLM errors (5xxx)
    LLM_SERVICE_ERROR = "IDX-5000"
    LLM_TIMEOUT = "IDX-5001"
    LLM_RATE_LIMIT = "IDX-5002"

    # Record store errors (6xxx)
    RECORD_STORE_ERROR = "IDX-6000"
    RECORD_NOT_FOUND = "IDX-6001"


class EmbeddingIndexError(Exception):
    """Base exception for all embedding index errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for rendering."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(EmbeddingIndexError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class StorageError(EmbeddingIndexError):
    """Persisted vector table error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.STORAGE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class CorruptFormatError(StorageError):
    """Persisted table exists but cannot be parsed.

    Not recoverable without regenerating the index.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CORRUPT_FORMAT, details)


class IndexIOError(StorageError):
    """Reading or writing the persisted table failed. Retryable by the caller."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.INDEX_IO_ERROR, details)


class DimensionMismatchError(EmbeddingIndexError):
    """Vector length differs from the table's dimensionality."""

    def __init__(
        self,
        expected: int,
        actual: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected a vector of {expected} dimensions, got {actual}",
            ErrorCode.DIMENSION_MISMATCH,
            {"expected": expected, "actual": actual, **(details or {})},
        )


class UpstreamServiceError(EmbeddingIndexError):
    """Failure of an external service (embedding or query rewrite)."""


class EmbeddingError(UpstreamServiceError):
    """Embedding service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class LLMError(UpstreamServiceError):
    """LLM service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class RecordStoreError(EmbeddingIndexError):
    """Record store could not be read."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RECORD_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class IndexConsistencyError(EmbeddingIndexError):
    """Index returned ids that the record store does not know."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.RECORD_NOT_FOUND, details)
