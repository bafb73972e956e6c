"""Tests for the exception hierarchy."""

from embedding_index.exceptions import (
    CorruptFormatError,
    DimensionMismatchError,
    EmbeddingError,
    EmbeddingIndexError,
    ErrorCode,
    IndexConsistencyError,
    IndexIOError,
    LLMError,
    StorageError,
    UpstreamServiceError,
    ValidationError,
)


class TestErrorCode:
    """Tests for error codes."""

    def test_error_code_format(self) -> None:
        """Error codes follow IDX-XXXX format."""
        for code in ErrorCode:
            assert code.value.startswith("IDX-")
            assert len(code.value) == 8

    def test_error_code_uniqueness(self) -> None:
        """All error codes are unique."""
        codes = [code.value for code in ErrorCode]
        assert len(codes) == len(set(codes))


class TestEmbeddingIndexError:
    """Tests for base exception."""

    def test_basic_exception(self) -> None:
        """Base exception stores message and code."""
        error = EmbeddingIndexError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}
        assert str(error) == "Something went wrong"

    def test_to_dict(self) -> None:
        """Exception converts to a renderable dict."""
        error = CorruptFormatError("bad row", details={"line": 3})

        assert error.to_dict() == {
            "error": {
                "code": "IDX-2001",
                "message": "bad row",
                "details": {"line": 3},
            }
        }


class TestTaxonomy:
    """Tests for the kinds callers distinguish."""

    def test_storage_errors(self) -> None:
        """Corrupt files and I/O failures are both storage errors."""
        assert isinstance(CorruptFormatError("x"), StorageError)
        assert isinstance(IndexIOError("x"), StorageError)
        assert IndexIOError("x").code == ErrorCode.INDEX_IO_ERROR

    def test_dimension_mismatch_message(self) -> None:
        """Dimension mismatch reports both sizes."""
        error = DimensionMismatchError(expected=3, actual=2, details={"id": "a"})
        assert error.expected == 3
        assert error.actual == 2
        assert error.code == ErrorCode.DIMENSION_MISMATCH
        assert error.details == {"expected": 3, "actual": 2, "id": "a"}
        assert "3" in error.message and "2" in error.message

    def test_upstream_errors(self) -> None:
        """Embedding and LLM failures share the upstream base class."""
        assert isinstance(EmbeddingError("x"), UpstreamServiceError)
        assert isinstance(LLMError("x"), UpstreamServiceError)
        assert EmbeddingError("x").code == ErrorCode.EMBEDDING_SERVICE_ERROR
        assert LLMError("x", code=ErrorCode.LLM_TIMEOUT).code == ErrorCode.LLM_TIMEOUT

    def test_fixed_codes(self) -> None:
        """Single-purpose errors carry fixed codes."""
        assert ValidationError("x").code == ErrorCode.VALIDATION_ERROR
        assert IndexConsistencyError("x").code == ErrorCode.RECORD_NOT_FOUND

    def test_all_inherit_from_base(self) -> None:
        """Every error can be caught as EmbeddingIndexError."""
        for error in (
            CorruptFormatError("x"),
            IndexIOError("x"),
            DimensionMismatchError(1, 2),
            EmbeddingError("x"),
            LLMError("x"),
            ValidationError("x"),
            IndexConsistencyError("x"),
        ):
            assert isinstance(error, EmbeddingIndexError)
