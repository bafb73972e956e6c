"""Tests for embedding service."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import SecretStr

from embedding_index.config import EmbeddingSettings
from embedding_index.embeddings.models import EmbeddingResult
from embedding_index.embeddings.service import HTTPEmbeddingService
from embedding_index.exceptions import EmbeddingError, ErrorCode, UpstreamServiceError


def _response(data: list[dict]) -> MagicMock:
    mock_response = MagicMock()
    mock_response.json.return_value = {"data": data}
    mock_response.raise_for_status = MagicMock()
    return mock_response


class TestEmbeddingResult:
    """Tests for EmbeddingResult model."""

    def test_valid_result(self) -> None:
        """Valid embedding result is created."""
        result = EmbeddingResult(
            text="test",
            embedding=[0.1, 0.2, 0.3],
            model="test-model",
            dimensions=3,
        )
        assert result.text == "test"
        assert result.dimensions == 3

    def test_dimensions_mismatch(self) -> None:
        """Mismatched dimensions raise error."""
        with pytest.raises(ValueError, match="dimensions"):
            EmbeddingResult(
                text="test",
                embedding=[0.1, 0.2, 0.3],
                model="test-model",
                dimensions=5,
            )


class TestHTTPEmbeddingService:
    """Tests for HTTPEmbeddingService."""

    def test_model_name(self) -> None:
        """Service returns configured model name."""
        service = HTTPEmbeddingService(settings=EmbeddingSettings(model="test-model"))
        assert service.model_name == "test-model"

    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        """Single text embedding works."""
        settings = EmbeddingSettings(base_url="http://test:8080/v1", model="test-model")

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response([{"embedding": [0.1, 0.2, 0.3]}])

        service = HTTPEmbeddingService(settings=settings, client=mock_client)
        result = await service.embed("test text")

        assert result.text == "test text"
        assert result.embedding == [0.1, 0.2, 0.3]
        assert result.model == "test-model"
        assert mock_client.post.call_args.args[0] == "http://test:8080/v1/embeddings"
        assert mock_client.post.call_args.kwargs["json"] == {
            "input": ["test text"],
            "model": "test-model",
        }

    @pytest.mark.asyncio
    async def test_model_override(self) -> None:
        """A per-call model replaces the configured one."""
        settings = EmbeddingSettings(base_url="http://test:8080", model="default-model")

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response([{"embedding": [1.0]}])

        service = HTTPEmbeddingService(settings=settings, client=mock_client)
        result = await service.embed("text", model="other-model")

        assert result.model == "other-model"
        assert mock_client.post.call_args.kwargs["json"]["model"] == "other-model"

    @pytest.mark.asyncio
    async def test_api_key_header(self) -> None:
        """Configured API key is sent as a bearer token."""
        settings = EmbeddingSettings(base_url="http://test:8080", api_key=SecretStr("sk-test"))

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response([{"embedding": [1.0]}])

        service = HTTPEmbeddingService(settings=settings, client=mock_client)
        await service.embed("text")

        assert mock_client.post.call_args.kwargs["headers"] == {"Authorization": "Bearer sk-test"}

    @pytest.mark.asyncio
    async def test_embed_batch_preserves_order(self) -> None:
        """Results follow input order even when the response is shuffled."""
        settings = EmbeddingSettings(base_url="http://test:8080", batch_size=10)

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response(
            [
                {"index": 1, "embedding": [0.3, 0.4]},
                {"index": 0, "embedding": [0.1, 0.2]},
            ]
        )

        service = HTTPEmbeddingService(settings=settings, client=mock_client)
        results = await service.embed_batch(["text1", "text2"])

        assert [r.text for r in results] == ["text1", "text2"]
        assert results[0].embedding == [0.1, 0.2]
        assert results[1].embedding == [0.3, 0.4]

    @pytest.mark.asyncio
    async def test_embed_empty_list(self) -> None:
        """Empty list returns empty results without a request."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        service = HTTPEmbeddingService(
            settings=EmbeddingSettings(base_url="http://test:8080"),
            client=mock_client,
        )

        assert await service.embed_batch([]) == []
        mock_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_count_mismatch(self) -> None:
        """Fewer vectors than texts is an invalid response."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response([{"embedding": [0.1]}])

        service = HTTPEmbeddingService(
            settings=EmbeddingSettings(base_url="http://test:8080"),
            client=mock_client,
        )

        with pytest.raises(EmbeddingError) as exc_info:
            await service.embed_batch(["a", "b"])

        assert exc_info.value.code == ErrorCode.EMBEDDING_RESPONSE_INVALID

    @pytest.mark.asyncio
    async def test_malformed_response(self) -> None:
        """Responses without a data list are invalid."""
        mock_response = MagicMock()
        mock_response.json.return_value = {"error": "nope"}
        mock_response.raise_for_status = MagicMock()

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = mock_response

        service = HTTPEmbeddingService(
            settings=EmbeddingSettings(base_url="http://test:8080"),
            client=mock_client,
        )

        with pytest.raises(EmbeddingError):
            await service.embed("a")

    @pytest.mark.asyncio
    async def test_embed_http_error(self) -> None:
        """HTTP error raises EmbeddingError."""
        mock_response = MagicMock()
        mock_response.status_code = 500
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error",
            request=MagicMock(),
            response=mock_response,
        )

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = mock_response

        service = HTTPEmbeddingService(
            settings=EmbeddingSettings(base_url="http://test:8080"),
            client=mock_client,
        )

        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.embed("test")

        assert exc_info.value.details == {"status_code": 500}

    @pytest.mark.asyncio
    async def test_embed_timeout(self) -> None:
        """Timeouts are reported with their own code."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = httpx.ReadTimeout("timed out")

        service = HTTPEmbeddingService(
            settings=EmbeddingSettings(base_url="http://test:8080"),
            client=mock_client,
        )

        with pytest.raises(EmbeddingError) as exc_info:
            await service.embed("test")

        assert exc_info.value.code == ErrorCode.EMBEDDING_TIMEOUT

    @pytest.mark.asyncio
    async def test_embed_connection_error(self) -> None:
        """Connection error raises EmbeddingError."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = httpx.RequestError("Connection failed")

        service = HTTPEmbeddingService(
            settings=EmbeddingSettings(base_url="http://test:8080"),
            client=mock_client,
        )

        with pytest.raises(EmbeddingError):
            await service.embed("test")

    @pytest.mark.asyncio
    async def test_batch_chunking(self) -> None:
        """Large batches are chunked correctly."""
        settings = EmbeddingSettings(base_url="http://test:8080", batch_size=2)

        def make_response(*_args: object, **kwargs: object) -> MagicMock:
            texts = kwargs["json"]["input"]  # type: ignore[index]
            return _response([{"embedding": [float(len(t))]} for t in texts])

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = make_response

        service = HTTPEmbeddingService(settings=settings, client=mock_client)
        results = await service.embed_batch(["a", "bb", "ccc", "dddd", "eeeee"])

        assert mock_client.post.call_count == 3
        assert [r.embedding for r in results] == [[1.0], [2.0], [3.0], [4.0], [5.0]]

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        """Service closes owned client."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        service = HTTPEmbeddingService(
            settings=EmbeddingSettings(base_url="http://test:8080"),
            client=mock_client,
        )
        service._owns_client = True

        await service.close()
        mock_client.aclose.assert_called_once()
