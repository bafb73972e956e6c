"""Embedding service interface and implementations."""

import time
from abc import ABC, abstractmethod

import httpx

from embedding_index.config import EmbeddingSettings, get_settings
from embedding_index.embeddings.models import EmbeddingResult
from embedding_index.exceptions import EmbeddingError, ErrorCode
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Implementations return exactly one result per input text, in input order.
    """

    @abstractmethod
    async def embed(self, text: str, model: str | None = None) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.
            model: Model override; defaults to the configured model.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @abstractmethod
    async def embed_batch(
        self,
        texts: list[str],
        model: str | None = None,
    ) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts.

        Args:
            texts: List of texts to embed.
            model: Model override; defaults to the configured model.

        Returns:
            List of EmbeddingResult objects, one per text, in order.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None


class HTTPEmbeddingService(EmbeddingService):
    """Embedding service using an OpenAI-style ``/embeddings`` endpoint.

    Also works with text-embeddings-inference (TEI) and Ollama servers.
    """

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    async def embed(self, text: str, model: str | None = None) -> EmbeddingResult:
        """Generate embedding for a single text."""
        results = await self.embed_batch([text], model=model)
        return results[0]

    async def embed_batch(
        self,
        texts: list[str],
        model: str | None = None,
    ) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts, chunked by ``batch_size``."""
        if not texts:
            return []

        client = await self._get_client()
        url = f"{self._settings.base_url.rstrip('/')}/embeddings"
        model = model or self._settings.model

        all_results: list[EmbeddingResult] = []
        batch_size = self._settings.batch_size

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            batch_results = await self._embed_batch_request(client, url, batch, model)
            all_results.extend(batch_results)

        return all_results

    def _headers(self) -> dict[str, str]:
        api_key = self._settings.api_key.get_secret_value()
        if api_key and api_key != "not-required":
            return {"Authorization": f"Bearer {api_key}"}
        return {}

    async def _embed_batch_request(
        self,
        client: httpx.AsyncClient,
        url: str,
        texts: list[str],
        model: str,
    ) -> list[EmbeddingResult]:
        """Make embedding request for a batch.

        Raises:
            EmbeddingError: If the request fails or the response does not
                hold one embedding per text.
        """
        payload = {
            "input": texts,
            "model": model,
        }

        start = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.TimeoutException as e:
            track_embedding_request(model, time.perf_counter() - start, len(texts), False)
            logger.error(f"Embedding request timed out: {e}", extra={"url": url})
            raise EmbeddingError(
                "Embedding request timed out",
                code=ErrorCode.EMBEDDING_TIMEOUT,
                details={"url": url, "timeout": self._settings.timeout},
            ) from e
        except httpx.HTTPStatusError as e:
            track_embedding_request(model, time.perf_counter() - start, len(texts), False)
            logger.error(
                f"Embedding request failed: {e.response.status_code}",
                extra={"url": url, "status": e.response.status_code},
            )
            raise EmbeddingError(
                f"Embedding service returned {e.response.status_code}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            track_embedding_request(model, time.perf_counter() - start, len(texts), False)
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            data = response.json()
            embeddings = data["data"]

            # OpenAI tags each item with its input position
            if all("index" in item for item in embeddings):
                embeddings = sorted(embeddings, key=lambda item: item["index"])

            if len(embeddings) != len(texts):
                raise ValueError(
                    f"expected {len(texts)} embeddings, got {len(embeddings)}"
                )

            results = [
                EmbeddingResult(
                    text=text,
                    embedding=item["embedding"],
                    model=model,
                    dimensions=len(item["embedding"]),
                )
                for text, item in zip(texts, embeddings, strict=True)
            ]

        except (KeyError, IndexError, TypeError, ValueError) as e:
            track_embedding_request(model, time.perf_counter() - start, len(texts), False)
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_RESPONSE_INVALID,
                details={"error": str(e)},
            ) from e

        track_embedding_request(model, time.perf_counter() - start, len(texts))
        return results
