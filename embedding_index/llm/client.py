"""LLM client interface and OpenAI-compatible implementation."""

import time
from abc import ABC, abstractmethod

import httpx

from embedding_index.config import LLMSettings, get_settings
from embedding_index.exceptions import ErrorCode, LLMError
from embedding_index.llm.models import GenerationResult, Message
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import track_llm_request

logger = get_logger(__name__)


class LLMClient(ABC):
    """Abstract base class for chat completion clients."""

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate a completion for a conversation.

        Args:
            messages: Conversation messages.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens override.

        Returns:
            GenerationResult with generated text.

        Raises:
            LLMError: If generation fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None


class OpenAICompatibleClient(LLMClient):
    """LLM client for OpenAI-compatible chat completions APIs.

    Works with OpenAI, Ollama (localhost:11434/v1) and vLLM.
    """

    def __init__(
        self,
        settings: LLMSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Args:
            settings: LLM configuration.
            client: HTTP client (for testing).
        """
        self._settings = settings or get_settings().llm
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text using the chat completions API."""
        client = await self._get_client()
        url = f"{self._settings.base_url.rstrip('/')}/chat/completions"

        payload = {
            "model": self._settings.model,
            "messages": [
                {"role": msg.role.value, "content": msg.content} for msg in messages
            ],
            "temperature": (
                self._settings.temperature if temperature is None else temperature
            ),
            "max_tokens": max_tokens or self._settings.max_tokens,
        }

        headers = {}
        api_key = self._settings.api_key.get_secret_value()
        if api_key and api_key != "not-required":
            headers["Authorization"] = f"Bearer {api_key}"

        start = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            track_llm_request(self.model_name, time.perf_counter() - start, 0, 0, False)
            logger.error(f"LLM request timed out: {e}")
            raise LLMError(
                "LLM request timed out",
                code=ErrorCode.LLM_TIMEOUT,
                details={"timeout": self._settings.timeout},
            ) from e

        except httpx.HTTPStatusError as e:
            track_llm_request(self.model_name, time.perf_counter() - start, 0, 0, False)
            status = e.response.status_code
            logger.error(f"LLM request failed: {status}")

            if status == 429:
                raise LLMError(
                    "Rate limit exceeded",
                    code=ErrorCode.LLM_RATE_LIMIT,
                    details={"status_code": status},
                ) from e

            raise LLMError(
                f"LLM service returned {status}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"status_code": status},
            ) from e

        except httpx.RequestError as e:
            track_llm_request(self.model_name, time.perf_counter() - start, 0, 0, False)
            logger.error(f"LLM connection error: {e}")
            raise LLMError(
                f"Failed to connect to LLM service: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            data = response.json()
            message = data["choices"][0]["message"]
            usage = data.get("usage") or {}

            result = GenerationResult(
                content=message["content"] or "",
                model=data.get("model", self._settings.model),
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            )

        except (KeyError, IndexError, TypeError) as e:
            track_llm_request(self.model_name, time.perf_counter() - start, 0, 0, False)
            raise LLMError(
                f"Invalid response from LLM: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        track_llm_request(
            self.model_name,
            time.perf_counter() - start,
            result.prompt_tokens,
            result.completion_tokens,
        )
        return result
