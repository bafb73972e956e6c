"""Query rewriting step applied before a search query is embedded."""

from abc import ABC, abstractmethod

from embedding_index.llm.client import LLMClient
from embedding_index.llm.prompts import QueryRewritePromptTemplate
from embedding_index.logging_config import get_logger

logger = get_logger(__name__)


class QueryRewriter(ABC):
    """Maps raw query text to the text that is actually embedded."""

    @abstractmethod
    async def rewrite(self, text: str) -> str:
        """Rewrite a search query.

        Raises:
            UpstreamServiceError: If the backing service fails.
        """
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None


class LLMQueryRewriter(QueryRewriter):
    """Rewrites queries with a chat completion model."""

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_template: QueryRewritePromptTemplate | None = None,
    ) -> None:
        self._llm_client = llm_client
        self._prompt_template = prompt_template or QueryRewritePromptTemplate()

    async def rewrite(self, text: str) -> str:
        """Ask the model for a rewritten query.

        An empty completion falls back to the original text.
        """
        result = await self._llm_client.generate(self._prompt_template.build_messages(text))
        rewritten = result.content.strip().strip('"').strip()

        if not rewritten:
            logger.warning(
                "Query rewrite returned no text, using original query",
                extra={"model": result.model},
            )
            return text

        logger.info(f'Modified query: "{rewritten}"', extra={"model": result.model})
        return rewritten

    async def close(self) -> None:
        """Close the underlying LLM client."""
        await self._llm_client.close()
