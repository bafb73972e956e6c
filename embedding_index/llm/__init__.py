"""LLM client and query rewrite module."""

from embedding_index.llm.client import LLMClient, OpenAICompatibleClient
from embedding_index.llm.models import GenerationResult, Message, Role
from embedding_index.llm.prompts import QueryRewritePromptTemplate
from embedding_index.llm.rewriter import LLMQueryRewriter, QueryRewriter

__all__ = [
    "GenerationResult",
    "LLMClient",
    "LLMQueryRewriter",
    "Message",
    "OpenAICompatibleClient",
    "QueryRewritePromptTemplate",
    "QueryRewriter",
    "Role",
]
