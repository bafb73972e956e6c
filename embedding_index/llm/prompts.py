"""Prompt template for search query rewriting."""

from embedding_index.llm.models import Message, Role


class QueryRewritePromptTemplate:
    """Turns a raw search query into chat messages asking for a rewrite.

    The rewritten query is embedded and compared against record
    descriptions, so the model is asked to answer in the same descriptive
    register those descriptions use.
    """

    DEFAULT_SYSTEM_PROMPT = """You rewrite search queries for a semantic movie search engine.

Rules:
- Fix spelling mistakes and expand abbreviations
- Describe what the user is looking for: plot, genre, mood, people, era
- Keep every detail the user gave; do not invent titles or facts
- Reply with the rewritten query only, no quotes or commentary"""

    DEFAULT_USER_TEMPLATE = """Search query: {query}

Rewritten query:"""

    def __init__(
        self,
        system_prompt: str | None = None,
        user_template: str | None = None,
    ) -> None:
        """Initialize the template.

        Args:
            system_prompt: Custom system prompt.
            user_template: Custom user message template with a ``{query}`` field.
        """
        self.system_prompt = system_prompt or self.DEFAULT_SYSTEM_PROMPT
        self.user_template = user_template or self.DEFAULT_USER_TEMPLATE

    def format(self, query: str) -> str:
        """Format the user message for ``query``."""
        return self.user_template.format(query=query)

    def build_messages(self, query: str) -> list[Message]:
        """Build the system and user messages for ``query``."""
        return [
            Message(role=Role.SYSTEM, content=self.system_prompt),
            Message(role=Role.USER, content=self.format(query)),
        ]
