"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class IndexSettings(BaseSettings):
    """Vector index configuration."""

    model_config = SettingsConfigDict(env_prefix="INDEX_")

    path: Path = Field(
        default=Path("textEmbeddingsIndex.csv"),
        description="Location of the persisted vector table",
    )
    max_results: int = Field(
        default=100,
        description="Default number of results returned by a search",
    )
    strict_consistency: bool = Field(
        default=False,
        description="Raise instead of dropping ids missing from the record store",
    )


class EmbeddingSettings(BaseSettings):
    """Embedding service configuration."""

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Embedding service base URL",
    )
    model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model name",
    )
    api_key: SecretStr = Field(
        default=SecretStr("not-required"),
        description="API key (not required for local servers)",
    )
    batch_size: int = Field(
        default=64,
        description="Batch size for embedding requests",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )


class LLMSettings(BaseSettings):
    """Query rewrite (chat completion) service configuration.

    Any OpenAI-compatible endpoint works (OpenAI, Ollama, vLLM).
    """

    model_config = SettingsConfigDict(env_prefix="LLM_")

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="LLM API base URL",
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="Model name used to rewrite queries",
    )
    api_key: SecretStr = Field(
        default=SecretStr("not-required"),
        description="API key (not required for Ollama)",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )
    max_tokens: int = Field(
        default=256,
        description="Maximum tokens in a rewritten query",
    )
    temperature: float = Field(
        default=0.0,
        description="Sampling temperature (lower = more deterministic)",
    )
    rewrite_enabled: bool = Field(
        default=True,
        description="Rewrite search queries with the LLM before embedding",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested settings
    index: IndexSettings = Field(default_factory=IndexSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
