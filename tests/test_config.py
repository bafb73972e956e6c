"""Tests for application configuration."""

import os
from pathlib import Path
from unittest.mock import patch

from embedding_index.config import (
    EmbeddingSettings,
    Environment,
    IndexSettings,
    LLMSettings,
    Settings,
    get_settings,
)


class TestIndexSettings:
    """Tests for index configuration."""

    def test_default_values(self) -> None:
        """Defaults point at the conventional table file."""
        settings = IndexSettings()
        assert settings.path == Path("textEmbeddingsIndex.csv")
        assert settings.max_results == 100
        assert settings.strict_consistency is False

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(
            os.environ,
            {"INDEX_PATH": "/data/movies.csv", "INDEX_STRICT_CONSISTENCY": "true"},
        ):
            settings = IndexSettings()
            assert settings.path == Path("/data/movies.csv")
            assert settings.strict_consistency is True


class TestEmbeddingSettings:
    """Tests for embedding configuration."""

    def test_default_values(self) -> None:
        """Default values for embedding service."""
        settings = EmbeddingSettings()
        assert settings.model == "text-embedding-3-small"
        assert settings.batch_size == 64
        assert settings.timeout == 60.0

    def test_api_key_is_secret(self) -> None:
        """API key should be masked when printed."""
        with patch.dict(os.environ, {"EMBEDDING_API_KEY": "sk-secret"}):
            settings = EmbeddingSettings()
            assert "sk-secret" not in str(settings.api_key)
            assert settings.api_key.get_secret_value() == "sk-secret"

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"EMBEDDING_BATCH_SIZE": "16"}):
            settings = EmbeddingSettings()
            assert settings.batch_size == 16


class TestLLMSettings:
    """Tests for LLM configuration."""

    def test_default_values(self) -> None:
        """Rewriting is enabled and deterministic by default."""
        settings = LLMSettings()
        assert settings.rewrite_enabled is True
        assert settings.temperature == 0.0
        assert settings.max_tokens == 256

    def test_disable_rewrite(self) -> None:
        """Rewrite step can be switched off from the environment."""
        with patch.dict(os.environ, {"LLM_REWRITE_ENABLED": "false"}):
            settings = LLMSettings()
            assert settings.rewrite_enabled is False


class TestSettings:
    """Tests for main application settings."""

    def test_default_environment(self) -> None:
        """Default environment is development."""
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT

    def test_nested_settings_loaded(self) -> None:
        """Nested settings are initialized."""
        settings = Settings()
        assert isinstance(settings.index, IndexSettings)
        assert isinstance(settings.embedding, EmbeddingSettings)
        assert isinstance(settings.llm, LLMSettings)

    def test_environment_enum(self) -> None:
        """Environment can be set via string."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            settings = Settings()
            assert settings.environment == Environment.PRODUCTION


class TestGetSettings:
    """Tests for settings singleton."""

    def test_caching(self) -> None:
        """Settings are cached."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
        assert isinstance(settings1, Settings)
