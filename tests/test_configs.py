"""
Test suite for configuration settings.

System role: Verification of environment-driven configuration
"""

import pytest
from pydantic import ValidationError

from knowledgebase.configs import Settings
from knowledgebase.configs.database import DatabaseSettings
from knowledgebase.configs.ingestion import IngestionSettings
from knowledgebase.configs.retrieval import RetrievalSettings


class TestIngestionSettings:
    """Test suite for IngestionSettings."""

    def test_defaults_should_match_chunking_policy(self) -> None:
        # Act
        settings = IngestionSettings()

        # Assert
        assert settings.max_chunk_size == 1000
        assert settings.chunk_overlap == 200
        assert settings.max_attempts == 3

    def test_overlap_not_smaller_than_size_should_raise(self) -> None:
        with pytest.raises(ValidationError):
            IngestionSettings(max_chunk_size=100, chunk_overlap=100)

    def test_env_prefix_should_be_applied(self, monkeypatch) -> None:
        # Arrange
        monkeypatch.setenv("INGESTION_CONCURRENCY", "5")

        # Act
        settings = IngestionSettings()

        # Assert
        assert settings.concurrency == 5


class TestRetrievalSettings:
    """Test suite for RetrievalSettings."""

    def test_defaults_should_match_retrieval_policy(self) -> None:
        # Act
        settings = RetrievalSettings()

        # Assert
        assert settings.default_search_limit == 10
        assert settings.default_question_limit == 5
        assert settings.rrf_k == 60

    def test_env_override_should_be_read(self, monkeypatch) -> None:
        monkeypatch.setenv("RETRIEVAL_RRF_K", "10")

        assert RetrievalSettings().rrf_k == 10


class TestDatabaseSettings:
    """Test suite for DatabaseSettings."""

    def test_async_url_should_use_asyncpg(self) -> None:
        settings = DatabaseSettings(host="db", port=5433, user="u", password="p", db="kb")

        assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5433/kb"

    def test_sslmode_require_should_add_ssl_param(self) -> None:
        settings = DatabaseSettings(sslmode="require")

        assert settings.async_database_url.endswith("?ssl=require")


class TestSettings:
    """Test suite for the aggregated Settings."""

    def test_settings_should_aggregate_sections(self, monkeypatch) -> None:
        # Arrange
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        # Act
        settings = Settings()

        # Assert
        assert settings.log_level == "DEBUG"
        assert settings.queue.backend == "memory"
        assert settings.ingestion.max_chunk_size == 1000
