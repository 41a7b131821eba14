"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from knowledgebase.configs.base import BaseSettings
from knowledgebase.configs.database import DatabaseSettings
from knowledgebase.configs.ingestion import IngestionSettings
from knowledgebase.configs.providers import ProviderSettings
from knowledgebase.configs.queue import QueueSettings
from knowledgebase.configs.retrieval import RetrievalSettings
from knowledgebase.configs.storage import StorageSettings
from knowledgebase.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once and cached.

    Returns:
        Settings: Application settings instance

    Usage:
        from knowledgebase.configs import get_settings
        settings = get_settings()
    """
    return Settings()
