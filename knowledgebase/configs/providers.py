"""
Model provider configuration settings.

Embedding and generation model selection plus the outbound call budget
shared by every ingestion worker.

Dependencies: pydantic, pydantic_settings
System role: LLM provider configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledgebase.configs.base import BaseSettings


class ProviderSettings(BaseSettings):
    """Google Gemini embedding and chat model configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google embedding model ID",
    )
    embedding_dimension: int = Field(
        default=1024,
        description="Fixed output dimension of every embedding vector",
    )
    embedding_batch_size: int = Field(
        default=100,
        description="Texts sent per embedding provider call",
    )
    embedding_calls_per_window: int = Field(
        default=10,
        description="Embedding provider calls allowed per rate window",
    )
    embedding_window_seconds: int = Field(
        default=60,
        description="Length of the sliding rate window in seconds",
    )

    generation_model: str = Field(
        default="gemini-2.5-flash",
        description="Default chat model for answer generation",
    )
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_output_tokens: int = Field(default=500, description="Maximum answer tokens")
