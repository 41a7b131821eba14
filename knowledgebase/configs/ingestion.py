"""
Configuration settings for the document ingestion pipeline.

Chunking parameters, worker pool sizing and the job retry policy.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from knowledgebase.configs.base import BaseSettings


class IngestionSettings(BaseSettings):
    """Settings for document ingestion pipeline and its worker pool."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    max_chunk_size: int = Field(
        default=1000,
        gt=0,
        description="Maximum chunk size in characters",
    )
    chunk_overlap: int = Field(
        default=200,
        ge=0,
        description="Overlap between consecutive chunks",
    )
    separators: list[str] = Field(
        default=["\n\n", "\n", ". ", " ", ""],
        description="Preferred split points, strongest first",
    )

    # Worker pool
    concurrency: int = Field(default=2, ge=1, description="Concurrent ingestion workers")
    lease_seconds: float = Field(
        default=900.0,
        description="Lease on a dequeued job, renewed every third of it while the job runs",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        description="Sleep between empty dequeue attempts",
    )

    # Retry policy
    max_attempts: int = Field(default=3, ge=1, description="Delivery attempts per job")
    backoff_base_seconds: float = Field(
        default=2.0,
        description="Base delay of the exponential retry backoff",
    )

    # Retention
    completed_retention_seconds: int = Field(default=24 * 3600)
    completed_retention_count: int = Field(default=1000)
    failed_retention_seconds: int = Field(default=7 * 24 * 3600)

    @model_validator(mode="after")
    def _check_overlap(self) -> "IngestionSettings":
        if self.chunk_overlap >= self.max_chunk_size:
            raise ValueError("chunk_overlap must be smaller than max_chunk_size")
        return self
