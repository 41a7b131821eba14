"""
Job queue configuration settings.

Selects the task queue backend carrying ingestion jobs.

Dependencies: pydantic, pydantic_settings
System role: Job delivery configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledgebase.configs.base import BaseSettings


class QueueSettings(BaseSettings):
    """Ingestion job queue configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QUEUE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: Literal["memory", "sqs"] = Field(
        default="memory",
        description="'memory' for a single process, 'sqs' for production",
    )
    queue_url: str = Field(default="", description="SQS FIFO queue URL")
    dead_letter_queue_url: str = Field(default="", description="SQS dead-letter queue URL")
    region: str = Field(default="us-east-1", description="AWS region of the queues")
