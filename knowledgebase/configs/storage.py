"""
Object storage configuration settings.

Manages the S3 bucket that holds raw uploaded documents.

Dependencies: pydantic, pydantic_settings
System role: Raw document storage configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledgebase.configs.base import BaseSettings


class StorageSettings(BaseSettings):
    """S3 object storage configuration for raw documents."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="knowledgebase-documents",
        description="Default bucket when a job does not name one",
    )
    region: str = Field(
        default="us-east-1",
        description="Default AWS region when a job does not name one",
    )
    max_object_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Largest object read into memory for extraction",
    )
