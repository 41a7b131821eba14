"""
Vector store configuration settings.

Manages S3 Vectors (production) and FAISS (local development) settings
for the per-workspace vector collections.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for retrieval
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledgebase.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (FAISS for dev, S3 Vectors for prod)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: Literal["s3", "faiss"] = Field(
        default="s3",
        description="Vector store type: 'faiss' for local dev, 's3' for production",
    )
    vectors_bucket: str = Field(
        default="knowledgebase-vectors",
        description="S3 Vectors bucket name",
    )
    aws_region: str = Field(default="us-east-1", description="AWS region for S3 Vectors")
    distance_metric: Literal["cosine", "euclidean"] = Field(
        default="cosine",
        description="Distance metric used when a collection is created",
    )
    collection_prefix: str = Field(
        default="ws",
        description="Prefix of per-workspace collection names",
    )
    faiss_index_dir: str = Field(
        default="/tmp/.knowledgebase_faiss",
        description="Directory where local FAISS collections are persisted",
    )
    content_preview_chars: int = Field(
        default=500,
        description="Characters of chunk content stored in the vector payload",
    )
