"""
Retrieval configuration settings.

Hybrid search fusion constants, per-branch timeouts and the context
budget used when assembling grounded answers.

Dependencies: pydantic, pydantic_settings
System role: Retrieval configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledgebase.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Hybrid search and answer assembly configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    default_search_limit: int = Field(default=10, ge=1, le=100)
    default_question_limit: int = Field(default=5, ge=1, le=50)
    rrf_k: int = Field(default=60, description="Reciprocal rank fusion constant")
    semantic_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout of the embed + vector search branch",
    )
    lexical_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout of the substring search branch",
    )
    max_context_chars: int = Field(
        default=12000,
        description="Character budget of the context block sent for generation",
    )
