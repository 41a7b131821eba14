"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - DocumentModel, ChunkModel, QueryModel: Domain entities
  - DocumentStatus, DocumentType, IngestionStatus, QueryType: Enum types

Dependencies: sqlalchemy, knowledgebase.configs
System role: Relational source of truth for documents, chunks and query records
"""

from knowledgebase.boundary.db.base import Base, TimestampMixin, UUIDMixin
from knowledgebase.boundary.db.connection import get_async_engine, get_async_session_factory
from knowledgebase.boundary.db.models import (
    ChunkModel,
    DocumentModel,
    DocumentStatus,
    DocumentType,
    IngestionStatus,
    QueryModel,
    QueryType,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_engine",
    "get_async_session_factory",
    "ChunkModel",
    "DocumentModel",
    "DocumentStatus",
    "DocumentType",
    "IngestionStatus",
    "QueryModel",
    "QueryType",
]
