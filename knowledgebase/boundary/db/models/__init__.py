"""ORM models."""

from knowledgebase.boundary.db.models.chunk_model import ChunkModel
from knowledgebase.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    DocumentType,
    IngestionStatus,
)
from knowledgebase.boundary.db.models.query_model import QueryModel, QueryType

__all__ = [
    "ChunkModel",
    "DocumentModel",
    "DocumentStatus",
    "DocumentType",
    "IngestionStatus",
    "QueryModel",
    "QueryType",
]
