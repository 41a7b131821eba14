"""
Query record ORM model.

Immutable audit row written once per search or question request.

Dependencies: sqlalchemy, knowledgebase.boundary.db.base
System role: Retrieval analytics persistence
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from knowledgebase.boundary.db.base import Base, UUIDMixin, utcnow


class QueryType(str, enum.Enum):
    """Kind of retrieval request recorded."""

    SEARCH = "SEARCH"
    QUESTION = "QUESTION"


class QueryModel(Base, UUIDMixin):
    """
    Query record ORM model (no updated_at: rows are never mutated).

    Attributes:
        workspace_id: Workspace searched
        user_id: Caller identity supplied by the outer shell, if any
        query_text: Raw query or question
        query_type: SEARCH or QUESTION
        result_count: Number of results returned
        top_chunk_ids/top_document_ids: Returned ids in rank order
        answer/model_used/tokens_used: Generation details for questions
        response_time_ms: End-to-end latency
    """

    __tablename__ = "queries"

    workspace_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    query_text: Mapped[str] = mapped_column(Text, nullable=False)
    query_type: Mapped[QueryType] = mapped_column(
        Enum(QueryType, native_enum=False, length=16),
        nullable=False,
    )
    result_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    top_chunk_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    top_document_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    answer: Mapped[str | None] = mapped_column(Text, nullable=True)
    model_used: Mapped[str | None] = mapped_column(String(128), nullable=True)
    tokens_used: Mapped[int | None] = mapped_column(Integer, nullable=True)
    response_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
