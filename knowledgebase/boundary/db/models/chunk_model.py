"""
Chunk ORM model.

One row per extracted segment of a document. (document_id, chunk_index) is
unique; the pipeline upserts on it so a re-run never duplicates rows.

Dependencies: sqlalchemy, knowledgebase.boundary.db.base
System role: Chunk persistence for lexical search and result hydration
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from knowledgebase.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ChunkModel(Base, UUIDMixin, TimestampMixin):
    """
    Chunk ORM model.

    Attributes:
        document_id: Parent document
        content: Chunk text
        content_hash: sha256 of content, detects changed content on re-runs
        chunk_index: Dense zero-based position within the document
        start_char_index/end_char_index: Offsets into the normalized text
        page_number/section_title: Best-effort location hints
        has_embedding: True once the vector point exists
        embedding_model: Model that produced the vector
        vector_point_id: Vector point id, set with has_embedding
        token_count: ceil(len(content) / 4)
    """

    __tablename__ = "document_chunks"
    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_document_chunks_document_index"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    start_char_index: Mapped[int] = mapped_column(Integer, nullable=False)
    end_char_index: Mapped[int] = mapped_column(Integer, nullable=False)
    page_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    section_title: Mapped[str | None] = mapped_column(String(512), nullable=True)

    has_embedding: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    embedding_model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    vector_point_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    token_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    chunk_metadata: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
