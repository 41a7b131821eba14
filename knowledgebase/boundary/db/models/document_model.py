"""
Document ORM model.

Represents uploaded documents with business status, ingestion status and
the counters written by the ingestion pipeline.

Dependencies: sqlalchemy, knowledgebase.boundary.db.base
System role: Document persistence for ingestion tracking
"""

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Enum, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from knowledgebase.boundary.db.base import Base, TimestampMixin, UUIDMixin


class DocumentType(str, enum.Enum):
    """Declared file type supplied by the upload flow."""

    PDF = "PDF"
    DOCX = "DOCX"
    DOC = "DOC"
    XLSX = "XLSX"
    XLS = "XLS"
    PPTX = "PPTX"
    PPT = "PPT"
    TXT = "TXT"
    MD = "MD"
    CSV = "CSV"
    OTHER = "OTHER"


class DocumentStatus(str, enum.Enum):
    """
    Business-level document lifecycle.

    PENDING/UPLOADING/UPLOADED: Owned by the upload flow
    PROCESSING: Ingestion pipeline running
    PROCESSED: Searchable
    FAILED: Ingestion gave up; ingestion_error has details
    DELETED: Soft-deleted, hidden from every query
    """

    PENDING = "PENDING"
    UPLOADING = "UPLOADING"
    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    PROCESSED = "PROCESSED"
    FAILED = "FAILED"
    DELETED = "DELETED"


class IngestionStatus(str, enum.Enum):
    """Pipeline-level state, see core.document_processing.state_machine."""

    PENDING = "PENDING"
    PARSING = "PARSING"
    CHUNKING = "CHUNKING"
    EMBEDDING = "EMBEDDING"
    INDEXING = "INDEXING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking ingestion pipeline state.

    Created by the upload flow. After that only the ingestion pipeline writes
    the ingestion_* fields and counters. Rows are never physically deleted;
    deleted_at hides them from every query.

    Attributes:
        workspace_id: Owning workspace
        name: Display name used in citations
        document_type: Declared type selecting the extractor
        storage_key/storage_bucket/storage_region: Object storage locator
        status: Business status (PENDING ... PROCESSED/FAILED/DELETED)
        ingestion_status: Pipeline stage reached
        ingestion_error: Last failure message, cleared on success
        chunk_count/embedding_count: Final counters of the last run
        vector_collection_id: Collection holding this workspace's vectors
        page_count/word_count/title/author: Extraction metadata
    """

    __tablename__ = "documents"

    workspace_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    uploaded_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, doc="Display name")
    original_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    document_type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType, native_enum=False, length=16),
        nullable=False,
    )

    storage_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    storage_bucket: Mapped[str | None] = mapped_column(String(255), nullable=True)
    storage_region: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False, length=16),
        nullable=False,
        default=DocumentStatus.PENDING,
        index=True,
    )
    ingestion_status: Mapped[IngestionStatus] = mapped_column(
        Enum(IngestionStatus, native_enum=False, length=16),
        nullable=False,
        default=IngestionStatus.PENDING,
    )
    ingestion_error: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    ingestion_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    ingestion_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    embedding_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    vector_collection_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    page_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    word_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    extracted_metadata: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
