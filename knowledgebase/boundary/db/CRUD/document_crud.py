"""
Document CRUD operations.

Provides document-specific queries for workspace scoping, candidate
resolution for retrieval, ingestion field updates and soft deletion.

Dependencies: sqlalchemy, knowledgebase.boundary.db.models.document_model
System role: Document persistence operations
"""

from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledgebase.boundary.db.base import utcnow
from knowledgebase.boundary.db.CRUD.base_crud import BaseCRUD
from knowledgebase.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    IngestionStatus,
)


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Every read except get_by_id excludes soft-deleted rows.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_active_by_id(self, session: AsyncSession, id: UUID) -> DocumentModel | None:
        """
        Retrieve a document unless it has been soft-deleted.

        Args:
            session: Async database session
            id: Document UUID

        Returns:
            DocumentModel if found and not deleted, None otherwise
        """
        stmt = select(DocumentModel).where(
            DocumentModel.id == id,
            DocumentModel.deleted_at.is_(None),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_workspace_id(
        self,
        session: AsyncSession,
        workspace_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve all live documents of a workspace, newest first.

        Args:
            session: Async database session
            workspace_id: Owning workspace
            limit: Maximum number of documents to return
            offset: Number of documents to skip

        Returns:
            Sequence of DocumentModels belonging to the workspace
        """
        stmt = (
            select(DocumentModel)
            .where(
                DocumentModel.workspace_id == workspace_id,
                DocumentModel.deleted_at.is_(None),
            )
            .order_by(DocumentModel.created_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_processed_ids(
        self,
        session: AsyncSession,
        workspace_id: str,
        document_ids: Iterable[UUID] | None = None,
    ) -> list[UUID]:
        """
        Resolve the searchable document set of a workspace.

        Args:
            session: Async database session
            workspace_id: Workspace to search
            document_ids: Optional restriction to these ids

        Returns:
            list[UUID]: Ids of PROCESSED, non-deleted documents
        """
        stmt = select(DocumentModel.id).where(
            DocumentModel.workspace_id == workspace_id,
            DocumentModel.status == DocumentStatus.PROCESSED,
            DocumentModel.deleted_at.is_(None),
        )
        if document_ids is not None:
            wanted = list(document_ids)
            if not wanted:
                return []
            stmt = stmt.where(DocumentModel.id.in_(wanted))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def set_ingestion_fields(
        self,
        session: AsyncSession,
        id: UUID,
        **fields: Any,
    ) -> DocumentModel | None:
        """
        Write pipeline-owned fields (status, counters, error, timestamps).

        Args:
            session: Async database session
            id: Document UUID
            **fields: Columns to set

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(session, id, **fields)

    async def compare_and_set_ingestion_status(
        self,
        session: AsyncSession,
        id: UUID,
        expected: IngestionStatus,
        target: IngestionStatus,
        **fields: Any,
    ) -> bool:
        """
        Move ingestion_status from expected to target in one statement.

        The row is only touched when its current status still equals
        `expected`, so a concurrent writer is detected instead of overwritten.

        Args:
            session: Async database session
            id: Document UUID
            expected: Status the caller believes is current
            target: New status
            **fields: Additional columns to set in the same update

        Returns:
            bool: True if the row was updated
        """
        stmt = (
            update(DocumentModel)
            .where(
                DocumentModel.id == id,
                DocumentModel.ingestion_status == expected,
            )
            .values(ingestion_status=target, **fields)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1

    async def soft_delete(self, session: AsyncSession, id: UUID) -> DocumentModel | None:
        """
        Mark a document deleted without removing the row.

        Args:
            session: Async database session
            id: Document UUID

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            deleted_at=utcnow(),
            status=DocumentStatus.DELETED,
        )


document_crud = DocumentCRUD()
