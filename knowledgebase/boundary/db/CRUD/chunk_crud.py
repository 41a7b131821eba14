"""
Chunk CRUD operations.

Upsert keyed by (document_id, chunk_index), embedding bookkeeping,
lexical search and result hydration for retrieval.

Dependencies: sqlalchemy, knowledgebase.boundary.db.models
System role: Chunk persistence operations
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledgebase.boundary.db.base import utcnow
from knowledgebase.boundary.db.CRUD.base_crud import BaseCRUD
from knowledgebase.boundary.db.models.chunk_model import ChunkModel
from knowledgebase.boundary.db.models.document_model import DocumentModel

if TYPE_CHECKING:
    from knowledgebase.core.document_processing.models import TextChunk


class ChunkCRUD(BaseCRUD[ChunkModel]):
    """CRUD operations for ChunkModel."""

    def __init__(self) -> None:
        """Initialize ChunkCRUD with ChunkModel."""
        super().__init__(ChunkModel)

    async def upsert_chunks(
        self,
        session: AsyncSession,
        document_id: UUID,
        chunks: Sequence[TextChunk],
    ) -> list[ChunkModel]:
        """
        Insert or overwrite chunk rows for a document.

        Existing rows with the same chunk_index are updated in place (and
        revived if soft-deleted). A row whose content hash changed loses its
        embedding so the next EMBEDDING stage picks it up again.

        Args:
            session: Async database session
            document_id: Parent document
            chunks: Chunks in index order

        Returns:
            list[ChunkModel]: Rows in chunk_index order
        """
        stmt = select(ChunkModel).where(ChunkModel.document_id == document_id)
        result = await session.execute(stmt)
        existing = {row.chunk_index: row for row in result.scalars().all()}

        rows: list[ChunkModel] = []
        for chunk in chunks:
            row = existing.get(chunk.chunk_index)
            if row is None:
                row = ChunkModel(document_id=document_id, chunk_index=chunk.chunk_index)
                session.add(row)
            elif row.content_hash != chunk.content_hash or row.deleted_at is not None:
                row.has_embedding = False
                row.embedding_model = None
                row.vector_point_id = None

            row.content = chunk.content
            row.content_hash = chunk.content_hash
            row.start_char_index = chunk.start_index
            row.end_char_index = chunk.end_index
            row.page_number = chunk.page_number
            row.section_title = chunk.section_title
            row.token_count = chunk.token_count
            row.deleted_at = None
            rows.append(row)

        await session.flush()
        return rows

    async def get_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
        missing_embedding_only: bool = False,
    ) -> Sequence[ChunkModel]:
        """
        Retrieve live chunks of a document in index order.

        Args:
            session: Async database session
            document_id: Parent document
            missing_embedding_only: Only chunks without a vector yet

        Returns:
            Sequence of ChunkModels
        """
        stmt = select(ChunkModel).where(
            ChunkModel.document_id == document_id,
            ChunkModel.deleted_at.is_(None),
        )
        if missing_embedding_only:
            stmt = stmt.where(ChunkModel.has_embedding.is_(False))
        stmt = stmt.order_by(ChunkModel.chunk_index)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def mark_embedded(
        self,
        session: AsyncSession,
        chunk_ids: Iterable[UUID],
        embedding_model: str,
    ) -> int:
        """
        Record that vector points now exist for these chunks.

        The vector point id is the chunk id.

        Args:
            session: Async database session
            chunk_ids: Chunks whose vectors were upserted
            embedding_model: Model that produced the vectors

        Returns:
            int: Rows updated
        """
        updated = 0
        for chunk_id in chunk_ids:
            stmt = (
                update(ChunkModel)
                .where(ChunkModel.id == chunk_id)
                .values(
                    has_embedding=True,
                    embedding_model=embedding_model,
                    vector_point_id=str(chunk_id),
                )
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            updated += result.rowcount
        return updated

    async def soft_delete_beyond(
        self,
        session: AsyncSession,
        document_id: UUID,
        chunk_count: int,
    ) -> list[ChunkModel]:
        """
        Soft-delete rows left over from an earlier, longer run.

        Args:
            session: Async database session
            document_id: Parent document
            chunk_count: Chunks produced by the current run

        Returns:
            list[ChunkModel]: Rows that were live and are now deleted
        """
        stmt = select(ChunkModel).where(
            ChunkModel.document_id == document_id,
            ChunkModel.chunk_index >= chunk_count,
            ChunkModel.deleted_at.is_(None),
        )
        result = await session.execute(stmt)
        return self._soft_delete_rows(result.scalars().all())

    async def soft_delete_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> list[ChunkModel]:
        """
        Cascade a document soft-delete to its chunks.

        Args:
            session: Async database session
            document_id: Deleted document

        Returns:
            list[ChunkModel]: Rows that were live and are now deleted
        """
        stmt = select(ChunkModel).where(
            ChunkModel.document_id == document_id,
            ChunkModel.deleted_at.is_(None),
        )
        result = await session.execute(stmt)
        return self._soft_delete_rows(result.scalars().all())

    async def count_embedded(self, session: AsyncSession, document_id: UUID) -> int:
        """Count live chunks of a document that have a vector."""
        stmt = select(func.count(ChunkModel.id)).where(
            ChunkModel.document_id == document_id,
            ChunkModel.deleted_at.is_(None),
            ChunkModel.has_embedding.is_(True),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def lexical_search(
        self,
        session: AsyncSession,
        document_ids: Sequence[UUID],
        query: str,
        limit: int,
    ) -> Sequence[ChunkModel]:
        """
        Case-insensitive substring search over chunk content.

        Only embedded, non-deleted chunks of the given documents qualify.
        Newest chunks come first.

        Args:
            session: Async database session
            document_ids: Candidate documents
            query: Raw query text (LIKE wildcards are escaped)
            limit: Maximum rows to return

        Returns:
            Sequence of matching ChunkModels
        """
        needle = query.strip().lower()
        if not needle or not document_ids:
            return []
        stmt = (
            select(ChunkModel)
            .where(
                ChunkModel.document_id.in_(list(document_ids)),
                ChunkModel.deleted_at.is_(None),
                ChunkModel.has_embedding.is_(True),
                func.lower(ChunkModel.content).contains(needle, autoescape=True),
            )
            .order_by(
                ChunkModel.created_at.desc(),
                ChunkModel.document_id,
                ChunkModel.chunk_index,
            )
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_embedded_with_documents(
        self,
        session: AsyncSession,
        chunk_ids: Iterable[UUID],
    ) -> dict[UUID, tuple[ChunkModel, DocumentModel]]:
        """
        Hydrate search hits with chunk rows and their documents.

        Chunks that are deleted, lack an embedding, or belong to a deleted
        document are left out.

        Args:
            session: Async database session
            chunk_ids: Ids returned by the search branches

        Returns:
            dict mapping chunk id to (chunk, document)
        """
        ids = list(chunk_ids)
        if not ids:
            return {}
        stmt = (
            select(ChunkModel, DocumentModel)
            .join(DocumentModel, DocumentModel.id == ChunkModel.document_id)
            .where(
                ChunkModel.id.in_(ids),
                ChunkModel.deleted_at.is_(None),
                ChunkModel.has_embedding.is_(True),
                DocumentModel.deleted_at.is_(None),
            )
        )
        result = await session.execute(stmt)
        return {chunk.id: (chunk, document) for chunk, document in result.all()}

    @staticmethod
    def _soft_delete_rows(rows: Sequence[ChunkModel]) -> list[ChunkModel]:
        deleted_at = utcnow()
        for row in rows:
            row.deleted_at = deleted_at
            row.has_embedding = False
        return list(rows)


chunk_crud = ChunkCRUD()
