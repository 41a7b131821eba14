"""
Document lifecycle service.

Queues documents for ingestion, soft-deletes them together with their chunks
and vector points, and rebuilds the vector points of a processed document
from its stored chunks. The relational store is the source of truth; the
vector collection is a derived index.

Dependencies: knowledgebase.boundary.{db,queue}, knowledgebase.core.document_processing.tasks
System role: Document use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledgebase.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledgebase.boundary.db.CRUD.document_crud import document_crud
from knowledgebase.boundary.db.models.document_model import DocumentModel, IngestionStatus
from knowledgebase.boundary.queue.task_queue import TaskQueue
from knowledgebase.core.document_processing.models import IngestionJob
from knowledgebase.core.document_processing.tasks import EmbeddingTask, IndexingTask
from knowledgebase.core.exceptions import DocumentNotFoundError, IllegalStateTransitionError

logger = logging.getLogger(__name__)


class DocumentService:
    """Document lifecycle orchestrator."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        queue: TaskQueue,
        embedding_task: EmbeddingTask,
        indexing_task: IndexingTask,
    ) -> None:
        """
        Initialize document service.

        Args:
            session_factory: Factory for short-lived sessions
            queue: Ingestion job queue
            embedding_task: Chunk embedding (reindex)
            indexing_task: Vector upsert and delete
        """
        self._session_factory = session_factory
        self._queue = queue
        self._embedding_task = embedding_task
        self._indexing_task = indexing_task

    async def _get_document(self, session: AsyncSession, document_id: UUID) -> DocumentModel:
        document = await document_crud.get_active_by_id(session, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        return document

    async def enqueue_ingestion(self, document_id: UUID) -> bool:
        """
        Queue a document for ingestion.

        Used after upload and to manually re-queue a FAILED document.

        Args:
            document_id: Document UUID

        Returns:
            bool: False if a job for this document is already queued or running

        Raises:
            DocumentNotFoundError: Missing or deleted document
        """
        async with self._session_factory() as session:
            document = await self._get_document(session, document_id)
        job = IngestionJob.from_document(document)
        queued = await self._queue.enqueue(job)

        logger.info(
            f"{__name__}:enqueue_ingestion - {'Queued' if queued else 'Already queued'}",
            extra={"document_id": job.job_id, "workspace_id": job.workspace_id},
        )
        return queued

    async def delete_document(self, document_id: UUID) -> int:
        """
        Soft-delete a document, its chunks and their vector points.

        Vector deletion is best effort: a failure is logged and the rows
        stay deleted, which already hides the chunks from search.

        Args:
            document_id: Document UUID

        Returns:
            int: Number of chunks deleted

        Raises:
            DocumentNotFoundError: Missing or already deleted document
        """
        async with self._session_factory() as session:
            document = await self._get_document(session, document_id)
            collection = document.vector_collection_id or self._indexing_task.collection_name(
                document.workspace_id
            )
            await document_crud.soft_delete(session, document_id)
            chunks = await chunk_crud.soft_delete_by_document(session, document_id)
            await session.commit()

        point_ids = [chunk.vector_point_id for chunk in chunks if chunk.vector_point_id]
        if point_ids:
            try:
                await self._indexing_task.remove(collection, point_ids)
            except Exception as e:
                logger.warning(
                    f"{__name__}:delete_document - Vector cleanup failed: {type(e).__name__}: {e}",
                    extra={"document_id": str(document_id), "collection": collection},
                )

        logger.info(
            f"{__name__}:delete_document - Deleted document with {len(chunks)} chunks",
            extra={"document_id": str(document_id)},
        )
        return len(chunks)

    async def reindex_document(self, document_id: UUID) -> int:
        """
        Rebuild the vector points of a completed document from its chunks.

        Args:
            document_id: Document UUID

        Returns:
            int: Number of points written

        Raises:
            DocumentNotFoundError: Missing or deleted document
            IllegalStateTransitionError: Document has not completed ingestion
            EmbeddingProviderError, VectorIndexError: Provider failures
        """
        async with self._session_factory() as session:
            document = await self._get_document(session, document_id)
            if document.ingestion_status != IngestionStatus.COMPLETED:
                raise IllegalStateTransitionError(
                    document.ingestion_status.value,
                    "REINDEX",
                    details={"document_id": str(document_id)},
                )
            chunks = await chunk_crud.get_by_document(session, document_id)

        embedded = await self._embedding_task.embed(chunks)
        if embedded:
            await self._indexing_task.index(
                document.workspace_id, self._embedding_task.dimension, embedded
            )

        async with self._session_factory() as session:
            await chunk_crud.mark_embedded(
                session, [chunk.id for chunk, _ in embedded], self._embedding_task.model_name
            )
            await document_crud.update_by_id(
                session,
                document_id,
                embedding_count=len(embedded),
                vector_collection_id=self._indexing_task.collection_name(document.workspace_id),
            )
            await session.commit()

        logger.info(
            f"{__name__}:reindex_document - Rebuilt {len(embedded)} vector points",
            extra={"document_id": str(document_id)},
        )
        return len(embedded)
