"""
Document ingestion pipeline orchestrator.

Drives one document through PENDING -> PARSING -> CHUNKING -> EMBEDDING ->
INDEXING -> COMPLETED, committing each status before the stage it names.
Any failure records FAILED with the error message and is re-raised for the
job queue's retry policy. Work already persisted is kept and reused by the
next attempt: chunk rows are upserted and only chunks without a vector are
embedded again.

Dependencies: All task modules, knowledgebase.boundary.db
System role: Pipeline orchestration (coordinates only)
"""

import logging
import time

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledgebase.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledgebase.boundary.db.models.document_model import DocumentModel, IngestionStatus
from knowledgebase.observability.log_utils import log_exception_with_context, log_with_context

from .models import ExtractedDocument, IngestionJob, PipelineResult
from .status_tracker import IngestionStatusTracker
from .tasks import ChunkingTask, EmbeddingTask, ExtractionTask, IndexingTask

logger = logging.getLogger(__name__)


def _clip(value: str | None, limit: int) -> str | None:
    if not value:
        return None
    return value[:limit]


class IngestionPipeline:
    """Orchestrate document ingestion: fetch -> extract -> chunk -> embed -> index."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        extraction_task: ExtractionTask,
        chunking_task: ChunkingTask,
        embedding_task: EmbeddingTask,
        indexing_task: IndexingTask,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            session_factory: Factory for per-stage database sessions
            extraction_task: Object fetch + text extraction
            chunking_task: Text splitter
            embedding_task: Chunk embedding
            indexing_task: Vector upsert
        """
        self._session_factory = session_factory
        self._tracker = IngestionStatusTracker(session_factory)
        self._extraction = extraction_task
        self._chunking = chunking_task
        self._embedding = embedding_task
        self._indexing = indexing_task

    async def ingest(self, job: IngestionJob) -> PipelineResult:
        """
        Ingest one document.

        Args:
            job: Ingestion job (identity = document id)

        Returns:
            PipelineResult: Final counters; skipped=True if already COMPLETED

        Raises:
            DocumentNotFoundError: Document missing or deleted
            UnsupportedDocumentTypeError: No extractor for the declared type
            StorageFetchError, ExtractionError, EmbeddingProviderError,
            VectorIndexError: Stage failures, after FAILED was recorded
        """
        started = time.perf_counter()
        document = await self._tracker.load(job.document_id)

        if document.ingestion_status == IngestionStatus.COMPLETED:
            log_with_context(
                logger,
                logging.INFO,
                f"{__name__}:ingest - Document already completed, skipping",
                document_id=job.job_id,
            )
            return self._skipped_result(document, started)

        status = await self._tracker.begin_attempt(document)
        try:
            # PARSING
            extracted = await self._extraction.extract(job)
            status = await self._tracker.advance(
                job.document_id,
                status,
                IngestionStatus.CHUNKING,
                page_count=extracted.page_count,
                word_count=extracted.word_count,
                title=_clip(extracted.title, 512),
                author=_clip(extracted.author, 255),
                extracted_metadata=extracted.metadata or None,
            )

            # CHUNKING
            chunks = self._chunking.chunk(extracted.text, extracted.page_count)
            async with self._session_factory() as session:
                await chunk_crud.upsert_chunks(session, job.document_id, chunks)
                await session.commit()
            status = await self._tracker.advance(
                job.document_id, status, IngestionStatus.EMBEDDING, chunk_count=len(chunks)
            )

            # EMBEDDING
            async with self._session_factory() as session:
                pending = await chunk_crud.get_by_document(
                    session, job.document_id, missing_embedding_only=True
                )
            embedded = await self._embedding.embed(pending)
            status = await self._tracker.advance(job.document_id, status, IngestionStatus.INDEXING)

            # INDEXING
            collection, embedding_count = await self._index(job, embedded, len(chunks))
            await self._tracker.complete(
                job.document_id,
                status,
                chunk_count=len(chunks),
                embedding_count=embedding_count,
                vector_collection_id=collection,
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:ingest - Ingestion failed",
                e,
                document_id=job.job_id,
                stage=status.value,
            )
            await self._tracker.fail(job.document_id, status, str(e))
            raise

        result = self._result(job, extracted, len(chunks), embedding_count, collection, started)
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:ingest - Ingestion completed",
            document_id=job.job_id,
            chunk_count=result.chunk_count,
            embedding_count=result.embedding_count,
            processing_time_ms=round(result.processing_time_ms, 1),
        )
        return result

    async def _index(self, job: IngestionJob, embedded, chunk_count: int) -> tuple[str, int]:
        """
        Upsert new vectors, drop vectors of vanished chunks, record embeddings.

        Returns:
            tuple: (collection name, embedded chunk count)
        """
        collection = self._indexing.collection_name(job.workspace_id)
        if embedded:
            collection = await self._indexing.index(
                job.workspace_id, self._embedding.dimension, embedded
            )

        async with self._session_factory() as session:
            stale = await chunk_crud.soft_delete_beyond(session, job.document_id, chunk_count)
            stale_points = [chunk.vector_point_id for chunk in stale if chunk.vector_point_id]
            if stale_points:
                await self._indexing.remove(collection, stale_points)
            await chunk_crud.mark_embedded(
                session, [chunk.id for chunk, _ in embedded], self._embedding.model_name
            )
            await session.commit()
            embedding_count = await chunk_crud.count_embedded(session, job.document_id)
        return collection, embedding_count

    @staticmethod
    def _result(
        job: IngestionJob,
        extracted: ExtractedDocument,
        chunk_count: int,
        embedding_count: int,
        collection: str,
        started: float,
    ) -> PipelineResult:
        return PipelineResult(
            document_id=job.document_id,
            chunk_count=chunk_count,
            embedding_count=embedding_count,
            page_count=extracted.page_count,
            word_count=extracted.word_count,
            vector_collection_id=collection,
            processing_time_ms=(time.perf_counter() - started) * 1000,
        )

    @staticmethod
    def _skipped_result(document: DocumentModel, started: float) -> PipelineResult:
        return PipelineResult(
            document_id=document.id,
            chunk_count=document.chunk_count,
            embedding_count=document.embedding_count,
            page_count=document.page_count,
            word_count=document.word_count,
            vector_collection_id=document.vector_collection_id,
            processing_time_ms=(time.perf_counter() - started) * 1000,
            skipped=True,
        )
