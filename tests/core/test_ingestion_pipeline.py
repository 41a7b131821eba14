"""
Test suite for IngestionPipeline.

Runs the real pipeline against an in-memory SQLite database, fake
embeddings and an in-memory FAISS index. Only object storage is mocked.

System role: Verification of ingestion orchestration and status tracking
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import select

from knowledgebase.boundary.db.CRUD.document_crud import document_crud
from knowledgebase.boundary.db.models.chunk_model import ChunkModel
from knowledgebase.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    DocumentType,
    IngestionStatus,
)
from knowledgebase.core.document_processing.entrypoint import IngestionPipeline
from knowledgebase.core.document_processing.extractors import default_registry
from knowledgebase.core.document_processing.models import IngestionJob
from knowledgebase.core.document_processing.status_tracker import INTERRUPTED_MESSAGE
from knowledgebase.core.document_processing.tasks import (
    ChunkingTask,
    EmbeddingTask,
    ExtractionTask,
    IndexingTask,
)
from knowledgebase.core.exceptions import (
    DocumentNotFoundError,
    UnsupportedDocumentTypeError,
    VectorIndexError,
)

LONG_TEXT = ("abcd " * 500).encode("utf-8")
PROBE = [1.0] * 8


@pytest.fixture
def storage() -> MagicMock:
    """Object storage double returning a 2500-character text file."""
    client = MagicMock()
    client.fetch = AsyncMock(return_value=LONG_TEXT)
    return client


@pytest.fixture
def pipeline(session_factory, storage, embedding_client, vector_index) -> IngestionPipeline:
    """Pipeline wired with real tasks and test doubles at the edges."""
    return IngestionPipeline(
        session_factory=session_factory,
        extraction_task=ExtractionTask(storage, default_registry()),
        chunking_task=ChunkingTask(max_chunk_size=1000, chunk_overlap=200),
        embedding_task=EmbeddingTask(embedding_client),
        indexing_task=IndexingTask(vector_index),
    )


async def _reload(session_factory, document_id) -> DocumentModel:
    async with session_factory() as session:
        return await document_crud.get_by_id(session, document_id)


async def _live_chunks(session_factory, document_id) -> list[ChunkModel]:
    async with session_factory() as session:
        result = await session.execute(
            select(ChunkModel)
            .where(ChunkModel.document_id == document_id, ChunkModel.deleted_at.is_(None))
            .order_by(ChunkModel.chunk_index)
        )
        return list(result.scalars().all())


async def _set_status(session_factory, document_id, status: IngestionStatus) -> None:
    async with session_factory() as session:
        await document_crud.update_by_id(session, document_id, ingestion_status=status)
        await session.commit()


# ============================================================================
# Happy path
# ============================================================================


class TestIngestionPipelineSuccess:
    """Test suite for successful ingestion runs."""

    @pytest.mark.asyncio
    async def test_ingest_should_chunk_embed_and_index(
        self, pipeline, make_document, session_factory, vector_index
    ) -> None:
        # Arrange
        document = await make_document()

        # Act
        result = await pipeline.ingest(IngestionJob.from_document(document))

        # Assert
        assert result.chunk_count == 3
        assert result.embedding_count == 3
        assert result.skipped is False
        assert result.vector_collection_id == "ws-workspace-1"

        stored = await _reload(session_factory, document.id)
        assert stored.ingestion_status == IngestionStatus.COMPLETED
        assert stored.status == DocumentStatus.PROCESSED
        assert stored.chunk_count == 3
        assert stored.embedding_count == 3
        assert stored.word_count == 500
        assert stored.ingestion_error is None
        assert stored.ingestion_started_at is not None
        assert stored.ingestion_completed_at is not None
        assert stored.processed_at is not None

        chunks = await _live_chunks(session_factory, document.id)
        assert [c.chunk_index for c in chunks] == [0, 1, 2]
        assert all(len(c.content) <= 1000 for c in chunks)
        assert all(c.has_embedding for c in chunks)
        assert all(c.vector_point_id == str(c.id) for c in chunks)
        assert all(c.embedding_model == "fake-embedding" for c in chunks)

        hits = await vector_index.search("ws-workspace-1", PROBE, 10)
        assert {hit.id for hit in hits} == {str(c.id) for c in chunks}
        assert all(hit.payload["document_id"] == str(document.id) for hit in hits)

    @pytest.mark.asyncio
    async def test_ingest_should_skip_completed_document(
        self, pipeline, make_document, session_factory, storage
    ) -> None:
        # Arrange
        document = await make_document()
        job = IngestionJob.from_document(document)
        await pipeline.ingest(job)

        # Act
        second = await pipeline.ingest(job)

        # Assert
        assert second.skipped is True
        assert second.chunk_count == 3
        assert storage.fetch.await_count == 1
        stored = await _reload(session_factory, document.id)
        assert stored.chunk_count == 3
        assert len(await _live_chunks(session_factory, document.id)) == 3

    @pytest.mark.asyncio
    async def test_ingest_should_complete_empty_document_without_chunks(
        self, pipeline, make_document, session_factory, storage
    ) -> None:
        # Arrange
        storage.fetch.return_value = b"  \n\n  "
        document = await make_document()

        # Act
        result = await pipeline.ingest(IngestionJob.from_document(document))

        # Assert
        assert result.chunk_count == 0
        stored = await _reload(session_factory, document.id)
        assert stored.ingestion_status == IngestionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_ingest_should_recover_stale_in_flight_status(
        self, pipeline, make_document, session_factory
    ) -> None:
        # Arrange
        document = await make_document(
            ingestion_status=IngestionStatus.EMBEDDING,
            status=DocumentStatus.PROCESSING,
        )

        # Act
        result = await pipeline.ingest(IngestionJob.from_document(document))

        # Assert
        assert result.chunk_count == 3
        stored = await _reload(session_factory, document.id)
        assert stored.ingestion_status == IngestionStatus.COMPLETED


# ============================================================================
# Failures and retries
# ============================================================================


class TestIngestionPipelineFailure:
    """Test suite for failing and retried ingestion runs."""

    @pytest.mark.asyncio
    async def test_ingest_should_fail_unsupported_type_without_chunks(
        self, pipeline, make_document, session_factory, storage
    ) -> None:
        # Arrange
        document = await make_document(document_type=DocumentType.DOC, name="legacy.doc")

        # Act
        with pytest.raises(UnsupportedDocumentTypeError):
            await pipeline.ingest(IngestionJob.from_document(document))

        # Assert
        stored = await _reload(session_factory, document.id)
        assert stored.ingestion_status == IngestionStatus.FAILED
        assert stored.status == DocumentStatus.FAILED
        assert stored.ingestion_error.startswith("Unsupported document type: DOC")
        assert await _live_chunks(session_factory, document.id) == []
        storage.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ingest_should_record_failure_and_reraise(
        self, pipeline, make_document, session_factory, vector_index
    ) -> None:
        # Arrange
        document = await make_document()
        failing_upsert = AsyncMock(side_effect=VectorIndexError("index offline", operation="upsert"))

        # Act
        with patch.object(vector_index, "upsert", failing_upsert):
            with pytest.raises(VectorIndexError):
                await pipeline.ingest(IngestionJob.from_document(document))

        # Assert
        stored = await _reload(session_factory, document.id)
        assert stored.ingestion_status == IngestionStatus.FAILED
        assert stored.status == DocumentStatus.FAILED
        assert "index offline" in stored.ingestion_error
        chunks = await _live_chunks(session_factory, document.id)
        assert len(chunks) == 3
        assert not any(c.has_embedding for c in chunks)

    @pytest.mark.asyncio
    async def test_retry_after_failure_should_complete(
        self, pipeline, make_document, session_factory, vector_index
    ) -> None:
        # Arrange
        document = await make_document()
        job = IngestionJob.from_document(document)
        failing_upsert = AsyncMock(side_effect=VectorIndexError("index offline"))
        with patch.object(vector_index, "upsert", failing_upsert):
            with pytest.raises(VectorIndexError):
                await pipeline.ingest(job)

        # Act
        result = await pipeline.ingest(job)

        # Assert
        assert result.embedding_count == 3
        stored = await _reload(session_factory, document.id)
        assert stored.ingestion_status == IngestionStatus.COMPLETED
        assert stored.ingestion_error is None

    @pytest.mark.asyncio
    async def test_rerun_should_only_embed_chunks_without_vectors(
        self, pipeline, make_document, session_factory, embedding_client
    ) -> None:
        # Arrange
        document = await make_document()
        job = IngestionJob.from_document(document)
        await pipeline.ingest(job)
        await _set_status(session_factory, document.id, IngestionStatus.FAILED)

        # Act
        with patch.object(
            embedding_client, "embed_batch", wraps=embedding_client.embed_batch
        ) as spy:
            result = await pipeline.ingest(job)

        # Assert
        assert spy.await_args.args[0] == []
        assert result.embedding_count == 3

    @pytest.mark.asyncio
    async def test_rerun_with_shorter_text_should_drop_surplus_chunks(
        self, pipeline, make_document, session_factory, storage, vector_index
    ) -> None:
        # Arrange
        document = await make_document()
        job = IngestionJob.from_document(document)
        await pipeline.ingest(job)
        await _set_status(session_factory, document.id, IngestionStatus.FAILED)
        storage.fetch.return_value = b"A much shorter revision."

        # Act
        result = await pipeline.ingest(job)

        # Assert
        assert result.chunk_count == 1
        assert result.embedding_count == 1
        chunks = await _live_chunks(session_factory, document.id)
        assert [c.content for c in chunks] == ["A much shorter revision."]
        hits = await vector_index.search("ws-workspace-1", PROBE, 10)
        assert [hit.id for hit in hits] == [str(chunks[0].id)]

    @pytest.mark.asyncio
    async def test_ingest_should_raise_for_unknown_document(
        self, pipeline, make_document, session_factory
    ) -> None:
        # Arrange
        document = await make_document()
        job = IngestionJob.from_document(document)
        async with session_factory() as session:
            await document_crud.soft_delete(session, document.id)
            await session.commit()

        # Act / Assert
        with pytest.raises(DocumentNotFoundError):
            await pipeline.ingest(job)

    @pytest.mark.asyncio
    async def test_interrupted_message_is_recorded_before_retry(
        self, pipeline, make_document, session_factory, storage
    ) -> None:
        # Arrange
        document = await make_document(ingestion_status=IngestionStatus.CHUNKING)
        storage.fetch.side_effect = RuntimeError("network down")

        # Act
        with pytest.raises(Exception):
            await pipeline.ingest(IngestionJob.from_document(document))

        # Assert
        stored = await _reload(session_factory, document.id)
        assert stored.ingestion_status == IngestionStatus.FAILED
        assert "network down" in stored.ingestion_error
        assert stored.ingestion_error != INTERRUPTED_MESSAGE
