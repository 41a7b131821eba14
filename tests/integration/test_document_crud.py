"""
Test suite for DocumentCRUD database operations.

Runs against the in-memory SQLite database: workspace scoping, processed
document resolution, conditional status updates and soft delete.

System role: Verification of document persistence layer
"""

import uuid

import pytest

from knowledgebase.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from knowledgebase.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    IngestionStatus,
)


class TestDocumentCRUDInit:
    """Test suite for DocumentCRUD initialization."""

    def test_init_should_set_model_to_document_model(self) -> None:
        # Act
        crud = DocumentCRUD()

        # Assert
        assert crud.model == DocumentModel


class TestDocumentCRUDQueries:
    """Test suite for read queries."""

    @pytest.mark.asyncio
    async def test_get_active_by_id_should_hide_deleted(self, make_document, test_async_db) -> None:
        # Arrange
        document = await make_document()
        await document_crud.soft_delete(test_async_db, document.id)

        # Act
        result = await document_crud.get_active_by_id(test_async_db, document.id)

        # Assert
        assert result is None

    @pytest.mark.asyncio
    async def test_get_by_workspace_id_should_scope_and_skip_deleted(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        kept = await make_document(name="kept.txt")
        deleted = await make_document(name="deleted.txt")
        await make_document(workspace_id="workspace-2")
        await document_crud.soft_delete(test_async_db, deleted.id)

        # Act
        result = await document_crud.get_by_workspace_id(test_async_db, "workspace-1")

        # Assert
        assert [doc.id for doc in result] == [kept.id]

    @pytest.mark.asyncio
    async def test_get_processed_ids_should_return_only_processed(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        processed = await make_document(status=DocumentStatus.PROCESSED)
        await make_document(status=DocumentStatus.PROCESSING)
        await make_document(status=DocumentStatus.FAILED)

        # Act
        result = await document_crud.get_processed_ids(test_async_db, "workspace-1")

        # Assert
        assert result == [processed.id]

    @pytest.mark.asyncio
    async def test_get_processed_ids_should_apply_filter(self, make_document, test_async_db) -> None:
        # Arrange
        first = await make_document(status=DocumentStatus.PROCESSED)
        second = await make_document(status=DocumentStatus.PROCESSED)

        # Act
        result = await document_crud.get_processed_ids(
            test_async_db, "workspace-1", [second.id, uuid.uuid4()]
        )

        # Assert
        assert result == [second.id]
        assert first.id not in result

    @pytest.mark.asyncio
    async def test_get_processed_ids_with_empty_filter_should_return_nothing(
        self, make_document, test_async_db
    ) -> None:
        await make_document(status=DocumentStatus.PROCESSED)

        assert await document_crud.get_processed_ids(test_async_db, "workspace-1", []) == []


class TestDocumentCRUDStatus:
    """Test suite for ingestion status writes."""

    @pytest.mark.asyncio
    async def test_compare_and_set_should_update_matching_row(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document()

        # Act
        updated = await document_crud.compare_and_set_ingestion_status(
            test_async_db,
            document.id,
            IngestionStatus.PENDING,
            IngestionStatus.PARSING,
            status=DocumentStatus.PROCESSING,
        )
        await test_async_db.commit()

        # Assert
        assert updated is True
        stored = await document_crud.get_by_id(test_async_db, document.id)
        await test_async_db.refresh(stored)
        assert stored.ingestion_status == IngestionStatus.PARSING
        assert stored.status == DocumentStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_compare_and_set_should_refuse_stale_expectation(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document(ingestion_status=IngestionStatus.CHUNKING)

        # Act
        updated = await document_crud.compare_and_set_ingestion_status(
            test_async_db,
            document.id,
            IngestionStatus.PENDING,
            IngestionStatus.PARSING,
        )

        # Assert
        assert updated is False

    @pytest.mark.asyncio
    async def test_set_ingestion_fields_should_write_counters(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document()

        # Act
        result = await document_crud.set_ingestion_fields(
            test_async_db, document.id, chunk_count=7, page_count=3
        )

        # Assert
        assert result.chunk_count == 7
        assert result.page_count == 3

    @pytest.mark.asyncio
    async def test_soft_delete_should_mark_row_deleted(self, make_document, test_async_db) -> None:
        # Arrange
        document = await make_document()

        # Act
        result = await document_crud.soft_delete(test_async_db, document.id)

        # Assert
        assert result.deleted_at is not None
        assert result.status == DocumentStatus.DELETED
