"""
Test suite for ChunkCRUD database operations.

Upsert semantics on (document_id, chunk_index), embedding bookkeeping,
lexical search and hydration against the in-memory SQLite database.

System role: Verification of chunk persistence layer
"""

import hashlib

import pytest

from knowledgebase.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledgebase.boundary.db.CRUD.document_crud import document_crud
from knowledgebase.boundary.db.models.document_model import DocumentStatus
from knowledgebase.core.document_processing.models import TextChunk


def _chunk(index: int, content: str) -> TextChunk:
    return TextChunk(
        chunk_index=index,
        content=content,
        start_index=index * 100,
        end_index=index * 100 + len(content),
        page_number=1,
        token_count=(len(content) + 3) // 4,
        content_hash=hashlib.sha256(content.encode("utf-8")).hexdigest(),
    )


async def _store(session, document_id, contents: list[str], embedded: bool = True):
    rows = await chunk_crud.upsert_chunks(
        session, document_id, [_chunk(i, text) for i, text in enumerate(contents)]
    )
    if embedded:
        await chunk_crud.mark_embedded(session, [row.id for row in rows], "fake-embedding")
    await session.commit()
    for row in rows:
        await session.refresh(row)
    return rows


# ============================================================================
# Upsert
# ============================================================================


class TestChunkCRUDUpsert:
    """Test suite for upsert_chunks."""

    @pytest.mark.asyncio
    async def test_upsert_should_insert_rows_in_index_order(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document()

        # Act
        rows = await _store(test_async_db, document.id, ["alpha", "beta"], embedded=False)

        # Assert
        assert [row.chunk_index for row in rows] == [0, 1]
        assert all(row.has_embedding is False for row in rows)

    @pytest.mark.asyncio
    async def test_upsert_should_reuse_row_and_keep_embedding_for_same_content(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document()
        first = await _store(test_async_db, document.id, ["alpha"])

        # Act
        second = await _store(test_async_db, document.id, ["alpha"], embedded=False)

        # Assert
        assert second[0].id == first[0].id
        assert second[0].has_embedding is True

    @pytest.mark.asyncio
    async def test_upsert_should_reset_embedding_when_content_changes(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document()
        await _store(test_async_db, document.id, ["alpha"])

        # Act
        rows = await _store(test_async_db, document.id, ["changed"], embedded=False)

        # Assert
        assert rows[0].content == "changed"
        assert rows[0].has_embedding is False
        assert rows[0].vector_point_id is None

    @pytest.mark.asyncio
    async def test_upsert_should_revive_soft_deleted_row(self, make_document, test_async_db) -> None:
        # Arrange
        document = await make_document()
        await _store(test_async_db, document.id, ["alpha", "beta"])
        await chunk_crud.soft_delete_beyond(test_async_db, document.id, 1)
        await test_async_db.commit()

        # Act
        rows = await _store(test_async_db, document.id, ["alpha", "beta"], embedded=False)

        # Assert
        assert rows[1].deleted_at is None
        assert rows[1].has_embedding is False


# ============================================================================
# Embedding bookkeeping
# ============================================================================


class TestChunkCRUDEmbedding:
    """Test suite for mark_embedded, get_by_document and the soft deletes."""

    @pytest.mark.asyncio
    async def test_mark_embedded_should_set_point_id_to_chunk_id(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document()

        # Act
        rows = await _store(test_async_db, document.id, ["alpha"])

        # Assert
        assert rows[0].vector_point_id == str(rows[0].id)
        assert rows[0].embedding_model == "fake-embedding"
        assert await chunk_crud.count_embedded(test_async_db, document.id) == 1

    @pytest.mark.asyncio
    async def test_get_by_document_should_filter_pending(self, make_document, test_async_db) -> None:
        # Arrange
        document = await make_document()
        await _store(test_async_db, document.id, ["alpha"])
        await chunk_crud.upsert_chunks(
            test_async_db, document.id, [_chunk(0, "alpha"), _chunk(1, "beta")]
        )
        await test_async_db.commit()

        # Act
        pending = await chunk_crud.get_by_document(
            test_async_db, document.id, missing_embedding_only=True
        )
        everything = await chunk_crud.get_by_document(test_async_db, document.id)

        # Assert
        assert [row.chunk_index for row in pending] == [1]
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_soft_delete_beyond_should_only_touch_higher_indexes(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document()
        await _store(test_async_db, document.id, ["a", "b", "c"])

        # Act
        deleted = await chunk_crud.soft_delete_beyond(test_async_db, document.id, 1)
        await test_async_db.commit()

        # Assert
        assert sorted(row.chunk_index for row in deleted) == [1, 2]
        assert await chunk_crud.count_embedded(test_async_db, document.id) == 1

    @pytest.mark.asyncio
    async def test_soft_delete_by_document_should_remove_all_live_rows(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document()
        await _store(test_async_db, document.id, ["a", "b"])

        # Act
        deleted = await chunk_crud.soft_delete_by_document(test_async_db, document.id)
        await test_async_db.commit()

        # Assert
        assert len(deleted) == 2
        assert await chunk_crud.get_by_document(test_async_db, document.id) == []


# ============================================================================
# Retrieval queries
# ============================================================================


class TestChunkCRUDRetrieval:
    """Test suite for lexical_search and get_embedded_with_documents."""

    @pytest.mark.asyncio
    async def test_lexical_search_should_be_case_insensitive(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document(status=DocumentStatus.PROCESSED)
        rows = await _store(test_async_db, document.id, ["The Refund Policy", "shipping"])

        # Act
        result = await chunk_crud.lexical_search(test_async_db, [document.id], "refund", 10)

        # Assert
        assert [row.id for row in result] == [rows[0].id]

    @pytest.mark.asyncio
    async def test_lexical_search_should_treat_wildcards_literally(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document(status=DocumentStatus.PROCESSED)
        rows = await _store(test_async_db, document.id, ["discount of 50% today", "plain text"])

        # Act
        percent = await chunk_crud.lexical_search(test_async_db, [document.id], "50%", 10)
        underscore = await chunk_crud.lexical_search(test_async_db, [document.id], "plain_text", 10)

        # Assert
        assert [row.id for row in percent] == [rows[0].id]
        assert underscore == []

    @pytest.mark.asyncio
    async def test_lexical_search_should_skip_unembedded_and_foreign_chunks(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        document = await make_document(status=DocumentStatus.PROCESSED)
        other = await make_document(status=DocumentStatus.PROCESSED)
        await _store(test_async_db, document.id, ["refund pending"], embedded=False)
        await _store(test_async_db, other.id, ["refund elsewhere"])

        # Act
        result = await chunk_crud.lexical_search(test_async_db, [document.id], "refund", 10)

        # Assert
        assert result == []

    @pytest.mark.asyncio
    async def test_lexical_search_with_blank_query_should_return_nothing(
        self, make_document, test_async_db
    ) -> None:
        document = await make_document(status=DocumentStatus.PROCESSED)
        await _store(test_async_db, document.id, ["anything"])

        assert await chunk_crud.lexical_search(test_async_db, [document.id], "   ", 10) == []

    @pytest.mark.asyncio
    async def test_get_embedded_with_documents_should_drop_deleted_documents(
        self, make_document, test_async_db
    ) -> None:
        # Arrange
        live = await make_document(name="live.txt")
        gone = await make_document(name="gone.txt")
        live_rows = await _store(test_async_db, live.id, ["kept"])
        gone_rows = await _store(test_async_db, gone.id, ["dropped"])
        await document_crud.soft_delete(test_async_db, gone.id)
        await test_async_db.commit()

        # Act
        hydrated = await chunk_crud.get_embedded_with_documents(
            test_async_db, [live_rows[0].id, gone_rows[0].id]
        )

        # Assert
        assert list(hydrated) == [live_rows[0].id]
        chunk, document = hydrated[live_rows[0].id]
        assert chunk.content == "kept"
        assert document.name == "live.txt"
