"""
Test suite for collection naming and the FAISS vector index.

System role: Verification of the local vector index
"""

import pytest

from knowledgebase.boundary.vdb.faiss_index import FaissVectorIndex
from knowledgebase.boundary.vdb.vector_index import collection_name_for
from knowledgebase.boundary.vdb.vector_index_factory import get_vector_index
from knowledgebase.boundary.vdb.s3_vectors_index import S3VectorsIndex
from knowledgebase.boundary.vdb.vector_schemas import VectorPoint
from knowledgebase.configs.vector_store import VectorStoreSettings
from knowledgebase.core.exceptions import VectorIndexError


def _point(point_id: str, vector: list[float], document_id: str = "doc-a") -> VectorPoint:
    return VectorPoint(id=point_id, vector=vector, payload={"document_id": document_id})


# ============================================================================
# Collection naming
# ============================================================================


class TestCollectionNaming:
    """Test suite for collection_name_for."""

    def test_simple_id_should_be_used_verbatim(self) -> None:
        assert collection_name_for("team-42") == "ws-team-42"

    def test_unsafe_id_should_be_hashed(self) -> None:
        # Act
        name = collection_name_for("Team_42/Finance")

        # Assert
        assert name.startswith("wsh-")
        assert len(name) <= 63
        assert name == collection_name_for("Team_42/Finance")

    def test_hashed_names_should_not_collide_with_verbatim_names(self) -> None:
        assert collection_name_for("UPPER") != collection_name_for("upper")

    def test_long_id_should_be_hashed(self) -> None:
        assert collection_name_for("a" * 80).startswith("wsh-")


# ============================================================================
# FAISS index
# ============================================================================


class TestFaissVectorIndex:
    """Test suite for FaissVectorIndex."""

    @pytest.mark.asyncio
    async def test_search_should_rank_nearest_first(self) -> None:
        # Arrange
        index = FaissVectorIndex(index_dir=None)
        collection = await index.ensure_collection("workspace-1", dimension=2)
        await index.upsert(collection, [_point("x", [1.0, 0.0]), _point("y", [0.0, 1.0])])

        # Act
        hits = await index.search(collection, [0.9, 0.1], k=2)

        # Assert
        assert [hit.id for hit in hits] == ["x", "y"]
        assert hits[0].score > hits[1].score
        assert hits[0].payload == {"document_id": "doc-a"}

    @pytest.mark.asyncio
    async def test_search_should_filter_by_document(self) -> None:
        # Arrange
        index = FaissVectorIndex(index_dir=None)
        collection = await index.ensure_collection("workspace-1", dimension=2)
        await index.upsert(
            collection,
            [_point("x", [1.0, 0.0], "doc-a"), _point("y", [0.9, 0.1], "doc-b")],
        )

        # Act
        hits = await index.search(collection, [1.0, 0.0], k=5, document_ids=["doc-b"])
        none = await index.search(collection, [1.0, 0.0], k=5, document_ids=[])

        # Assert
        assert [hit.id for hit in hits] == ["y"]
        assert none == []

    @pytest.mark.asyncio
    async def test_upsert_should_overwrite_existing_point(self) -> None:
        # Arrange
        index = FaissVectorIndex(index_dir=None)
        collection = await index.ensure_collection("workspace-1", dimension=2)
        await index.upsert(collection, [_point("x", [1.0, 0.0])])

        # Act
        await index.upsert(collection, [_point("x", [0.0, 1.0])])
        hits = await index.search(collection, [0.0, 1.0], k=5)

        # Assert
        assert len(hits) == 1
        assert hits[0].score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_delete_should_remove_points_and_ignore_unknown(self) -> None:
        # Arrange
        index = FaissVectorIndex(index_dir=None)
        collection = await index.ensure_collection("workspace-1", dimension=2)
        await index.upsert(collection, [_point("x", [1.0, 0.0]), _point("y", [0.0, 1.0])])

        # Act
        await index.delete(collection, ["x", "missing"])
        hits = await index.search(collection, [1.0, 0.0], k=5)

        # Assert
        assert [hit.id for hit in hits] == ["y"]

    @pytest.mark.asyncio
    async def test_search_unknown_collection_should_return_nothing(self) -> None:
        index = FaissVectorIndex(index_dir=None)

        assert await index.search("ws-missing", [1.0, 0.0], k=3) == []

    @pytest.mark.asyncio
    async def test_upsert_with_wrong_dimension_should_raise(self) -> None:
        # Arrange
        index = FaissVectorIndex(index_dir=None)
        collection = await index.ensure_collection("workspace-1", dimension=2)

        # Act & Assert
        with pytest.raises(VectorIndexError):
            await index.upsert(collection, [_point("x", [1.0, 0.0, 0.0])])

    @pytest.mark.asyncio
    async def test_upsert_into_missing_collection_should_raise(self) -> None:
        index = FaissVectorIndex(index_dir=None)

        with pytest.raises(VectorIndexError):
            await index.upsert("ws-missing", [_point("x", [1.0, 0.0])])

    def test_file_paths_without_directory_should_raise(self) -> None:
        index = FaissVectorIndex(index_dir=None)

        with pytest.raises(VectorIndexError):
            index._paths("ws-workspace-1")

    @pytest.mark.asyncio
    async def test_collections_should_survive_reload_from_disk(self, tmp_path) -> None:
        # Arrange
        writer = FaissVectorIndex(index_dir=str(tmp_path))
        collection = await writer.ensure_collection("workspace-1", dimension=2)
        await writer.upsert(collection, [_point("x", [1.0, 0.0])])

        # Act
        reader = FaissVectorIndex(index_dir=str(tmp_path))
        hits = await reader.search(collection, [1.0, 0.0], k=1)

        # Assert
        assert [hit.id for hit in hits] == ["x"]


class TestVectorIndexFactory:
    """Test suite for get_vector_index."""

    def test_faiss_store_type_should_build_faiss_index(self, tmp_path) -> None:
        settings = VectorStoreSettings(store_type="faiss", faiss_index_dir=str(tmp_path))

        assert isinstance(get_vector_index(settings), FaissVectorIndex)

    def test_s3_store_type_should_build_s3_vectors_index(self) -> None:
        settings = VectorStoreSettings(store_type="s3", vectors_bucket="vectors")

        assert isinstance(get_vector_index(settings), S3VectorsIndex)
