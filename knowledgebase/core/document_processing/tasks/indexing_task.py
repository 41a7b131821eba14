"""
Vector indexing task.

Ensures the workspace collection exists and upserts one point per chunk,
keyed by the chunk id, with the payload used for filtering and hydration.

Dependencies: knowledgebase.boundary.vdb
System role: INDEXING stage of document ingestion pipeline
"""

import logging
from typing import Sequence

from knowledgebase.boundary.db.models.chunk_model import ChunkModel
from knowledgebase.boundary.vdb.vector_index import VectorIndex
from knowledgebase.boundary.vdb.vector_schemas import VectorPoint

logger = logging.getLogger(__name__)


class IndexingTask:
    """Write chunk vectors into the per-workspace collection."""

    def __init__(self, vector_index: VectorIndex, content_preview_chars: int = 500) -> None:
        self._vector_index = vector_index
        self._preview_chars = content_preview_chars

    def collection_name(self, workspace_id: str) -> str:
        return self._vector_index.collection_name(workspace_id)

    def build_points(
        self,
        workspace_id: str,
        embedded: Sequence[tuple[ChunkModel, list[float]]],
    ) -> list[VectorPoint]:
        """Vector points for (chunk, vector) pairs."""
        return [
            VectorPoint(
                id=str(chunk.id),
                vector=vector,
                payload={
                    "document_id": str(chunk.document_id),
                    "workspace_id": workspace_id,
                    "chunk_index": chunk.chunk_index,
                    "content_preview": chunk.content[:self._preview_chars],
                    "page_number": chunk.page_number,
                },
            )
            for chunk, vector in embedded
        ]

    async def index(
        self,
        workspace_id: str,
        dimension: int,
        embedded: Sequence[tuple[ChunkModel, list[float]]],
    ) -> str:
        """
        Upsert vectors for embedded chunks.

        Args:
            workspace_id: Owning workspace
            dimension: Vector dimension used if the collection is created
            embedded: (chunk, vector) pairs

        Returns:
            str: Collection name

        Raises:
            VectorIndexError: Backend failure
        """
        collection = await self._vector_index.ensure_collection(workspace_id, dimension)
        points = self.build_points(workspace_id, embedded)
        await self._vector_index.upsert(collection, points)
        logger.info(f"{__name__}:index - Indexed {len(points)} points into {collection}")
        return collection

    async def remove(self, collection: str, point_ids: Sequence[str]) -> None:
        """Delete points of chunks that no longer exist."""
        await self._vector_index.delete(collection, point_ids)
