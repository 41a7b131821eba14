"""
Embedding task.

Embeds the chunks of a document that do not have a vector yet. On a retry
after an indexing failure, only those chunks are sent to the provider again.

Dependencies: knowledgebase.boundary.providers
System role: EMBEDDING stage of document ingestion pipeline
"""

from typing import Sequence

from knowledgebase.boundary.db.models.chunk_model import ChunkModel
from knowledgebase.boundary.providers.embedding_client import EmbeddingClient


class EmbeddingTask:
    """Generate one vector per chunk, preserving chunk order."""

    def __init__(self, client: EmbeddingClient) -> None:
        self._client = client

    @property
    def model_name(self) -> str:
        return self._client.model_name

    @property
    def dimension(self) -> int:
        return self._client.dimension

    async def embed(self, chunks: Sequence[ChunkModel]) -> list[tuple[ChunkModel, list[float]]]:
        """
        Embed chunk contents.

        Args:
            chunks: Chunk rows lacking a vector

        Returns:
            list of (chunk, vector) pairs in input order

        Raises:
            EmbeddingProviderError: The provider call failed
        """
        vectors = await self._client.embed_batch([chunk.content for chunk in chunks])
        return list(zip(chunks, vectors))
