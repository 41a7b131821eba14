"""
Embedding client.

Batches texts into fixed-dimension vectors through any langchain-core
Embeddings implementation. A provider failure fails the whole call; there
is no per-item retry.

Dependencies: langchain_core, knowledgebase.boundary.providers.rate_limiter
System role: Embedding stage of ingestion and query embedding for search
"""

import asyncio
import logging
from typing import Sequence

from langchain_core.embeddings import Embeddings

from knowledgebase.boundary.providers.rate_limiter import SlidingWindowRateLimiter
from knowledgebase.core.exceptions import EmbeddingProviderError

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Order-preserving, rate-limited batch embedding."""

    def __init__(
        self,
        embeddings: Embeddings,
        model_name: str,
        dimension: int,
        batch_size: int = 100,
        rate_limiter: SlidingWindowRateLimiter | None = None,
    ) -> None:
        """
        Initialize embedding client.

        Args:
            embeddings: LangChain embeddings implementation
            model_name: Model name recorded on chunks
            dimension: Expected vector dimension
            batch_size: Texts per provider call
            rate_limiter: Shared limiter acquired before every provider call
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._embeddings = embeddings
        self._batch_size = batch_size
        self._rate_limiter = rate_limiter
        self.model_name = model_name
        self.dimension = dimension

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed texts, one vector per input in input order.

        Args:
            texts: Texts to embed

        Returns:
            list[list[float]]: Vectors

        Raises:
            EmbeddingProviderError: Provider call failed or returned bad output
        """
        if not texts:
            return []

        vectors: list[list[float]] = []
        for offset in range(0, len(texts), self._batch_size):
            batch = list(texts[offset:offset + self._batch_size])
            if self._rate_limiter is not None:
                await self._rate_limiter.acquire()
            try:
                result = await asyncio.to_thread(self._embeddings.embed_documents, batch)
            except Exception as e:
                logger.error(f"{__name__}:embed_batch - {type(e).__name__}: {e}")
                raise EmbeddingProviderError(
                    f"Embedding provider call failed: {e}",
                    details={"model": self.model_name, "batch_size": len(batch)},
                ) from e
            self._validate(result, len(batch))
            vectors.extend([list(vector) for vector in result])

        logger.info(
            f"{__name__}:embed_batch - Embedded {len(vectors)} texts",
            extra={"model": self.model_name},
        )
        return vectors

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a single search query.

        Raises:
            EmbeddingProviderError: Provider call failed or returned bad output
        """
        if self._rate_limiter is not None:
            await self._rate_limiter.acquire()
        try:
            vector = await asyncio.to_thread(self._embeddings.embed_query, text)
        except Exception as e:
            raise EmbeddingProviderError(
                f"Query embedding failed: {e}",
                details={"model": self.model_name},
            ) from e
        self._validate([vector], 1)
        return list(vector)

    def _validate(self, vectors: Sequence[Sequence[float]], expected: int) -> None:
        if len(vectors) != expected:
            raise EmbeddingProviderError(
                "Embedding provider returned wrong number of vectors",
                details={"expected": expected, "received": len(vectors)},
            )
        for vector in vectors:
            if len(vector) != self.dimension:
                raise EmbeddingProviderError(
                    "Embedding provider returned wrong dimension",
                    details={"expected": self.dimension, "received": len(vector)},
                )
