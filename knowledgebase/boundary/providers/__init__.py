"""Model provider adapters (embeddings, generation) and the shared rate limiter."""

from knowledgebase.boundary.providers.embedding_client import EmbeddingClient
from knowledgebase.boundary.providers.generation_client import GenerationClient, GenerationResult
from knowledgebase.boundary.providers.rate_limiter import SlidingWindowRateLimiter

__all__ = [
    "EmbeddingClient",
    "GenerationClient",
    "GenerationResult",
    "SlidingWindowRateLimiter",
]
