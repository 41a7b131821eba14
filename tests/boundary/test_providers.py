"""
Test suite for provider adapters.

Embedding batching and validation, the shared sliding-window limiter, and
the generation client over langchain fake chat models.

System role: Verification of embedding and generation providers
"""

import asyncio
import time
from unittest.mock import MagicMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models import GenericFakeChatModel
from langchain_core.messages import AIMessage

from knowledgebase.boundary.providers.embedding_client import EmbeddingClient
from knowledgebase.boundary.providers.generation_client import GenerationClient
from knowledgebase.boundary.providers.rate_limiter import SlidingWindowRateLimiter
from knowledgebase.core.exceptions import EmbeddingProviderError, GenerationProviderError


# ============================================================================
# Embedding client
# ============================================================================


class TestEmbeddingClient:
    """Test suite for EmbeddingClient."""

    def test_init_with_non_positive_batch_size_should_raise(self) -> None:
        with pytest.raises(ValueError):
            EmbeddingClient(DeterministicFakeEmbedding(size=4), "fake", 4, batch_size=0)

    @pytest.mark.asyncio
    async def test_embed_batch_should_preserve_order_across_batches(self) -> None:
        # Arrange
        embeddings = DeterministicFakeEmbedding(size=4)
        client = EmbeddingClient(embeddings, "fake", 4, batch_size=2)
        texts = ["one", "two", "three", "four", "five"]

        # Act
        vectors = await client.embed_batch(texts)

        # Assert
        assert vectors == [embeddings.embed_query(text) for text in texts]

    @pytest.mark.asyncio
    async def test_embed_batch_should_split_provider_calls(self) -> None:
        # Arrange
        embeddings = MagicMock()
        embeddings.embed_documents.side_effect = lambda batch: [[0.0] * 4 for _ in batch]
        client = EmbeddingClient(embeddings, "fake", 4, batch_size=2)

        # Act
        await client.embed_batch(["a", "b", "c"])

        # Assert
        batches = [call.args[0] for call in embeddings.embed_documents.call_args_list]
        assert batches == [["a", "b"], ["c"]]

    @pytest.mark.asyncio
    async def test_embed_batch_empty_input_should_not_call_provider(self) -> None:
        # Arrange
        embeddings = MagicMock()
        client = EmbeddingClient(embeddings, "fake", 4)

        # Act
        vectors = await client.embed_batch([])

        # Assert
        assert vectors == []
        embeddings.embed_documents.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_dimension_should_raise(self) -> None:
        # Arrange
        client = EmbeddingClient(DeterministicFakeEmbedding(size=3), "fake", 4)

        # Act & Assert
        with pytest.raises(EmbeddingProviderError):
            await client.embed_batch(["text"])

    @pytest.mark.asyncio
    async def test_wrong_vector_count_should_raise(self) -> None:
        # Arrange
        embeddings = MagicMock()
        embeddings.embed_documents.return_value = [[0.0] * 4]
        client = EmbeddingClient(embeddings, "fake", 4)

        # Act & Assert
        with pytest.raises(EmbeddingProviderError):
            await client.embed_batch(["a", "b"])

    @pytest.mark.asyncio
    async def test_provider_error_should_be_wrapped(self) -> None:
        # Arrange
        embeddings = MagicMock()
        embeddings.embed_query.side_effect = RuntimeError("quota exceeded")
        client = EmbeddingClient(embeddings, "fake", 4)

        # Act & Assert
        with pytest.raises(EmbeddingProviderError) as exc_info:
            await client.embed_query("question")
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_rate_limiter_should_be_acquired_per_provider_call(self) -> None:
        # Arrange
        limiter = MagicMock()
        limiter.acquire = MagicMock(side_effect=lambda: asyncio.sleep(0))
        client = EmbeddingClient(
            DeterministicFakeEmbedding(size=4), "fake", 4, batch_size=2, rate_limiter=limiter
        )

        # Act
        await client.embed_batch(["a", "b", "c"])

        # Assert
        assert limiter.acquire.call_count == 2


# ============================================================================
# Rate limiter
# ============================================================================


class TestSlidingWindowRateLimiter:
    """Test suite for SlidingWindowRateLimiter."""

    def test_init_with_invalid_window_should_raise(self) -> None:
        with pytest.raises(ValueError):
            SlidingWindowRateLimiter(max_calls=0, window_seconds=60)

    def test_try_acquire_should_refuse_when_window_full(self) -> None:
        # Arrange
        limiter = SlidingWindowRateLimiter(max_calls=2, window_seconds=60)

        # Act
        results = [limiter.try_acquire() for _ in range(3)]

        # Assert
        assert results == [True, True, False]

    @pytest.mark.asyncio
    async def test_acquire_should_wait_for_window_to_slide(self) -> None:
        # Arrange
        limiter = SlidingWindowRateLimiter(max_calls=1, window_seconds=0.2, poll_interval=0.01)
        await limiter.acquire()
        started = time.monotonic()

        # Act
        await asyncio.wait_for(limiter.acquire(), timeout=5)

        # Assert
        assert time.monotonic() - started >= 0.1


# ============================================================================
# Generation client
# ============================================================================


def _fake_chat_model(text: str, total_tokens: int = 30) -> GenericFakeChatModel:
    return GenericFakeChatModel(
        messages=iter(
            [
                AIMessage(
                    content=text,
                    usage_metadata={
                        "input_tokens": total_tokens - 10,
                        "output_tokens": 10,
                        "total_tokens": total_tokens,
                    },
                )
            ]
        )
    )


class TestGenerationClient:
    """Test suite for GenerationClient."""

    @pytest.mark.asyncio
    async def test_generate_should_report_text_model_and_tokens(self) -> None:
        # Arrange
        client = GenerationClient(
            "gemini-2.5-flash",
            model_factory=lambda name: _fake_chat_model("Refunds take 14 days.", 30),
        )

        # Act
        result = await client.generate("system", "user")

        # Assert
        assert result.text == "Refunds take 14 days."
        assert result.model == "gemini-2.5-flash"
        assert result.tokens_used == 30

    @pytest.mark.asyncio
    async def test_generate_should_cache_model_per_name(self) -> None:
        # Arrange
        factory = MagicMock(side_effect=lambda name: _fake_chat_model(name))
        client = GenerationClient("default-model", model_factory=factory)

        # Act
        override = await client.generate("system", "user", model="other-model")

        # Assert
        assert override.model == "other-model"
        assert override.text == "other-model"
        factory.assert_called_once_with("other-model")

    @pytest.mark.asyncio
    async def test_generate_failure_should_raise_provider_error(self) -> None:
        # Arrange
        broken = MagicMock()
        broken.ainvoke.side_effect = RuntimeError("unavailable")
        client = GenerationClient("default-model", model_factory=lambda name: broken)

        # Act & Assert
        with pytest.raises(GenerationProviderError) as exc_info:
            await client.generate("system", "user")
        assert exc_info.value.details["model"] == "default-model"
