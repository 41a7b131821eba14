"""
Dependency injection container.

Builds every long-lived collaborator once from settings and wires them
through constructors. Tests build their own graph with fakes instead.

Dependencies: knowledgebase.configs, knowledgebase.application, knowledgebase.boundary
System role: DI container for workers and services
"""

import logging
from functools import lru_cache

from knowledgebase.application.services import DocumentService, RetrievalService
from knowledgebase.boundary.db.connection import get_async_engine, get_async_session_factory
from knowledgebase.boundary.providers.embedding_client import EmbeddingClient
from knowledgebase.boundary.providers.embeddings_wrapper import FixedDimensionEmbeddings
from knowledgebase.boundary.providers.generation_client import GenerationClient
from knowledgebase.boundary.providers.rate_limiter import SlidingWindowRateLimiter
from knowledgebase.boundary.queue.memory_queue import InMemoryTaskQueue
from knowledgebase.boundary.queue.sqs_queue import SQSTaskQueue
from knowledgebase.boundary.queue.task_queue import TaskQueue
from knowledgebase.boundary.storage.s3_client import ObjectStorageClient
from knowledgebase.boundary.vdb.vector_index_factory import get_vector_index
from knowledgebase.configs import Settings, get_settings
from knowledgebase.core.document_processing.entrypoint import IngestionPipeline
from knowledgebase.core.document_processing.extractors import default_registry
from knowledgebase.core.document_processing.tasks import (
    ChunkingTask,
    EmbeddingTask,
    ExtractionTask,
    IndexingTask,
)
from knowledgebase.core.retrieval import AnswerAssembler, HybridSearchEngine, QueryRecorder
from knowledgebase.workers.ingestion_worker import IngestionWorkerPool

logger = logging.getLogger(__name__)


def build_task_queue(settings: Settings) -> TaskQueue:
    """
    Get task queue based on configuration.

    Args:
        settings: Application settings

    Returns:
        TaskQueue: InMemoryTaskQueue or SQSTaskQueue
    """
    ingestion = settings.ingestion
    if settings.queue.backend == "sqs":
        return SQSTaskQueue(
            queue_url=settings.queue.queue_url,
            dead_letter_queue_url=settings.queue.dead_letter_queue_url,
            region=settings.queue.region,
            max_attempts=ingestion.max_attempts,
            backoff_base_seconds=ingestion.backoff_base_seconds,
        )
    return InMemoryTaskQueue(
        max_attempts=ingestion.max_attempts,
        backoff_base_seconds=ingestion.backoff_base_seconds,
        completed_retention_seconds=ingestion.completed_retention_seconds,
        completed_retention_count=ingestion.completed_retention_count,
        failed_retention_seconds=ingestion.failed_retention_seconds,
    )


class Container:
    """Application object graph built from settings."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        providers = settings.providers
        ingestion = settings.ingestion

        self.engine = get_async_engine(settings.database)
        self.session_factory = get_async_session_factory(self.engine)
        self.storage = ObjectStorageClient(settings.storage)
        self.vector_index = get_vector_index(settings.vector_store)
        self.queue = build_task_queue(settings)

        embeddings = FixedDimensionEmbeddings(
            model=providers.embedding_model,
            output_dimensionality=providers.embedding_dimension,
        )
        # one limiter for every ingestion loop; query embeddings are not throttled
        self.rate_limiter = SlidingWindowRateLimiter(
            max_calls=providers.embedding_calls_per_window,
            window_seconds=providers.embedding_window_seconds,
        )
        self.ingestion_embedder = EmbeddingClient(
            embeddings,
            model_name=providers.embedding_model,
            dimension=providers.embedding_dimension,
            batch_size=providers.embedding_batch_size,
            rate_limiter=self.rate_limiter,
        )
        self.query_embedder = EmbeddingClient(
            embeddings,
            model_name=providers.embedding_model,
            dimension=providers.embedding_dimension,
            batch_size=providers.embedding_batch_size,
        )
        self.generation_client = GenerationClient(
            default_model=providers.generation_model,
            temperature=providers.temperature,
            max_output_tokens=providers.max_output_tokens,
        )

        embedding_task = EmbeddingTask(self.ingestion_embedder)
        indexing_task = IndexingTask(
            self.vector_index,
            content_preview_chars=settings.vector_store.content_preview_chars,
        )
        self.pipeline = IngestionPipeline(
            session_factory=self.session_factory,
            extraction_task=ExtractionTask(self.storage, default_registry()),
            chunking_task=ChunkingTask(
                max_chunk_size=ingestion.max_chunk_size,
                chunk_overlap=ingestion.chunk_overlap,
                separators=ingestion.separators,
            ),
            embedding_task=embedding_task,
            indexing_task=indexing_task,
        )
        self.worker_pool = IngestionWorkerPool(
            self.queue,
            self.pipeline,
            concurrency=ingestion.concurrency,
            lease_seconds=ingestion.lease_seconds,
            poll_interval=ingestion.poll_interval_seconds,
        )

        self.recorder = QueryRecorder(self.session_factory)
        self.search_engine = HybridSearchEngine(
            self.session_factory,
            self.query_embedder,
            self.vector_index,
            self.recorder,
            settings.retrieval,
        )
        self.answer_assembler = AnswerAssembler(
            self.search_engine,
            self.generation_client,
            self.recorder,
            settings.retrieval,
        )
        self.document_service = DocumentService(
            self.session_factory,
            self.queue,
            embedding_task,
            indexing_task,
        )
        self.retrieval_service = RetrievalService(self.search_engine, self.answer_assembler)

    async def startup(self) -> None:
        logger.info(
            f"{__name__}:startup - Container ready",
            extra={
                "environment": self.settings.environment,
                "queue_backend": self.settings.queue.backend,
                "vector_store": self.settings.vector_store.store_type,
            },
        )

    async def shutdown(self) -> None:
        """Flush pending query records and close the engine."""
        await self.recorder.drain()
        await self.engine.dispose()
        logger.info(f"{__name__}:shutdown - Container closed")


def build_container(settings: Settings | None = None) -> Container:
    """Build a fresh container (default: cached settings)."""
    return Container(settings or get_settings())


@lru_cache
def get_container() -> Container:
    """Get container singleton."""
    return build_container()
