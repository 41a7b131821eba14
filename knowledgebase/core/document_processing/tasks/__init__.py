"""Pipeline stage tasks."""

from .chunking_task import ChunkingTask
from .embedding_task import EmbeddingTask
from .extraction_task import ExtractionTask
from .indexing_task import IndexingTask

__all__ = ["ChunkingTask", "EmbeddingTask", "ExtractionTask", "IndexingTask"]
