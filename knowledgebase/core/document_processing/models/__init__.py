"""Data models for the document processing pipeline."""

from .extracted_document import ExtractedDocument
from .ingestion_job import IngestionJob
from .pipeline_result import PipelineResult
from .text_chunk import TextChunk

__all__ = ["ExtractedDocument", "IngestionJob", "PipelineResult", "TextChunk"]
