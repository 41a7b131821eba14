"""
Fetch and extraction task.

Reads the raw object, runs the extractor registered for the declared type
in a worker thread and normalizes the resulting text.

Dependencies: knowledgebase.boundary.storage, knowledgebase.core.document_processing.extractors
System role: PARSING stage of document ingestion pipeline
"""

import asyncio
import logging

from knowledgebase.boundary.storage.s3_client import ObjectStorageClient

from ..extractors import ExtractorRegistry
from ..models import ExtractedDocument, IngestionJob
from ..text_normalizer import normalize_text

logger = logging.getLogger(__name__)


class ExtractionTask:
    """Turn a stored object into normalized text plus metadata."""

    def __init__(self, storage: ObjectStorageClient, registry: ExtractorRegistry) -> None:
        self._storage = storage
        self._registry = registry

    async def extract(self, job: IngestionJob) -> ExtractedDocument:
        """
        Fetch and extract the job's file.

        Args:
            job: Ingestion job

        Returns:
            ExtractedDocument: Normalized text and metadata

        Raises:
            UnsupportedDocumentTypeError: No extractor for the declared type
            StorageFetchError: Object could not be read
            ExtractionError: File could not be parsed
        """
        extractor = self._registry.get(job.document_type, job.job_id)
        raw = await self._storage.fetch(job.storage_key, job.storage_bucket, job.storage_region)
        extracted = await asyncio.to_thread(extractor.extract, raw)
        text = normalize_text(extracted.text)

        logger.info(
            f"{__name__}:extract - Extracted {len(text)} characters",
            extra={"document_id": job.job_id, "document_type": job.document_type.value},
        )
        return extracted.model_copy(update={"text": text, "word_count": len(text.split())})
