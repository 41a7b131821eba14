"""
Pipeline result model.

Dependencies: pydantic
System role: Data contract for ingestion output
"""

import uuid

from pydantic import BaseModel, Field


class PipelineResult(BaseModel):
    """
    Outcome of one ingest() call.

    Attributes:
        document_id: Ingested document
        chunk_count: Live chunks after the run
        embedding_count: Chunks holding a vector after the run
        page_count: Extracted page count, if known
        word_count: Extracted word count
        vector_collection_id: Collection the vectors live in
        processing_time_ms: Wall time of the run
        skipped: True when the document was already COMPLETED
    """

    document_id: uuid.UUID
    chunk_count: int = Field(ge=0)
    embedding_count: int = Field(ge=0)
    page_count: int | None = None
    word_count: int | None = None
    vector_collection_id: str | None = None
    processing_time_ms: float = Field(default=0.0, ge=0)
    skipped: bool = False
