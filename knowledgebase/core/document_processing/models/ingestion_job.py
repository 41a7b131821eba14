"""
Ingestion job schema.

Defines the payload delivered by the job queue to the ingestion pipeline.
Accepts the camelCase wire format as well as snake_case field names.

Dependencies: pydantic
System role: Job queue message contract
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from knowledgebase.boundary.db.models.document_model import DocumentModel, DocumentType


class IngestionJob(BaseModel):
    """
    Unit of work handed to the pipeline.

    The job identity is the document id, so re-enqueueing the same document
    never creates a second logical job.

    Attributes:
        document_id: Document to ingest
        workspace_id: Owning workspace
        storage_key: Object key of the raw file
        storage_bucket: Bucket holding the file
        storage_region: Region of the bucket
        document_type: Declared type selecting the extractor
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    document_id: uuid.UUID = Field(description="Document UUID, also the job identity")
    workspace_id: str = Field(min_length=1)
    storage_key: str = Field(min_length=1)
    storage_bucket: str | None = None
    storage_region: str | None = None
    document_type: DocumentType

    @property
    def job_id(self) -> str:
        """Queue-level identity of this job."""
        return str(self.document_id)

    @classmethod
    def from_document(cls, document: DocumentModel) -> "IngestionJob":
        """
        Build the job for a stored document.

        Args:
            document: Document row created by the upload flow

        Returns:
            IngestionJob: Job carrying the document's storage locator
        """
        return cls(
            document_id=document.id,
            workspace_id=document.workspace_id,
            storage_key=document.storage_key,
            storage_bucket=document.storage_bucket,
            storage_region=document.storage_region,
            document_type=document.document_type,
        )

    def to_message(self) -> str:
        """Serialize to the camelCase JSON wire format."""
        return self.model_dump_json(by_alias=True)
