"""Object storage boundary."""

from knowledgebase.boundary.storage.s3_client import ObjectStorageClient

__all__ = ["ObjectStorageClient"]
