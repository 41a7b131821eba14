"""
Object storage client for raw documents.

Reads uploaded files from S3 into memory for extraction. One boto3 client
is kept per region because jobs may name different buckets/regions.

Dependencies: boto3, botocore, knowledgebase.core.exceptions
System role: First stage of document ingestion (object fetch)
"""

import asyncio
import logging
import threading
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from knowledgebase.configs.storage import StorageSettings
from knowledgebase.core.exceptions import StorageFetchError

logger = logging.getLogger(__name__)

_MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


class ObjectStorageClient:
    """Fetch raw document bytes from S3."""

    def __init__(self, settings: StorageSettings, client_factory: Any = None) -> None:
        """
        Initialize object storage client.

        Args:
            settings: Storage settings (default bucket/region, size limit)
            client_factory: Callable(region) -> boto3 S3 client, for tests
        """
        self._settings = settings
        self._client_factory = client_factory or (
            lambda region: boto3.client("s3", region_name=region)
        )
        self._clients: dict[str, Any] = {}
        self._lock = threading.Lock()

    def _client(self, region: str) -> Any:
        with self._lock:
            if region not in self._clients:
                self._clients[region] = self._client_factory(region)
            return self._clients[region]

    def fetch_sync(self, key: str, bucket: str | None = None, region: str | None = None) -> bytes:
        """
        Read an object fully into memory.

        Args:
            key: Object key
            bucket: Bucket name (default from settings)
            region: Bucket region (default from settings)

        Returns:
            bytes: Object body

        Raises:
            StorageFetchError: Object missing, too large, or transport failure
        """
        if not key:
            raise StorageFetchError("Storage key is required", key)

        bucket = bucket or self._settings.bucket
        region = region or self._settings.region

        try:
            response = self._client(region).get_object(Bucket=bucket, Key=key)
            size = response.get("ContentLength")
            if size is not None and size > self._settings.max_object_bytes:
                response["Body"].close()
                raise StorageFetchError(
                    f"Object exceeds {self._settings.max_object_bytes} bytes: {key}",
                    key,
                    details={"bucket": bucket, "size": size},
                )
            body = response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in _MISSING_OBJECT_CODES:
                raise StorageFetchError(
                    f"Object not found in storage: {key}",
                    key,
                    details={"bucket": bucket, "code": error_code},
                ) from e
            raise StorageFetchError(
                f"Failed to fetch object from storage: {e}",
                key,
                details={"bucket": bucket, "code": error_code},
            ) from e
        except BotoCoreError as e:
            raise StorageFetchError(
                f"Storage transport error: {e}",
                key,
                details={"bucket": bucket},
            ) from e

        logger.info(
            f"{__name__}:fetch - Fetched object",
            extra={"bucket": bucket, "storage_key": key, "size_bytes": len(body)},
        )
        return body

    async def fetch(self, key: str, bucket: str | None = None, region: str | None = None) -> bytes:
        """Async wrapper running the blocking boto3 call in a worker thread."""
        return await asyncio.to_thread(self.fetch_sync, key, bucket, region)
