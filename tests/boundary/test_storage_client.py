"""
Test suite for ObjectStorageClient.

System role: Verification of the raw document fetch stage
"""

import io
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from knowledgebase.boundary.storage.s3_client import ObjectStorageClient
from knowledgebase.configs.storage import StorageSettings
from knowledgebase.core.exceptions import StorageFetchError


@pytest.fixture
def s3_client() -> MagicMock:
    client = MagicMock()
    client.get_object.return_value = {"ContentLength": 5, "Body": io.BytesIO(b"hello")}
    return client


@pytest.fixture
def regions() -> list[str]:
    return []


@pytest.fixture
def storage(s3_client, regions) -> ObjectStorageClient:
    def factory(region: str) -> MagicMock:
        regions.append(region)
        return s3_client

    settings = StorageSettings(bucket="default-bucket", region="eu-west-1", max_object_bytes=10)
    return ObjectStorageClient(settings, client_factory=factory)


class TestObjectStorageFetch:
    """Test suite for ObjectStorageClient.fetch."""

    @pytest.mark.asyncio
    async def test_fetch_should_use_defaults_when_job_names_none(
        self, storage, s3_client, regions
    ) -> None:
        # Act
        body = await storage.fetch("docs/a.txt")

        # Assert
        assert body == b"hello"
        s3_client.get_object.assert_called_once_with(Bucket="default-bucket", Key="docs/a.txt")
        assert regions == ["eu-west-1"]

    @pytest.mark.asyncio
    async def test_fetch_should_reuse_client_per_region(self, storage, s3_client, regions) -> None:
        # Arrange
        s3_client.get_object.side_effect = lambda **kwargs: {"Body": io.BytesIO(b"x")}

        # Act
        await storage.fetch("a", bucket="other", region="us-east-1")
        await storage.fetch("b", bucket="other", region="us-east-1")

        # Assert
        assert regions == ["us-east-1"]

    @pytest.mark.asyncio
    async def test_missing_object_should_raise_fetch_error(self, storage, s3_client) -> None:
        # Arrange
        s3_client.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )

        # Act & Assert
        with pytest.raises(StorageFetchError) as exc_info:
            await storage.fetch("docs/missing.txt")
        assert "not found" in exc_info.value.message
        assert exc_info.value.details["storage_key"] == "docs/missing.txt"

    @pytest.mark.asyncio
    async def test_oversized_object_should_raise_fetch_error(self, storage, s3_client) -> None:
        # Arrange
        body = io.BytesIO(b"x" * 11)
        s3_client.get_object.return_value = {"ContentLength": 11, "Body": body}

        # Act & Assert
        with pytest.raises(StorageFetchError):
            await storage.fetch("docs/big.bin")
        assert body.closed

    @pytest.mark.asyncio
    async def test_transport_error_should_raise_fetch_error(self, storage, s3_client) -> None:
        # Arrange
        s3_client.get_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")

        # Act & Assert
        with pytest.raises(StorageFetchError):
            await storage.fetch("docs/a.txt")

    @pytest.mark.asyncio
    async def test_empty_key_should_raise_fetch_error(self, storage, s3_client) -> None:
        with pytest.raises(StorageFetchError):
            await storage.fetch("")
        s3_client.get_object.assert_not_called()
