"""
S3 Vectors index for production.

Each workspace collection is an index inside one S3 Vectors bucket.
Metadata keys:
- Filterable: document_id, workspace_id, chunk_index, page_number
- Non-filterable: content_preview

Dependencies: boto3, botocore, tenacity
System role: Production vector index (S3 Vectors)
"""

import asyncio
import logging
from typing import Any, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from knowledgebase.boundary.vdb.vector_index import VectorIndex
from knowledgebase.boundary.vdb.vector_schemas import VectorHit, VectorPoint
from knowledgebase.core.exceptions import VectorIndexError

logger = logging.getLogger(__name__)

PUT_BATCH_SIZE = 500
DELETE_BATCH_SIZE = 500
MAX_TOP_K = 100
NON_FILTERABLE_KEYS = ["content_preview"]

_THROTTLING_CODES = {
    "ThrottlingException",
    "TooManyRequestsException",
    "ServiceUnavailableException",
    "InternalServerException",
}


def _is_throttling(error: BaseException) -> bool:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code") in _THROTTLING_CODES
    return False


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


_retry_on_throttling = retry(
    retry=retry_if_exception(_is_throttling),
    stop=stop_after_attempt(5),
    wait=wait_exponential_jitter(initial=1, max=30, jitter=5),
    before_sleep=lambda retry_state: logger.warning(
        f"{__name__}:retry - Retry {retry_state.attempt_number}/5 after throttling"
    ),
    reraise=True,
)


class S3VectorsIndex(VectorIndex):
    """Vector index backed by Amazon S3 Vectors."""

    def __init__(
        self,
        vectors_bucket: str,
        region: str = "us-east-1",
        collection_prefix: str = "ws",
        distance_metric: str = "cosine",
        client: Any = None,
    ) -> None:
        """
        Initialize S3 Vectors index.

        Args:
            vectors_bucket: S3 Vectors bucket name
            region: AWS region for S3 Vectors
            collection_prefix: Prefix of per-workspace index names
            distance_metric: 'cosine' or 'euclidean' for new indexes
            client: Preconfigured boto3 s3vectors client (tests)
        """
        super().__init__(collection_prefix, distance_metric)
        self._bucket = vectors_bucket
        self._client = client or boto3.client("s3vectors", region_name=region)
        self._known_collections: set[str] = set()

    # ------------------------------------------------------------------ sync

    @_retry_on_throttling
    def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        return getattr(self._client, operation)(vectorBucketName=self._bucket, **kwargs)

    def _ensure_collection_sync(self, name: str, dimension: int, metric: str) -> None:
        try:
            self._call("get_index", indexName=name)
            return
        except ClientError as e:
            if _error_code(e) not in ("NotFoundException", "ResourceNotFoundException"):
                raise
        try:
            self._call(
                "create_index",
                indexName=name,
                dataType="float32",
                dimension=dimension,
                distanceMetric=metric,
                metadataConfiguration={"nonFilterableMetadataKeys": NON_FILTERABLE_KEYS},
            )
            logger.info(f"{__name__}:ensure_collection - Created index {name} (dim={dimension})")
        except ClientError as e:
            # another worker created it first
            if _error_code(e) != "ConflictException":
                raise

    def _upsert_sync(self, collection: str, points: Sequence[VectorPoint]) -> None:
        for offset in range(0, len(points), PUT_BATCH_SIZE):
            batch = points[offset:offset + PUT_BATCH_SIZE]
            self._call(
                "put_vectors",
                indexName=collection,
                vectors=[
                    {
                        "key": point.id,
                        "data": {"float32": [float(value) for value in point.vector]},
                        "metadata": _clean_metadata(point.payload),
                    }
                    for point in batch
                ],
            )

    def _search_sync(
        self,
        collection: str,
        vector: Sequence[float],
        k: int,
        document_ids: Sequence[str] | None,
    ) -> list[VectorHit]:
        top_k = min(k, MAX_TOP_K)
        kwargs: dict[str, Any] = {
            "indexName": collection,
            "topK": top_k,
            "queryVector": {"float32": [float(value) for value in vector]},
            "returnMetadata": True,
            "returnDistance": True,
        }
        if document_ids is not None:
            kwargs["filter"] = {"document_id": {"$in": list(document_ids)}}
        try:
            response = self._call("query_vectors", **kwargs)
        except ClientError as e:
            if _error_code(e) in ("NotFoundException", "ResourceNotFoundException"):
                return []
            raise
        return [
            VectorHit(
                id=match["key"],
                score=self._similarity(float(match.get("distance", 0.0))),
                payload=match.get("metadata") or {},
            )
            for match in response.get("vectors", [])
        ]

    def _delete_sync(self, collection: str, ids: Sequence[str]) -> None:
        for offset in range(0, len(ids), DELETE_BATCH_SIZE):
            self._call(
                "delete_vectors",
                indexName=collection,
                keys=list(ids[offset:offset + DELETE_BATCH_SIZE]),
            )

    def _similarity(self, distance: float) -> float:
        if self._distance_metric == "cosine":
            return 1.0 - distance
        return 1.0 / (1.0 + distance)

    # ----------------------------------------------------------------- async

    async def _run(self, operation: str, func: Any, *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{__name__}:{operation} - {type(e).__name__}: {e}")
            raise VectorIndexError(
                f"S3 Vectors {operation} failed: {e}",
                operation=operation,
                details={"bucket": self._bucket},
            ) from e

    async def ensure_collection(
        self,
        workspace_id: str,
        dimension: int,
        distance_metric: str | None = None,
    ) -> str:
        name = self.collection_name(workspace_id)
        if name not in self._known_collections:
            await self._run(
                "ensure_collection",
                self._ensure_collection_sync,
                name,
                dimension,
                distance_metric or self._distance_metric,
            )
            self._known_collections.add(name)
        return name

    async def upsert(self, collection: str, points: Sequence[VectorPoint]) -> None:
        if not points:
            return
        await self._run("upsert", self._upsert_sync, collection, list(points))
        logger.info(f"{__name__}:upsert - Upserted {len(points)} vectors into {collection}")

    async def search(
        self,
        collection: str,
        vector: Sequence[float],
        k: int,
        document_ids: Sequence[str] | None = None,
    ) -> list[VectorHit]:
        if k <= 0 or (document_ids is not None and not document_ids):
            return []
        return await self._run("search", self._search_sync, collection, list(vector), k, document_ids)

    async def delete(self, collection: str, ids: Sequence[str]) -> None:
        if not ids:
            return
        await self._run("delete", self._delete_sync, collection, list(ids))


def _clean_metadata(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop None values, which S3 Vectors metadata cannot hold."""
    return {key: value for key, value in payload.items() if value is not None}
