"""
Vector index interface and collection naming.

One collection per workspace. Names are deterministic and collision-free:
ids that are already valid index names are used verbatim behind the prefix,
anything else is replaced by a sha256 digest under a distinct prefix.

Dependencies: hashlib, knowledgebase.boundary.vdb.vector_schemas
System role: Abstraction over S3 Vectors (production) and FAISS (development)
"""

import hashlib
import re
from abc import ABC, abstractmethod
from typing import Sequence

from knowledgebase.boundary.vdb.vector_schemas import VectorHit, VectorPoint

MAX_COLLECTION_NAME_LENGTH = 63
_VERBATIM_ID = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")


def collection_name_for(workspace_id: str, prefix: str = "ws") -> str:
    """
    Derive the collection name of a workspace.

    Args:
        workspace_id: Workspace identifier
        prefix: Collection name prefix

    Returns:
        str: '<prefix>-<id>' or '<prefix>h-<digest>'
    """
    candidate = f"{prefix}-{workspace_id}"
    if _VERBATIM_ID.match(workspace_id) and len(candidate) <= MAX_COLLECTION_NAME_LENGTH:
        return candidate
    digest = hashlib.sha256(workspace_id.encode("utf-8")).hexdigest()
    return f"{prefix}h-{digest}"[:MAX_COLLECTION_NAME_LENGTH]


class VectorIndex(ABC):
    """Per-workspace vector collections."""

    def __init__(self, collection_prefix: str = "ws", distance_metric: str = "cosine") -> None:
        self._collection_prefix = collection_prefix
        self._distance_metric = distance_metric

    def collection_name(self, workspace_id: str) -> str:
        """Collection name of a workspace (no I/O)."""
        return collection_name_for(workspace_id, self._collection_prefix)

    @abstractmethod
    async def ensure_collection(
        self,
        workspace_id: str,
        dimension: int,
        distance_metric: str | None = None,
    ) -> str:
        """
        Create the workspace collection if it does not exist.

        Returns:
            str: Collection name

        Raises:
            VectorIndexError: Backend failure
        """

    @abstractmethod
    async def upsert(self, collection: str, points: Sequence[VectorPoint]) -> None:
        """Insert or overwrite points keyed by id."""

    @abstractmethod
    async def search(
        self,
        collection: str,
        vector: Sequence[float],
        k: int,
        document_ids: Sequence[str] | None = None,
    ) -> list[VectorHit]:
        """
        Nearest points, best first, optionally restricted to document ids.

        A collection that does not exist yet yields no hits.
        """

    @abstractmethod
    async def delete(self, collection: str, ids: Sequence[str]) -> None:
        """Delete points by id; unknown ids are ignored."""
