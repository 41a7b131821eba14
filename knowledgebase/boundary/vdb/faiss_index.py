"""
FAISS vector index for local development.

Same interface as S3VectorsIndex, backed by one in-process FAISS index per
collection. Point ids are mapped to int64 FAISS ids; payloads live beside
the index. Collections are persisted under a directory so they survive
restarts.

Dependencies: faiss-cpu, numpy
System role: Local vector index for development
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Sequence

import faiss
import numpy as np

from knowledgebase.boundary.vdb.vector_index import VectorIndex
from knowledgebase.boundary.vdb.vector_schemas import VectorHit, VectorPoint
from knowledgebase.core.exceptions import VectorIndexError

logger = logging.getLogger(__name__)


class _Collection:
    """A FAISS index plus id registry and payloads."""

    def __init__(self, dimension: int, metric: str) -> None:
        self.dimension = dimension
        self.metric = metric
        base = faiss.IndexFlatIP(dimension) if metric == "cosine" else faiss.IndexFlatL2(dimension)
        self.index = faiss.IndexIDMap2(base)
        self.int_ids: dict[str, int] = {}
        self.payloads: dict[str, dict[str, Any]] = {}
        self.next_id = 0

    def to_state(self) -> dict[str, Any]:
        return {
            "dimension": self.dimension,
            "metric": self.metric,
            "int_ids": self.int_ids,
            "payloads": self.payloads,
            "next_id": self.next_id,
        }


class FaissVectorIndex(VectorIndex):
    """Vector index backed by local FAISS indexes."""

    def __init__(
        self,
        index_dir: str | None = None,
        collection_prefix: str = "ws",
        distance_metric: str = "cosine",
    ) -> None:
        """
        Initialize FAISS index.

        Args:
            index_dir: Persistence directory, None keeps everything in memory
            collection_prefix: Prefix of per-workspace collection names
            distance_metric: 'cosine' or 'euclidean' for new collections
        """
        super().__init__(collection_prefix, distance_metric)
        self._dir = Path(index_dir) if index_dir else None
        self._collections: dict[str, _Collection] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------ persistence

    def _paths(self, name: str) -> tuple[Path, Path]:
        if self._dir is None:
            raise VectorIndexError("Index has no persistence directory", details={"collection": name})
        return self._dir / f"{name}.faiss", self._dir / f"{name}.json"

    def _load(self, name: str) -> _Collection | None:
        if name in self._collections:
            return self._collections[name]
        if self._dir is None:
            return None
        index_path, state_path = self._paths(name)
        if not (index_path.exists() and state_path.exists()):
            return None
        state = json.loads(state_path.read_text(encoding="utf-8"))
        collection = _Collection(state["dimension"], state["metric"])
        collection.index = faiss.read_index(str(index_path))
        collection.int_ids = {key: int(value) for key, value in state["int_ids"].items()}
        collection.payloads = state["payloads"]
        collection.next_id = state["next_id"]
        self._collections[name] = collection
        return collection

    def _save(self, name: str, collection: _Collection) -> None:
        if self._dir is None:
            return
        self._dir.mkdir(parents=True, exist_ok=True)
        index_path, state_path = self._paths(name)
        faiss.write_index(collection.index, str(index_path))
        state_path.write_text(json.dumps(collection.to_state()), encoding="utf-8")

    def _require(self, name: str, operation: str) -> _Collection:
        collection = self._load(name)
        if collection is None:
            raise VectorIndexError(
                f"Collection does not exist: {name}",
                operation=operation,
            )
        return collection

    def _matrix(self, collection: _Collection, vectors: Sequence[Sequence[float]]) -> np.ndarray:
        matrix = np.asarray(vectors, dtype="float32")
        if matrix.ndim != 2 or matrix.shape[1] != collection.dimension:
            raise VectorIndexError(
                "Vector dimension does not match collection",
                details={"expected": collection.dimension, "shape": list(matrix.shape)},
            )
        matrix = np.ascontiguousarray(matrix)
        if collection.metric == "cosine":
            faiss.normalize_L2(matrix)
        return matrix

    # -------------------------------------------------------------- interface

    async def ensure_collection(
        self,
        workspace_id: str,
        dimension: int,
        distance_metric: str | None = None,
    ) -> str:
        name = self.collection_name(workspace_id)
        with self._lock:
            if self._load(name) is None:
                collection = _Collection(dimension, distance_metric or self._distance_metric)
                self._collections[name] = collection
                self._save(name, collection)
                logger.info(f"{__name__}:ensure_collection - Created collection {name}")
        return name

    async def upsert(self, collection: str, points: Sequence[VectorPoint]) -> None:
        if not points:
            return
        with self._lock:
            target = self._require(collection, "upsert")
            matrix = self._matrix(target, [point.vector for point in points])
            stale = [target.int_ids[point.id] for point in points if point.id in target.int_ids]
            if stale:
                target.index.remove_ids(np.asarray(stale, dtype="int64"))

            int_ids = []
            for point in points:
                if point.id not in target.int_ids:
                    target.int_ids[point.id] = target.next_id
                    target.next_id += 1
                int_ids.append(target.int_ids[point.id])
                target.payloads[point.id] = dict(point.payload)

            target.index.add_with_ids(matrix, np.asarray(int_ids, dtype="int64"))
            self._save(collection, target)

    async def search(
        self,
        collection: str,
        vector: Sequence[float],
        k: int,
        document_ids: Sequence[str] | None = None,
    ) -> list[VectorHit]:
        if k <= 0 or (document_ids is not None and not document_ids):
            return []
        with self._lock:
            target = self._load(collection)
            if target is None or target.index.ntotal == 0:
                return []
            query = self._matrix(target, [vector])
            # filtered searches scan everything and filter afterwards
            fetch = target.index.ntotal if document_ids is not None else min(k, target.index.ntotal)
            distances, labels = target.index.search(query, fetch)
            by_int_id = {value: key for key, value in target.int_ids.items()}
            allowed = set(document_ids) if document_ids is not None else None

            hits: list[VectorHit] = []
            for distance, label in zip(distances[0], labels[0]):
                if label < 0:
                    continue
                point_id = by_int_id.get(int(label))
                if point_id is None:
                    continue
                payload = target.payloads.get(point_id, {})
                if allowed is not None and payload.get("document_id") not in allowed:
                    continue
                score = float(distance) if target.metric == "cosine" else 1.0 / (1.0 + float(distance))
                hits.append(VectorHit(id=point_id, score=score, payload=payload))
                if len(hits) >= k:
                    break
            return hits

    async def delete(self, collection: str, ids: Sequence[str]) -> None:
        if not ids:
            return
        with self._lock:
            target = self._load(collection)
            if target is None:
                return
            known = [target.int_ids.pop(point_id) for point_id in ids if point_id in target.int_ids]
            for point_id in ids:
                target.payloads.pop(point_id, None)
            if known:
                target.index.remove_ids(np.asarray(known, dtype="int64"))
            self._save(collection, target)
