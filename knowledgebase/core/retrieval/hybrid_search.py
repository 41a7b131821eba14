"""
Hybrid retrieval engine.

Runs a semantic branch (query embedding + vector search for 2k candidates)
and a lexical branch (substring search for k candidates) concurrently, each
under its own timeout, then fuses both rankings with Reciprocal Rank Fusion.
A failed semantic branch degrades to lexical-only results; only the failure
of both branches is surfaced, as RetrievalUnavailableError.

Dependencies: knowledgebase.boundary.{db,providers,vdb}, rank_fusion
System role: Search business logic
"""

import asyncio
import logging
import time
import uuid
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledgebase.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledgebase.boundary.db.CRUD.document_crud import document_crud
from knowledgebase.boundary.db.models.query_model import QueryType
from knowledgebase.boundary.providers.embedding_client import EmbeddingClient
from knowledgebase.boundary.vdb.vector_index import VectorIndex
from knowledgebase.configs.retrieval import RetrievalSettings
from knowledgebase.core.exceptions import RetrievalUnavailableError
from knowledgebase.models.search import SearchResult

from .query_recorder import QueryRecorder
from .rank_fusion import reciprocal_rank_fusion

logger = logging.getLogger(__name__)


class HybridSearchEngine:
    """Workspace-scoped semantic + lexical search with rank fusion."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        embedding_client: EmbeddingClient,
        vector_index: VectorIndex,
        recorder: QueryRecorder,
        settings: RetrievalSettings | None = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            session_factory: Factory for read sessions
            embedding_client: Query embedding
            vector_index: Per-workspace vector collections
            recorder: Background query record writer
            settings: Fusion constant and branch timeouts
        """
        self._session_factory = session_factory
        self._embedding_client = embedding_client
        self._vector_index = vector_index
        self._recorder = recorder
        self._settings = settings or RetrievalSettings()

    async def search(
        self,
        workspace_id: str,
        query: str,
        k: int,
        document_ids: Sequence[uuid.UUID] | None = None,
    ) -> list[SearchResult]:
        """
        Search a workspace and record the query.

        Args:
            workspace_id: Workspace to search
            query: Query text
            k: Maximum results
            document_ids: Optional restriction to these documents

        Returns:
            list[SearchResult]: Up to k results, best first

        Raises:
            RetrievalUnavailableError: Both search branches failed
        """
        started = time.perf_counter()
        results = await self.retrieve(workspace_id, query, k, document_ids)
        self._recorder.record(
            workspace_id=workspace_id,
            query_text=query,
            query_type=QueryType.SEARCH,
            result_count=len(results),
            top_chunk_ids=[str(result.chunk_id) for result in results],
            top_document_ids=_unique(str(result.document_id) for result in results),
            response_time_ms=int((time.perf_counter() - started) * 1000),
        )
        return results

    async def retrieve(
        self,
        workspace_id: str,
        query: str,
        k: int,
        document_ids: Sequence[uuid.UUID] | None = None,
    ) -> list[SearchResult]:
        """Search without writing a query record (see search)."""
        if document_ids is not None and not document_ids:
            document_ids = None
        async with self._session_factory() as session:
            candidates = await document_crud.get_processed_ids(
                session, workspace_id, document_ids
            )
        if not candidates or k <= 0:
            logger.info(
                f"{__name__}:retrieve - No searchable documents",
                extra={"workspace_id": workspace_id},
            )
            return []

        semantic, lexical = await asyncio.gather(
            asyncio.wait_for(
                self._semantic_branch(workspace_id, query, 2 * k, candidates),
                timeout=self._settings.semantic_timeout_seconds,
            ),
            asyncio.wait_for(
                self._lexical_branch(query, k, candidates),
                timeout=self._settings.lexical_timeout_seconds,
            ),
            return_exceptions=True,
        )
        for outcome in (semantic, lexical):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome

        semantic_failed = isinstance(semantic, BaseException)
        lexical_failed = isinstance(lexical, BaseException)
        if semantic_failed and lexical_failed:
            logger.error(
                f"{__name__}:retrieve - Both branches failed: "
                f"semantic={type(semantic).__name__}, lexical={type(lexical).__name__}",
                extra={"workspace_id": workspace_id},
            )
            raise RetrievalUnavailableError(
                "Search is temporarily unavailable",
                workspace_id=workspace_id,
                details={
                    "semantic_error": _describe(semantic),
                    "lexical_error": _describe(lexical),
                },
            ) from semantic
        if semantic_failed:
            logger.warning(
                f"{__name__}:retrieve - Semantic branch failed, using lexical results: {_describe(semantic)}",
                extra={"workspace_id": workspace_id},
            )
            semantic = []
        if lexical_failed:
            logger.warning(
                f"{__name__}:retrieve - Lexical branch failed: {_describe(lexical)}",
                extra={"workspace_id": workspace_id},
            )
            lexical = []

        return await self._fuse(semantic, lexical, k, set(candidates))

    async def _semantic_branch(
        self,
        workspace_id: str,
        query: str,
        limit: int,
        candidates: Sequence[uuid.UUID],
    ) -> list[uuid.UUID]:
        vector = await self._embedding_client.embed_query(query)
        collection = self._vector_index.collection_name(workspace_id)
        hits = await self._vector_index.search(
            collection, vector, limit, document_ids=[str(doc_id) for doc_id in candidates]
        )
        chunk_ids = []
        for hit in hits:
            try:
                chunk_ids.append(uuid.UUID(hit.id))
            except ValueError:
                logger.debug(f"{__name__}:_semantic_branch - Ignoring foreign point id {hit.id}")
        return chunk_ids

    async def _lexical_branch(
        self,
        query: str,
        limit: int,
        candidates: Sequence[uuid.UUID],
    ) -> list[uuid.UUID]:
        async with self._session_factory() as session:
            chunks = await chunk_crud.lexical_search(session, candidates, query, limit)
        return [chunk.id for chunk in chunks]

    async def _fuse(
        self,
        semantic: list[uuid.UUID],
        lexical: list[uuid.UUID],
        k: int,
        candidates: set[uuid.UUID],
    ) -> list[SearchResult]:
        async with self._session_factory() as session:
            hydrated = await chunk_crud.get_embedded_with_documents(session, [*semantic, *lexical])

        def live(chunk_id: uuid.UUID) -> bool:
            row = hydrated.get(chunk_id)
            return row is not None and row[0].document_id in candidates

        fused = reciprocal_rank_fusion(
            [chunk_id for chunk_id in semantic if live(chunk_id)],
            [chunk_id for chunk_id in lexical if live(chunk_id)],
            k_rrf=self._settings.rrf_k,
        )

        results = []
        for hit in fused[:k]:
            chunk, document = hydrated[hit.item_id]
            results.append(
                SearchResult(
                    chunk_id=chunk.id,
                    document_id=document.id,
                    document_name=document.name,
                    content=chunk.content,
                    score=hit.score,
                    page_number=chunk.page_number,
                    section_title=chunk.section_title,
                )
            )
        return results


def _describe(error: object) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "timed out"
    return f"{type(error).__name__}: {error}"


def _unique(values) -> list[str]:
    return list(dict.fromkeys(values))
