"""
Retrieval service orchestrator.

Validated request in, response model out. Each call runs under its own
correlation id so search and answer logs can be traced end to end.

Dependencies: knowledgebase.core.retrieval, knowledgebase.models
System role: Search and Q&A use case orchestration
"""

from knowledgebase.core.retrieval.answer_assembler import AnswerAssembler
from knowledgebase.core.retrieval.hybrid_search import HybridSearchEngine
from knowledgebase.models.search import (
    AnswerResponse,
    QuestionRequest,
    SearchRequest,
    SearchResponse,
)
from knowledgebase.observability.correlation import clear_correlation_id, set_correlation_id


class RetrievalService:
    """Search and question orchestrator."""

    def __init__(self, search_engine: HybridSearchEngine, assembler: AnswerAssembler) -> None:
        """
        Initialize retrieval service.

        Args:
            search_engine: Hybrid retrieval engine
            assembler: Grounded answer assembler
        """
        self._search_engine = search_engine
        self._assembler = assembler

    async def search(
        self,
        workspace_id: str,
        request: SearchRequest,
        correlation_id: str | None = None,
    ) -> SearchResponse:
        """
        Run a hybrid search.

        Args:
            workspace_id: Workspace to search
            request: Query, limit and optional document filter
            correlation_id: Caller's request id (generated if None)

        Returns:
            SearchResponse: Fused results; empty when nothing is searchable

        Raises:
            RetrievalUnavailableError: Both search branches failed
        """
        set_correlation_id(correlation_id)
        try:
            results = await self._search_engine.search(
                workspace_id,
                request.query,
                request.limit,
                request.document_ids,
            )
        finally:
            clear_correlation_id()
        return SearchResponse(results=results, total=len(results), query=request.query)

    async def ask(
        self,
        workspace_id: str,
        request: QuestionRequest,
        correlation_id: str | None = None,
    ) -> AnswerResponse:
        """
        Answer a question from workspace sources.

        Args:
            workspace_id: Workspace to search
            request: Question, limit, document filter and model override
            correlation_id: Caller's request id (generated if None)

        Returns:
            AnswerResponse: Answer text, sources and metadata

        Raises:
            RetrievalUnavailableError: Both search branches failed
            GenerationProviderError: Generation call failed
        """
        set_correlation_id(correlation_id)
        try:
            return await self._assembler.answer(
                workspace_id,
                request.question,
                k=request.limit,
                document_ids=request.document_ids,
                model=request.model,
            )
        finally:
            clear_correlation_id()
