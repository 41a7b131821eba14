"""
Grounded answer assembly.

Retrieves the top sources for a question, packs them into a labeled
context block and issues a single generation call constrained to that
context. With no sources the fixed fallback answer is returned and the
generation provider is not called.

Context budget: sources are added best-first while the block fits
max_context_chars, so the lowest-scored sources are dropped first. The top
source is always sent, cut to the budget if it alone exceeds it.

Dependencies: knowledgebase.boundary.providers, hybrid_search, prompts
System role: Q&A business logic
"""

import logging
import time
import uuid
from typing import Sequence

from knowledgebase.boundary.db.models.query_model import QueryType
from knowledgebase.boundary.providers.generation_client import GenerationClient
from knowledgebase.configs.retrieval import RetrievalSettings
from knowledgebase.models.search import (
    AnswerMetadata,
    AnswerResponse,
    AnswerSource,
    SearchResult,
)

from .hybrid_search import HybridSearchEngine
from .prompts import FALLBACK_ANSWER, SYSTEM_PROMPT, build_user_prompt, format_source_label
from .query_recorder import QueryRecorder

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n"


def build_context(
    results: Sequence[SearchResult],
    max_chars: int,
) -> tuple[str, list[SearchResult]]:
    """
    Pack results into a labeled context block within a character budget.

    Args:
        results: Sources, best first
        max_chars: Budget for the joined block

    Returns:
        tuple: (context text, sources actually included)
    """
    blocks: list[str] = []
    used: list[SearchResult] = []
    total = 0

    for result in results:
        label = format_source_label(len(used) + 1, result.document_name, result.page_number)
        block = f"{label}\n{result.content}"
        extra = len(block) + (len(BLOCK_SEPARATOR) if blocks else 0)

        if not blocks and extra > max_chars:
            room = max(0, max_chars - len(label) - 1)
            block = f"{label}\n{result.content[:room]}"
            used.append(result.model_copy(update={"content": result.content[:room]}))
            blocks.append(block)
            break
        if total + extra > max_chars:
            break

        blocks.append(block)
        used.append(result)
        total += extra

    return BLOCK_SEPARATOR.join(blocks), used


class AnswerAssembler:
    """Answer questions from retrieved workspace content."""

    def __init__(
        self,
        search_engine: HybridSearchEngine,
        generation_client: GenerationClient,
        recorder: QueryRecorder,
        settings: RetrievalSettings | None = None,
    ) -> None:
        """
        Initialize assembler.

        Args:
            search_engine: Hybrid retrieval
            generation_client: Chat model access
            recorder: Background query record writer
            settings: Default limit and context budget
        """
        self._search_engine = search_engine
        self._generation_client = generation_client
        self._recorder = recorder
        self._settings = settings or RetrievalSettings()

    async def answer(
        self,
        workspace_id: str,
        question: str,
        k: int | None = None,
        document_ids: Sequence[uuid.UUID] | None = None,
        model: str | None = None,
    ) -> AnswerResponse:
        """
        Answer a question grounded in workspace sources.

        Args:
            workspace_id: Workspace to search
            question: Question text
            k: Sources to retrieve (default from settings)
            document_ids: Optional restriction to these documents
            model: Generation model override

        Returns:
            AnswerResponse: Answer, sources sent to the model, metadata

        Raises:
            RetrievalUnavailableError: Both search branches failed
            GenerationProviderError: The generation call failed
        """
        started = time.perf_counter()
        k = k or self._settings.default_question_limit
        model_name = model or self._generation_client.default_model

        results = await self._search_engine.retrieve(workspace_id, question, k, document_ids)

        if not results:
            logger.info(
                f"{__name__}:answer - No sources found, returning fallback answer",
                extra={"workspace_id": workspace_id},
            )
            answer_text, used, tokens_used = FALLBACK_ANSWER, [], 0
        else:
            context, used = build_context(results, self._settings.max_context_chars)
            if len(used) < len(results):
                logger.info(
                    f"{__name__}:answer - Context budget kept {len(used)} of {len(results)} sources",
                    extra={"workspace_id": workspace_id},
                )
            generation = await self._generation_client.generate(
                SYSTEM_PROMPT,
                build_user_prompt(context, question),
                model=model_name,
            )
            answer_text, tokens_used = generation.text, generation.tokens_used
            model_name = generation.model

        response_time_ms = int((time.perf_counter() - started) * 1000)
        self._recorder.record(
            workspace_id=workspace_id,
            query_text=question,
            query_type=QueryType.QUESTION,
            result_count=len(used),
            top_chunk_ids=[str(source.chunk_id) for source in used],
            top_document_ids=list(dict.fromkeys(str(source.document_id) for source in used)),
            answer=answer_text,
            model_used=model_name,
            tokens_used=tokens_used,
            response_time_ms=response_time_ms,
        )

        return AnswerResponse(
            answer=answer_text,
            sources=[
                AnswerSource(
                    chunk_id=source.chunk_id,
                    document_id=source.document_id,
                    document_name=source.document_name,
                    content=source.content,
                    page_number=source.page_number,
                )
                for source in used
            ],
            query=question,
            metadata=AnswerMetadata(
                model=model_name,
                tokens_used=tokens_used,
                response_time=response_time_ms,
            ),
        )
