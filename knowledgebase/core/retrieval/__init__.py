"""Hybrid retrieval and grounded answers."""

from knowledgebase.core.retrieval.answer_assembler import AnswerAssembler, build_context
from knowledgebase.core.retrieval.hybrid_search import HybridSearchEngine
from knowledgebase.core.retrieval.query_recorder import QueryRecorder
from knowledgebase.core.retrieval.rank_fusion import (
    FusedHit,
    RankAccumulator,
    reciprocal_rank_fusion,
)

__all__ = [
    "AnswerAssembler",
    "FusedHit",
    "HybridSearchEngine",
    "QueryRecorder",
    "RankAccumulator",
    "build_context",
    "reciprocal_rank_fusion",
]
