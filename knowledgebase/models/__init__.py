"""Domain models and API schemas."""

from knowledgebase.models.search import (
    AnswerMetadata,
    AnswerResponse,
    AnswerSource,
    QuestionRequest,
    SearchRequest,
    SearchResponse,
    SearchResult,
)

__all__ = [
    "AnswerMetadata",
    "AnswerResponse",
    "AnswerSource",
    "QuestionRequest",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
]
