"""
Search and question domain models.

Request/response schemas for hybrid search and grounded answers. Field
names serialize in camelCase for the outer REST shell; Python code uses
snake_case.

Dependencies: pydantic
System role: Retrieval API contracts
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _empty_filter_to_none(value: list[uuid.UUID] | None) -> list[uuid.UUID] | None:
    # an empty id list means "no filter", not "match nothing"
    return value or None


class SearchRequest(_CamelModel):
    """Request schema for hybrid search."""

    query: str = Field(min_length=1, description="Search text")
    limit: int = Field(default=10, ge=1, le=100, description="Maximum results")
    document_ids: list[uuid.UUID] | None = Field(
        default=None,
        description="Restrict the search to these documents",
    )

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value

    @field_validator("document_ids")
    @classmethod
    def _document_ids_optional(cls, value: list[uuid.UUID] | None) -> list[uuid.UUID] | None:
        return _empty_filter_to_none(value)


class SearchResult(_CamelModel):
    """One fused search hit."""

    chunk_id: uuid.UUID
    document_id: uuid.UUID
    document_name: str
    content: str
    score: float = Field(description="Reciprocal rank fusion score")
    page_number: int | None = None
    section_title: str | None = None


class SearchResponse(_CamelModel):
    """Response schema for hybrid search."""

    results: list[SearchResult] = Field(default_factory=list)
    total: int = 0
    query: str


class QuestionRequest(_CamelModel):
    """Request schema for a grounded question."""

    question: str = Field(min_length=1, description="Question text")
    limit: int = Field(default=5, ge=1, le=50, description="Sources to retrieve")
    document_ids: list[uuid.UUID] | None = None
    model: str | None = Field(default=None, description="Generation model override")

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question must not be blank")
        return value

    @field_validator("document_ids")
    @classmethod
    def _document_ids_optional(cls, value: list[uuid.UUID] | None) -> list[uuid.UUID] | None:
        return _empty_filter_to_none(value)


class AnswerSource(_CamelModel):
    """Source passed to the generation provider for an answer."""

    chunk_id: uuid.UUID
    document_id: uuid.UUID
    document_name: str
    content: str
    page_number: int | None = None


class AnswerMetadata(_CamelModel):
    """Cost accounting data of an answer."""

    model: str
    tokens_used: int = 0
    response_time: int = Field(default=0, description="Milliseconds")


class AnswerResponse(_CamelModel):
    """Response schema for a grounded question."""

    answer: str
    sources: list[AnswerSource] = Field(default_factory=list)
    query: str
    metadata: AnswerMetadata
