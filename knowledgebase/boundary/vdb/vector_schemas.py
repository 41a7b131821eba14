"""
Vector index schemas.

Dependencies: pydantic
System role: Data contracts for vector index operations
"""

from typing import Any

from pydantic import BaseModel, Field


class VectorPoint(BaseModel):
    """
    One vector written to a collection.

    Attributes:
        id: Point id (the chunk id)
        vector: Embedding values
        payload: document_id, workspace_id, chunk_index, content_preview, page_number
    """

    id: str
    vector: list[float]
    payload: dict[str, Any] = Field(default_factory=dict)


class VectorHit(BaseModel):
    """
    One search match, higher score is more similar.

    Attributes:
        id: Point id
        score: Similarity score
        payload: Stored payload (may be empty)
    """

    id: str
    score: float
    payload: dict[str, Any] = Field(default_factory=dict)
