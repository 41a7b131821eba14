"""
Chunk model produced by the chunker.

Dependencies: pydantic
System role: Data contract between chunking and persistence
"""

from pydantic import BaseModel, Field


class TextChunk(BaseModel):
    """
    A bounded span of normalized document text.

    Attributes:
        chunk_index: Dense zero-based position
        content: Stripped text of the span
        start_index: Offset of the span start in the normalized text
        end_index: Offset one past the span end
        page_number: Proportional page estimate (1-based)
        section_title: Nearest preceding heading
        token_count: Rough token estimate, ceil(len / 4)
        content_hash: sha256 hex digest of content
    """

    chunk_index: int = Field(ge=0)
    content: str
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)
    page_number: int | None = None
    section_title: str | None = None
    token_count: int = 0
    content_hash: str = ""
