"""
Extraction result model.

Dependencies: pydantic
System role: Data contract between extractors and the pipeline
"""

from typing import Any

from pydantic import BaseModel, Field


class ExtractedDocument(BaseModel):
    """
    Plain text plus structural metadata pulled out of a raw file.

    Attributes:
        text: Extracted text (normalized by the pipeline afterwards)
        page_count: Pages (PDF) or sheets (XLSX), None when not applicable
        word_count: Whitespace-separated word count
        title: Document title from file metadata
        author: Document author from file metadata
        metadata: Extractor-specific extras (sheet names, subject, ...)
    """

    text: str
    page_count: int | None = None
    word_count: int = 0
    title: str | None = None
    author: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
