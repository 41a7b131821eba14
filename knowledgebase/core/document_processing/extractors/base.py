"""
Extractor interface.

Dependencies: knowledgebase.core.document_processing.models
System role: Contract every file-format extractor implements
"""

from abc import ABC, abstractmethod

from ..models import ExtractedDocument


class ContentExtractor(ABC):
    """Turn raw file bytes into text plus structural metadata."""

    #: Label used in error details and logs
    file_type: str = ""

    @abstractmethod
    def extract(self, data: bytes) -> ExtractedDocument:
        """
        Extract text from raw bytes.

        Args:
            data: Raw file content

        Returns:
            ExtractedDocument: Text and metadata

        Raises:
            ExtractionError: When the file cannot be parsed
        """


def count_words(text: str) -> int:
    """Whitespace-separated word count."""
    return len(text.split())
