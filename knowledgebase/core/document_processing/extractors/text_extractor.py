"""
Plain text extraction (TXT, MD, CSV).

Dependencies: None
System role: Text file extractor
"""

from ..models import ExtractedDocument
from .base import ContentExtractor, count_words


class PlainTextExtractor(ContentExtractor):
    """Decode UTF-8 text, replacing undecodable bytes."""

    def __init__(self, file_type: str = "TXT") -> None:
        self.file_type = file_type

    def extract(self, data: bytes) -> ExtractedDocument:
        text = data.decode("utf-8-sig", errors="replace")
        return ExtractedDocument(text=text, word_count=count_words(text))
