"""
PDF text extraction using pypdf.

Dependencies: pypdf
System role: PDF extractor
"""

import io
import logging

from pypdf import PdfReader

from knowledgebase.core.exceptions import ExtractionError

from ..models import ExtractedDocument
from .base import ContentExtractor, count_words

logger = logging.getLogger(__name__)


class PdfExtractor(ContentExtractor):
    """Extract page text and document info from PDF files."""

    file_type = "PDF"

    def extract(self, data: bytes) -> ExtractedDocument:
        try:
            reader = PdfReader(io.BytesIO(data))
            if reader.is_encrypted:
                reader.decrypt("")
            pages = [page.extract_text() or "" for page in reader.pages]
            info = reader.metadata
        except Exception as e:
            raise ExtractionError(
                f"Failed to parse PDF: {e}",
                file_type=self.file_type,
            ) from e

        text = "\n\n".join(pages)
        title = author = subject = None
        if info is not None:
            title = info.title or None
            author = info.author or None
            subject = info.subject or None

        logger.debug(f"{__name__}:extract - Parsed {len(pages)} pages")
        return ExtractedDocument(
            text=text,
            page_count=len(pages),
            word_count=count_words(text),
            title=title,
            author=author,
            metadata={"subject": subject} if subject else {},
        )
