"""
Extractor registry keyed by declared document type.

Legacy binary formats (DOC, XLS, PPT, PPTX) and OTHER have no extractor;
asking for one raises UnsupportedDocumentTypeError, which is never retried.

Dependencies: knowledgebase.core.document_processing.extractors
System role: Extractor lookup for the ingestion pipeline
"""

from knowledgebase.boundary.db.models.document_model import DocumentType
from knowledgebase.core.exceptions import UnsupportedDocumentTypeError

from .base import ContentExtractor
from .docx_extractor import DocxExtractor
from .pdf_extractor import PdfExtractor
from .text_extractor import PlainTextExtractor
from .xlsx_extractor import XlsxExtractor


class ExtractorRegistry:
    """Map document types to extractors."""

    def __init__(self, extractors: dict[DocumentType, ContentExtractor] | None = None) -> None:
        self._extractors: dict[DocumentType, ContentExtractor] = dict(extractors or {})

    def register(self, document_type: DocumentType, extractor: ContentExtractor) -> None:
        """Register or replace the extractor for a type."""
        self._extractors[document_type] = extractor

    def supports(self, document_type: DocumentType) -> bool:
        return document_type in self._extractors

    def get(self, document_type: DocumentType, document_id: str | None = None) -> ContentExtractor:
        """
        Look up the extractor for a declared type.

        Args:
            document_type: Declared type
            document_id: Document id for error context

        Returns:
            ContentExtractor: Registered extractor

        Raises:
            UnsupportedDocumentTypeError: No extractor registered
        """
        extractor = self._extractors.get(document_type)
        if extractor is None:
            raise UnsupportedDocumentTypeError(
                getattr(document_type, "value", str(document_type)),
                document_id=document_id,
            )
        return extractor


def default_registry() -> ExtractorRegistry:
    """Registry with every built-in extractor."""
    return ExtractorRegistry(
        {
            DocumentType.PDF: PdfExtractor(),
            DocumentType.DOCX: DocxExtractor(),
            DocumentType.XLSX: XlsxExtractor(),
            DocumentType.TXT: PlainTextExtractor("TXT"),
            DocumentType.MD: PlainTextExtractor("MD"),
            DocumentType.CSV: PlainTextExtractor("CSV"),
        }
    )
