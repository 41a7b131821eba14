"""File-format extractors and their registry."""

from .base import ContentExtractor
from .docx_extractor import DocxExtractor
from .pdf_extractor import PdfExtractor
from .registry import ExtractorRegistry, default_registry
from .text_extractor import PlainTextExtractor
from .xlsx_extractor import XlsxExtractor

__all__ = [
    "ContentExtractor",
    "DocxExtractor",
    "ExtractorRegistry",
    "PdfExtractor",
    "PlainTextExtractor",
    "XlsxExtractor",
    "default_registry",
]
