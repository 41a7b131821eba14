"""
DOCX text extraction using python-docx.

Heading paragraphs are emitted as markdown-style '#' lines so the chunker
can attach section titles; tables follow the body as tab-separated rows.

Dependencies: python-docx
System role: Word document extractor
"""

import io
import re

from docx import Document

from knowledgebase.core.exceptions import ExtractionError

from ..models import ExtractedDocument
from .base import ContentExtractor, count_words

_HEADING_LEVEL = re.compile(r"^Heading (\d)")


def _heading_prefix(style_name: str) -> str:
    if style_name == "Title":
        return "# "
    match = _HEADING_LEVEL.match(style_name)
    if match:
        return "#" * min(int(match.group(1)), 6) + " "
    return ""


class DocxExtractor(ContentExtractor):
    """Extract paragraphs, headings and tables from DOCX files."""

    file_type = "DOCX"

    def extract(self, data: bytes) -> ExtractedDocument:
        try:
            document = Document(io.BytesIO(data))
            blocks: list[str] = []
            for paragraph in document.paragraphs:
                text = paragraph.text.strip()
                if not text:
                    continue
                style_name = paragraph.style.name if paragraph.style is not None else ""
                blocks.append(_heading_prefix(style_name) + text)

            for table in document.tables:
                rows = ["\t".join(cell.text.strip() for cell in row.cells) for row in table.rows]
                rows = [row for row in rows if row.strip()]
                if rows:
                    blocks.append("\n".join(rows))

            properties = document.core_properties
        except Exception as e:
            raise ExtractionError(
                f"Failed to parse DOCX: {e}",
                file_type=self.file_type,
            ) from e

        text = "\n\n".join(blocks)
        return ExtractedDocument(
            text=text,
            word_count=count_words(text),
            title=properties.title or None,
            author=properties.author or None,
            metadata={"table_count": len(document.tables)},
        )
