"""
XLSX text extraction using openpyxl.

Every sheet becomes a 'Sheet: <name>' header followed by tab-separated rows.

Dependencies: openpyxl
System role: Spreadsheet extractor
"""

import io

from openpyxl import load_workbook

from knowledgebase.core.exceptions import ExtractionError

from ..models import ExtractedDocument
from .base import ContentExtractor, count_words


class XlsxExtractor(ContentExtractor):
    """Extract cell values from every worksheet of an XLSX workbook."""

    file_type = "XLSX"

    def extract(self, data: bytes) -> ExtractedDocument:
        sheets: list[str] = []
        sheet_names: list[str] = []
        total_cells = 0
        try:
            workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
            try:
                for worksheet in workbook.worksheets:
                    sheet_names.append(worksheet.title)
                    lines = []
                    for row in worksheet.iter_rows(values_only=True):
                        values = ["" if value is None else str(value) for value in row]
                        filled = sum(1 for value in values if value)
                        if not filled:
                            continue
                        total_cells += filled
                        lines.append("\t".join(values).rstrip("\t"))
                    sheets.append(f"Sheet: {worksheet.title}\n" + "\n".join(lines))
            finally:
                workbook.close()
        except Exception as e:
            raise ExtractionError(
                f"Failed to parse XLSX: {e}",
                file_type=self.file_type,
            ) from e

        text = "\n\n".join(sheets)
        return ExtractedDocument(
            text=text,
            page_count=len(sheet_names),
            word_count=count_words(text),
            metadata={
                "sheet_count": len(sheet_names),
                "sheet_names": sheet_names,
                "total_cells": total_cells,
            },
        )
