"""
Recursive-separator text chunking.

Splits normalized text into overlapping windows of at most max_chunk_size
characters, preferring paragraph, line, sentence and word boundaries over
hard cuts.

Dependencies: hashlib, re
System role: Chunking stage of document ingestion pipeline
"""

import bisect
import hashlib
import math
import re

from ..models import TextChunk

DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", " ", ""]

_HEADING_LINE = re.compile(r"^(#{1,6} .+|Sheet: .+)$", re.MULTILINE)


class ChunkingTask:
    """Split text into overlapping, bounded chunks with stable indices."""

    def __init__(
        self,
        max_chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: list[str] | None = None,
    ) -> None:
        """
        Initialize chunking task.

        Args:
            max_chunk_size: Maximum characters per chunk
            chunk_overlap: Characters shared by consecutive chunks
            separators: Preferred split points, strongest first ('' = hard cut)

        Raises:
            ValueError: Size is not positive, overlap negative, or overlap >= size
        """
        if max_chunk_size <= 0:
            raise ValueError("max_chunk_size must be positive")
        if chunk_overlap < 0:
            raise ValueError("chunk_overlap cannot be negative")
        if chunk_overlap >= max_chunk_size:
            raise ValueError("chunk_overlap must be smaller than max_chunk_size")

        self._max_chunk_size = max_chunk_size
        self._chunk_overlap = chunk_overlap
        self._separators = list(separators) if separators is not None else list(DEFAULT_SEPARATORS)

    def split_spans(self, text: str) -> list[tuple[int, int]]:
        """
        Compute raw [start, end) windows over the text.

        Consecutive windows overlap by chunk_overlap characters unless the
        overlap would not move the cursor forward.

        Args:
            text: Normalized text

        Returns:
            list of (start, end) offsets
        """
        length = len(text)
        spans: list[tuple[int, int]] = []
        start = 0
        while start < length:
            end = min(start + self._max_chunk_size, length)
            if end < length:
                end = self._find_split(text, start, end)
            spans.append((start, end))
            if end >= length:
                break
            next_start = end - self._chunk_overlap
            start = next_start if next_start > start else end
        return spans

    def _find_split(self, text: str, start: int, end: int) -> int:
        window = text[start:end]
        min_offset = self._max_chunk_size * 0.5
        for separator in self._separators:
            if not separator:
                break
            offset = window.rfind(separator)
            if offset >= min_offset:
                return start + offset + len(separator)
        return end

    def chunk(self, text: str, page_count: int | None = None) -> list[TextChunk]:
        """
        Split text into chunk models.

        Whitespace-only windows are dropped and indices stay dense.
        Offsets point at the stripped content, so text[start:end] == content.

        Args:
            text: Normalized text
            page_count: Page count used for the proportional page estimate

        Returns:
            list[TextChunk]: Chunks ordered by chunk_index from 0
        """
        if not text:
            return []

        headings = [(m.start(), m.group(0)) for m in _HEADING_LINE.finditer(text)]
        heading_offsets = [offset for offset, _ in headings]

        chunks: list[TextChunk] = []
        for raw_start, raw_end in self.split_spans(text):
            span = text[raw_start:raw_end]
            content = span.strip()
            if not content:
                continue
            start = raw_start + (len(span) - len(span.lstrip()))
            end = start + len(content)
            chunks.append(
                TextChunk(
                    chunk_index=len(chunks),
                    content=content,
                    start_index=start,
                    end_index=end,
                    page_number=estimate_page_number(start, len(text), page_count),
                    section_title=_section_title(headings, heading_offsets, start, end),
                    token_count=math.ceil(len(content) / 4),
                    content_hash=hashlib.sha256(content.encode("utf-8")).hexdigest(),
                )
            )
        return chunks


def estimate_page_number(start: int, text_length: int, page_count: int | None) -> int | None:
    """
    Best-effort page of a character offset, assuming evenly filled pages.

    Args:
        start: Character offset
        text_length: Total text length
        page_count: Page count of the source, if known

    Returns:
        1-based page number, or None without a page count
    """
    if not page_count or page_count <= 0 or text_length <= 0:
        return None
    return min(page_count, start * page_count // text_length + 1)


def _section_title(
    headings: list[tuple[int, str]],
    offsets: list[int],
    start: int,
    end: int,
) -> str | None:
    if not headings:
        return None
    position = bisect.bisect_right(offsets, start) - 1
    if position < 0:
        # no heading before the chunk; use one opening inside it
        if offsets[0] >= end:
            return None
        position = 0
    return headings[position][1].lstrip("#").strip()[:512] or None
