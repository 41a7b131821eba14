"""
Text normalization applied between extraction and chunking.

Dependencies: re
System role: Makes chunk offsets independent of platform line endings
"""

import re

_BLANK_LINE_RUN = re.compile(r"\n{3,}")
_INLINE_SPACE_RUN = re.compile(r"[ \t]+")


def normalize_text(text: str) -> str:
    """
    Normalize extracted text.

    Unifies line endings, caps blank-line runs at one blank line, collapses
    runs of spaces/tabs to a single space and trims the result.

    Args:
        text: Raw extracted text

    Returns:
        str: Normalized text
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _BLANK_LINE_RUN.sub("\n\n", text)
    text = _INLINE_SPACE_RUN.sub(" ", text)
    return text.strip()
