"""
Whitespace canonicalization for page text and OCR output.
"""

import re

from .config import MIN_SEGMENT_LENGTH

_COLON = re.compile(r"\s*:\s*")
_WHITESPACE = re.compile(r"\s+")

# Pasted text holding several invoices is cut at these phrases
_SEGMENT_BOUNDARY = re.compile(
    r"\s(?:Tax\s*Invoice|Invoice\s*Amount\s*Summary)\s",
    re.IGNORECASE,
)


def normalize_text(text: str) -> str:
    """
    Canonicalize whitespace so label patterns match regardless of source noise.

    "Invoice No:ABC", "Invoice No :  ABC" and "Invoice No\\n: ABC" all become
    "Invoice No : ABC". Idempotent.
    """
    if not text:
        return ""

    text = text.replace("\u00a0", " ")
    text = _COLON.sub(" : ", text)
    return _WHITESPACE.sub(" ", text).strip()


def split_segments(text: str) -> list[str]:
    """Normalize pasted text and split it into per-invoice chunks."""
    normalized = normalize_text(text)
    return [
        segment
        for segment in _SEGMENT_BOUNDARY.split(normalized)
        if len(segment) >= MIN_SEGMENT_LENGTH
    ]
