"""Text normalisation utilities."""
from __future__ import annotations

import re
import unicodedata
from typing import List

from .models import ExtractedText, NormalizedText

SEGMENT_SEPARATOR = "\n\n"

_HORIZONTAL_WHITESPACE_RE = re.compile(r"[^\S\n]+")
_TRAILING_SPACE_RE = re.compile(r" +\n")
_MULTIPLE_NEWLINES_RE = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Normalise whitespace, line endings and Unicode representation."""

    normalized = unicodedata.normalize("NFC", text)
    normalized = normalized.replace("\r\n", "\n").replace("\r", "\n")
    normalized = "".join(
        char for char in normalized if char in "\n\t" or unicodedata.category(char) != "Cc"
    )
    normalized = _HORIZONTAL_WHITESPACE_RE.sub(" ", normalized)
    normalized = _TRAILING_SPACE_RE.sub("\n", normalized)
    normalized = _MULTIPLE_NEWLINES_RE.sub("\n\n", normalized)
    return normalized.rstrip().lstrip("\n")


def normalize(extracted: ExtractedText) -> NormalizedText:
    """Normalise every segment and join them with a blank line.

    The returned boundaries hold one start offset per input segment. Segments
    that normalise to nothing add no separator and point at the offset where
    the next content starts (or the end of the text).
    """

    pieces: List[str] = []
    boundaries: List[int] = []
    pending: List[int] = []
    offset = 0
    for segment in extracted.segments:
        text = normalize_text(segment.text)
        if not text:
            pending.append(len(boundaries))
            boundaries.append(offset)
            continue
        if pieces:
            offset += len(SEGMENT_SEPARATOR)
        for position in pending:
            boundaries[position] = offset
        pending.clear()
        boundaries.append(offset)
        pieces.append(text)
        offset += len(text)

    full_text = SEGMENT_SEPARATOR.join(pieces)
    for position in pending:
        boundaries[position] = len(full_text)
    return NormalizedText(full_text=full_text, segment_boundaries=boundaries)
