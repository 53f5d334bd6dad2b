"""Chunking utilities for breaking normalised text into context-sized units."""
from __future__ import annotations

import logging
import re
from bisect import bisect_right
from typing import List

from .config import ProcessingConfig
from .models import Chunk, NormalizedText

LOGGER = logging.getLogger(__name__)

_SENTENCE_END_RE = re.compile(r"[.!?…]+[\"'”’)\]]*(?=\s)")


class BoundaryAwareChunker:
    """Split text into bounded, overlapping chunks cut at natural breaks.

    Each chunk ends at the furthest acceptable cut within ``max_chunk_chars``
    of its start, preferring a segment boundary, then the end of a sentence,
    then whitespace, and only then a hard cut at the limit. A cut must leave
    the next chunk starting after the current one, which is why cuts inside
    the first ``overlap_chars`` characters are never taken.
    """

    def __init__(self, config: ProcessingConfig) -> None:
        self.config = config

    def chunk(self, normalized: NormalizedText) -> List[Chunk]:
        text = normalized.full_text
        if not text:
            return [Chunk(index=0, text="", start_offset=0, end_offset=0)]

        boundaries = sorted(set(normalized.segment_boundaries))
        overlap_chars = self.config.overlap_chars
        text_length = len(text)
        chunks: List[Chunk] = []
        start = 0
        while True:
            end = self._find_chunk_end(text, boundaries, start)
            chunks.append(Chunk(index=len(chunks), text=text[start:end], start_offset=start, end_offset=end))
            LOGGER.debug("Chunk %s offsets %s-%s", len(chunks) - 1, start, end)
            if end >= text_length:
                break
            start = max(0, end - overlap_chars)
        return chunks

    def _find_chunk_end(self, text: str, boundaries: List[int], start: int) -> int:
        limit = start + self.config.max_chunk_chars
        if limit >= len(text):
            return len(text)
        floor = start + self.config.overlap_chars

        index = bisect_right(boundaries, limit)
        if index and boundaries[index - 1] > floor:
            return boundaries[index - 1]

        sentence_break = self._find_sentence_break(text, floor, limit)
        if sentence_break is not None:
            return sentence_break

        for position in range(limit, floor, -1):
            if text[position].isspace() or text[position - 1].isspace():
                return position

        return limit

    @staticmethod
    def _find_sentence_break(text: str, floor: int, limit: int) -> int | None:
        # endpos reaches one past the limit so the whitespace lookahead can see text[limit].
        matches = list(_SENTENCE_END_RE.finditer(text, floor, limit + 1))
        if not matches:
            return None
        return matches[-1].end()


def chunk(normalized: NormalizedText, config: ProcessingConfig) -> List[Chunk]:
    """Split ``normalized`` into chunks according to ``config``."""

    return BoundaryAwareChunker(config).chunk(normalized)
