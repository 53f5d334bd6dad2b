"""Data models used by the document processing pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from .format_detection import FileType


class SegmentKind(str, Enum):
    PARAGRAPH = "paragraph"
    SLIDE_BLOCK = "slide_block"


@dataclass(slots=True, frozen=True)
class SourceDocument:
    """Raw upload handed to the pipeline by the caller."""

    data: bytes
    filename: str


@dataclass(slots=True, frozen=True)
class TextSegment:
    """One paragraph, text line or slide worth of extracted text."""

    text: str
    kind: SegmentKind
    ordinal: int


@dataclass(slots=True)
class ArchiveParts:
    """Named parts pulled out of a document container.

    ``order`` lists the keys of ``parts`` in the order the extractor has to
    visit them. Plain text documents carry the whole buffer under ``"text"``.
    """

    file_type: FileType
    parts: Dict[str, bytes] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    def iter_parts(self):
        for name in self.order:
            yield name, self.parts[name]


@dataclass(slots=True)
class ExtractedText:
    file_type: FileType
    segments: List[TextSegment] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_content(self) -> bool:
        return any(segment.text for segment in self.segments)


@dataclass(slots=True)
class NormalizedText:
    """Normalised document text plus the start offset of every segment."""

    full_text: str
    segment_boundaries: List[int] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class Chunk:
    index: int
    text: str
    start_offset: int
    end_offset: int


@dataclass(slots=True)
class ProcessingResult:
    """Outcome of a successful :func:`meetprep.ingest.process` call."""

    file_type: FileType
    full_text: str
    chunks: List[Chunk]
    warnings: List[str] = field(default_factory=list)
