"""Extractors for supported document types."""
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import Dict, List

from docx.oxml import parse_xml
from docx.oxml.ns import qn
from lxml import etree

from .containers import PLAIN_TEXT_PART, slide_number
from .errors import CorruptArchiveError, EmptyDocumentError, UnsupportedFileTypeError
from .format_detection import FileType
from .models import ArchiveParts, ExtractedText, SegmentKind, TextSegment

LOGGER = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class PlainTextExtractor:
    """Decode plain text, one segment per line."""

    def extract(self, parts: ArchiveParts) -> ExtractedText:
        data = parts.parts[PLAIN_TEXT_PART]
        warnings: List[str] = []
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as error:
            LOGGER.warning("Text is not valid UTF-8 (%s); decoding as Latin-1", error)
            warnings.append(f"Text is not valid UTF-8 at byte {error.start}; decoded as Latin-1")
            text = data.decode("latin-1")

        segments = [
            TextSegment(text=line, kind=SegmentKind.PARAGRAPH, ordinal=ordinal)
            for ordinal, line in enumerate(_LINE_BREAK_RE.split(text))
        ]
        return ExtractedText(file_type=FileType.PLAIN_TEXT, segments=segments, warnings=warnings)


_W_P = qn("w:p")
_W_R = qn("w:r")
_W_T = qn("w:t")
_W_BREAKS = frozenset({qn("w:tab"), qn("w:br"), qn("w:cr")})
# Text boxes are stored twice; the VML fallback copy is ignored.
_MC_FALLBACK = "{http://schemas.openxmlformats.org/markup-compatibility/2006}Fallback"


class DocxExtractor:
    """Extract paragraphs from the body part of a Word document."""

    def extract(self, parts: ArchiveParts) -> ExtractedText:
        name = parts.order[0]
        try:
            root = parse_xml(parts.parts[name])
        except etree.XMLSyntaxError as error:
            raise CorruptArchiveError(f"Document body {name!r} is not well-formed XML", cause=error) from error

        segments: List[TextSegment] = []
        warnings: List[str] = []
        for ordinal, paragraph in enumerate(root.iter(_W_P)):
            if next(paragraph.iterancestors(_MC_FALLBACK), None) is not None:
                continue
            try:
                text = self._paragraph_text(paragraph)
            except ValueError as error:
                LOGGER.warning("Skipping unreadable paragraph %s: %s", ordinal, error)
                warnings.append(f"Skipped paragraph {ordinal}: {error}")
                continue
            segments.append(TextSegment(text=text, kind=SegmentKind.PARAGRAPH, ordinal=ordinal))
        return ExtractedText(file_type=FileType.WORD_DOCUMENT, segments=segments, warnings=warnings)

    @staticmethod
    def _paragraph_text(paragraph) -> str:
        pieces: List[str] = []
        for node in paragraph.iter(_W_T, *_W_BREAKS):
            # Only run content counts; w:tab also defines tab stops in w:pPr.
            if node.getparent().tag != _W_R:
                continue
            # Paragraphs nested in text boxes are visited on their own.
            if _owning_paragraph(node) is not paragraph:
                continue
            if node.tag != _W_T:
                pieces.append(" ")
                continue
            if len(node):
                raise ValueError(f"unexpected markup inside text run: {node[0].tag}")
            pieces.append(node.text or "")
        return "".join(pieces)


def _owning_paragraph(node):
    parent = node.getparent()
    while parent is not None and parent.tag != _W_P:
        parent = parent.getparent()
    return parent


_P_NS = "{http://schemas.openxmlformats.org/presentationml/2006/main}"
_A_NS = "{http://schemas.openxmlformats.org/drawingml/2006/main}"
# Record separator cannot occur in XML 1.0 text, so it never collides with content.
_SHAPE_SEPARATOR = "\x1e"
_SEPARATOR_RUN_RE = re.compile(f"{_SHAPE_SEPARATOR}+")


class PptxExtractor:
    """Extract one text block per slide from slide parts in slide order."""

    def extract(self, parts: ArchiveParts) -> ExtractedText:
        segments: List[TextSegment] = []
        warnings: List[str] = []
        for name, payload in parts.iter_parts():
            number = slide_number(name)
            try:
                root = ET.fromstring(payload)
            except ET.ParseError as error:
                LOGGER.warning("Skipping unreadable slide %s (%s): %s", number, name, error)
                warnings.append(f"Skipped slide {number}: {error}")
                continue
            segments.append(
                TextSegment(text=self._slide_text(root), kind=SegmentKind.SLIDE_BLOCK, ordinal=number)
            )
        return ExtractedText(file_type=FileType.SLIDE_DECK, segments=segments, warnings=warnings)

    def _slide_text(self, root: ET.Element) -> str:
        shape_texts = []
        for shape in root.iter(f"{_P_NS}sp"):
            body = shape.find(f"{_P_NS}txBody")
            if body is None:
                continue
            shape_texts.append(self._shape_text(body))
        joined = _SEPARATOR_RUN_RE.sub(_SHAPE_SEPARATOR, _SHAPE_SEPARATOR.join(shape_texts))
        return joined.strip(_SHAPE_SEPARATOR).replace(_SHAPE_SEPARATOR, "\n")

    @staticmethod
    def _shape_text(body: ET.Element) -> str:
        lines = []
        for paragraph in body.findall(f"{_A_NS}p"):
            pieces = []
            for child in paragraph:
                if child.tag in (f"{_A_NS}r", f"{_A_NS}fld"):
                    pieces.append(child.findtext(f"{_A_NS}t", default=""))
                elif child.tag == f"{_A_NS}br":
                    pieces.append(" ")
            lines.append("".join(pieces))
        return "\n".join(lines).strip("\n")


_EXTRACTORS: Dict[FileType, type] = {
    FileType.PLAIN_TEXT: PlainTextExtractor,
    FileType.WORD_DOCUMENT: DocxExtractor,
    FileType.SLIDE_DECK: PptxExtractor,
}


def extract(parts: ArchiveParts) -> ExtractedText:
    """Turn unpacked document parts into ordered text segments.

    Raises :class:`EmptyDocumentError` when no segment carries any text.
    """

    extractor_cls = _EXTRACTORS.get(parts.file_type)
    if extractor_cls is None:
        raise UnsupportedFileTypeError(f"No extractor for documents of type {parts.file_type.value!r}")
    extracted = extractor_cls().extract(parts)
    if not extracted.has_content:
        raise EmptyDocumentError("Document contains no extractable text")
    LOGGER.debug(
        "Extracted %s segments from %s document", len(extracted.segments), parts.file_type.value
    )
    return extracted
