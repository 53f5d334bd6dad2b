"""Shared fixtures building small OOXML documents in memory."""
from __future__ import annotations

import io
import os
import tempfile
import zipfile
from typing import Callable, Iterable, Sequence
from xml.sax.saxutils import escape

import pytest

# Keep the JSON audit log out of the working tree when the app module is imported.
os.environ.setdefault("MEETPREP_LOG_DIR", tempfile.mkdtemp(prefix="meetprep-logs-"))

from meetprep.ingest import ProcessingConfig  # noqa: E402

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
P_NS = "http://schemas.openxmlformats.org/presentationml/2006/main"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"


def word_paragraph(text: str) -> str:
    if not text:
        return "<w:p/>"
    return f'<w:p><w:r><w:t xml:space="preserve">{escape(text)}</w:t></w:r></w:p>'


def word_document_xml(body_xml: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{W_NS}"><w:body>{body_xml}</w:body></w:document>'
    )


def slide_xml(shape_texts: Sequence[str | None]) -> str:
    """Build a slide with one shape per entry; ``None`` adds a picture-like shape without text."""

    shapes = []
    for text in shape_texts:
        if text is None:
            shapes.append("<p:sp><p:nvSpPr/><p:spPr/></p:sp>")
            continue
        paragraphs = "".join(
            f"<a:p><a:r><a:t>{escape(line)}</a:t></a:r></a:p>" for line in text.split("\n")
        )
        shapes.append(f"<p:sp><p:nvSpPr/><p:txBody><a:bodyPr/>{paragraphs}</p:txBody></p:sp>")
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<p:sld xmlns:a="{A_NS}" xmlns:p="{P_NS}"><p:cSld><p:spTree>'
        f'{"".join(shapes)}'
        "</p:spTree></p:cSld></p:sld>"
    )


def build_archive(entries: Iterable[tuple[str, str | bytes]]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, payload in entries:
            archive.writestr(name, payload)
    return buffer.getvalue()


@pytest.fixture
def make_archive() -> Callable[[Iterable[tuple[str, str | bytes]]], bytes]:
    return build_archive


@pytest.fixture
def config() -> ProcessingConfig:
    return ProcessingConfig(max_file_size_bytes=1024 * 1024, max_chunk_chars=800, overlap_chars=100)


@pytest.fixture
def make_docx() -> Callable[..., bytes]:
    """Return a factory producing a minimal DOCX from paragraph texts or raw body XML."""

    def factory(paragraphs: Sequence[str] = (), *, body_xml: str | None = None) -> bytes:
        body = body_xml if body_xml is not None else "".join(word_paragraph(text) for text in paragraphs)
        return build_archive(
            [
                ("[Content_Types].xml", "<Types/>"),
                ("word/document.xml", word_document_xml(body)),
            ]
        )

    return factory


@pytest.fixture
def make_pptx() -> Callable[..., bytes]:
    """Return a factory producing a PPTX whose slides are stored in ``storage_order``."""

    def factory(
        slides: Sequence[Sequence[str | None]],
        *,
        storage_order: Sequence[int] | None = None,
    ) -> bytes:
        order = storage_order or range(1, len(slides) + 1)
        entries = [("[Content_Types].xml", "<Types/>"), ("ppt/presentation.xml", "<p:presentation/>")]
        for number in order:
            entries.append((f"ppt/slides/slide{number}.xml", slide_xml(slides[number - 1])))
        return build_archive(entries)

    return factory
