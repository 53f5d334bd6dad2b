"""Open OOXML containers and pull out the parts the extractors need."""
from __future__ import annotations

import io
import logging
import posixpath
import re
import zipfile
import zlib
from typing import Dict, List, Tuple

from docx.oxml import parse_xml
from lxml import etree

from .config import ProcessingConfig
from .errors import (
    ArchiveLimitExceededError,
    CorruptArchiveError,
    MissingRequiredPartError,
    UnsupportedFileTypeError,
)
from .format_detection import FileType
from .models import ArchiveParts

LOGGER = logging.getLogger(__name__)

PLAIN_TEXT_PART = "text"
PACKAGE_RELS_PART = "_rels/.rels"
WORD_BODY_PART = "word/document.xml"
_RELATIONSHIP_TAG = "{http://schemas.openxmlformats.org/package/2006/relationships}Relationship"
# Transitional and Strict OOXML use different type URIs with the same tail.
_OFFICE_DOCUMENT_SUFFIX = "/officeDocument"
_SLIDE_PART_RE = re.compile(r"^ppt/slides/slide(\d+)\.xml$", re.IGNORECASE)

# Errors zipfile and zlib raise for damaged or truncated members.
_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, OSError, NotImplementedError)


def unpack(data: bytes, file_type: FileType, config: ProcessingConfig) -> ArchiveParts:
    """Return the parts of ``data`` needed to extract text of ``file_type``.

    Plain text is passed through untouched. DOCX yields the document body
    part named by the package relationships and PPTX yields every slide
    part ordered by slide number. The archive's entry count and
    decompressed size are checked against ``config`` before anything is
    inflated.
    """

    if file_type is FileType.PLAIN_TEXT:
        return ArchiveParts(file_type=file_type, parts={PLAIN_TEXT_PART: data}, order=[PLAIN_TEXT_PART])
    if file_type not in (FileType.WORD_DOCUMENT, FileType.SLIDE_DECK):
        raise UnsupportedFileTypeError(f"Cannot unpack documents of type {file_type.value!r}")

    archive = _open_archive(data)
    with archive:
        _check_limits(archive, config)
        names_by_key = {info.filename.lower(): info.filename for info in archive.infolist()}
        budget = config.max_uncompressed_bytes
        if file_type is FileType.WORD_DOCUMENT:
            body, rels_size = _word_body_name(archive, names_by_key, budget)
            budget -= rels_size
            order = [body]
        else:
            order = _slide_part_names(names_by_key.values())
            if not order:
                LOGGER.info("Slide deck contains no slide parts")

        parts: Dict[str, bytes] = {}
        for name in order:
            payload = _read_member(archive, name, budget)
            budget -= len(payload)
            parts[name] = payload

    LOGGER.debug("Unpacked %s parts from %s archive", len(parts), file_type.value)
    return ArchiveParts(file_type=file_type, parts=parts, order=order)


def _open_archive(data: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, OSError, ValueError) as exc:
        raise CorruptArchiveError(f"Document is not a valid archive: {exc}", cause=exc) from exc


def _check_limits(archive: zipfile.ZipFile, config: ProcessingConfig) -> None:
    entries = archive.infolist()
    if len(entries) > config.max_archive_entries:
        raise ArchiveLimitExceededError(
            f"Archive holds {len(entries)} entries; the limit is {config.max_archive_entries}"
        )
    declared = sum(info.file_size for info in entries)
    if declared > config.max_uncompressed_bytes:
        raise ArchiveLimitExceededError(
            f"Archive expands to {declared} bytes; the limit is {config.max_uncompressed_bytes}"
        )


def _read_member(archive: zipfile.ZipFile, name: str, budget: int) -> bytes:
    # Declared sizes can lie, so never inflate more than the remaining budget.
    try:
        with archive.open(name) as member:
            payload = member.read(budget + 1)
    except _READ_ERRORS as exc:
        raise CorruptArchiveError(f"Archive part {name!r} could not be read: {exc}", cause=exc) from exc
    except RuntimeError as exc:
        # zipfile signals encrypted members with a bare RuntimeError.
        raise CorruptArchiveError(f"Archive part {name!r} is encrypted", cause=exc) from exc
    if len(payload) > budget:
        raise ArchiveLimitExceededError(f"Archive part {name!r} exceeds the decompressed size limit")
    return payload


def _word_body_name(archive: zipfile.ZipFile, names_by_key: Dict[str, str], budget: int) -> Tuple[str, int]:
    """Resolve the main document part through the package relationships.

    Returns the archive name of the body part and the number of bytes read
    from ``_rels/.rels``. Packages without that part fall back to
    ``word/document.xml``.
    """

    rels_name = names_by_key.get(PACKAGE_RELS_PART)
    if rels_name is None:
        body = names_by_key.get(WORD_BODY_PART)
        if body is None:
            raise MissingRequiredPartError(WORD_BODY_PART)
        return body, 0

    payload = _read_member(archive, rels_name, budget)
    try:
        root = parse_xml(payload)
    except etree.XMLSyntaxError as exc:
        raise CorruptArchiveError(
            f"Package relationships {rels_name!r} are not well-formed XML", cause=exc
        ) from exc

    for relationship in root.iter(_RELATIONSHIP_TAG):
        if not relationship.get("Type", "").endswith(_OFFICE_DOCUMENT_SUFFIX):
            continue
        if relationship.get("TargetMode") == "External":
            continue
        target = posixpath.normpath(relationship.get("Target", "").lstrip("/"))
        body = names_by_key.get(target.lower())
        if body is None:
            raise MissingRequiredPartError(target)
        if body != WORD_BODY_PART:
            LOGGER.debug("Document body stored as %s", body)
        return body, len(payload)

    raise MissingRequiredPartError(
        PACKAGE_RELS_PART, reason="Package relationships name no officeDocument part"
    )


def _slide_part_names(names) -> List[str]:
    numbered = []
    for name in names:
        match = _SLIDE_PART_RE.match(name)
        if match:
            numbered.append((int(match.group(1)), name))
    numbered.sort()
    return [name for _, name in numbered]


def slide_number(part_name: str) -> int:
    """Return the numeric index embedded in a slide part name."""

    match = _SLIDE_PART_RE.match(part_name)
    if match is None:
        raise ValueError(f"Not a slide part: {part_name!r}")
    return int(match.group(1))
