"""High level document processing entry point."""
from __future__ import annotations

import logging
import time
from typing import Tuple

from meetprep.logging_config import AUDIT_LOGGER_NAME
from meetprep.telemetry import emit_exception, emit_ingest_event

from .chunking import chunk
from .config import ProcessingConfig
from .containers import unpack
from .errors import (
    EmptyDocumentError,
    FileTooLargeError,
    InvalidConfigError,
    ProcessingError,
    UnsupportedFileTypeError,
)
from .extractors import extract
from .format_detection import FileType, classify, describe_supported_types
from .models import ProcessingResult, SourceDocument
from .normalization import normalize

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger(AUDIT_LOGGER_NAME)


def process(
    data: bytes,
    filename: str,
    config: ProcessingConfig,
    *,
    req_id: str | None = None,
) -> ProcessingResult:
    """Extract, normalise and chunk an uploaded document.

    The file type comes from ``filename`` alone and unsupported names are
    rejected before ``data`` is looked at. Every failure is raised as a
    :class:`ProcessingError` subclass; recoverable extraction problems are
    reported in ``ProcessingResult.warnings`` instead.
    """

    if not isinstance(config, ProcessingConfig):
        raise InvalidConfigError(f"Expected a ProcessingConfig, got {type(config).__name__}")

    started = time.perf_counter()
    try:
        result, segment_count = _run(SourceDocument(data=data, filename=filename), config)
    except ProcessingError as error:
        emit_exception(module=__name__, error=error, req_id=req_id, kind=error.kind)
        raise
    duration_ms = (time.perf_counter() - started) * 1000.0

    LOGGER.info(
        "Generated %s chunks for %s (%s) in %.1fms", len(result.chunks), filename, result.file_type.value, duration_ms
    )
    emit_ingest_event(
        "ingest.file.complete",
        file_name=filename,
        file_type=result.file_type.value,
        size_bytes=len(data),
        duration_ms=duration_ms,
        segments=segment_count,
        chunks=len(result.chunks),
        warnings=len(result.warnings),
        req_id=req_id,
    )
    AUDIT_LOGGER.info(
        {
            "event": "process",
            "filename": filename,
            "file_type": result.file_type.value,
            "size_bytes": len(data),
            "chunks": len(result.chunks),
            "warnings": len(result.warnings),
            "duration_ms": round(duration_ms, 3),
        }
    )
    return result


def _run(document: SourceDocument, config: ProcessingConfig) -> Tuple[ProcessingResult, int]:
    file_type = classify(document.filename)
    if file_type is FileType.UNSUPPORTED:
        supported = describe_supported_types()
        raise UnsupportedFileTypeError(f"Unsupported file type: {document.filename}. Supported types: {supported}")

    size = len(document.data)
    if size > config.max_file_size_bytes:
        raise FileTooLargeError(size, config.max_file_size_bytes)
    if size == 0:
        raise EmptyDocumentError(f"Document {document.filename} is empty")

    parts = unpack(document.data, file_type, config)
    extracted = extract(parts)
    normalized = normalize(extracted)
    chunks = chunk(normalized, config)

    result = ProcessingResult(
        file_type=file_type,
        full_text=normalized.full_text,
        chunks=chunks,
        warnings=list(extracted.warnings),
    )
    return result, len(extracted.segments)
