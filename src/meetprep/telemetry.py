"""Structured lifecycle events for the ingestion pipeline."""

from __future__ import annotations

import logging
import traceback
from typing import Any, Optional

LOGGER = logging.getLogger("meetprep.telemetry")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _exception_text(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    req_id: str | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Log ``step`` as a dict message that the JSON formatter flattens."""

    target = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": target.name, **payload}
    optional = {
        "req_id": req_id,
        "duration_ms": None if duration_ms is None else round(duration_ms, 3),
        "details": details,
    }
    event.update((key, value) for key, value in optional.items() if value is not None)

    exc_info = None
    if isinstance(exc, BaseException):
        event["exc"] = _exception_text(exc)
        exc_info = (type(exc), exc, exc.__traceback__)
    elif exc is not None:
        event["exc"] = str(exc)

    target.log(_LEVELS.get(level.lower(), logging.INFO), event, exc_info=exc_info)


def emit_ingest_event(
    step: str,
    *,
    file_name: str,
    file_type: str | None = None,
    size_bytes: int | None = None,
    duration_ms: float | None = None,
    segments: int | None = None,
    chunks: int | None = None,
    warnings: int | None = None,
    req_id: str | None = None,
) -> None:
    log_event(
        LOGGER,
        step,
        req_id=req_id,
        duration_ms=duration_ms,
        details={
            "file": file_name,
            "file_type": file_type,
            "size_bytes": size_bytes,
            "segments": segments,
            "chunks": chunks,
            "warnings": warnings,
        },
    )


def emit_exception(
    *,
    module: str,
    error: BaseException,
    req_id: str | None = None,
    kind: str | None = None,
) -> None:
    """Log a failed call; errors with a ``kind`` are document problems, not faults."""

    details: dict[str, Any] = {"module": module}
    if kind:
        details["kind"] = kind
    log_event(
        LOGGER,
        "exception",
        level="warning" if kind else "error",
        req_id=req_id,
        details=details,
        exc=error,
    )
