"""JSON logging setup for the service and the ingest audit trail."""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

AUDIT_LOGGER_NAME = "meetprep.ingest.audit"
AUDIT_LOG_FILENAME = "ingest_audit.log"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}


def _utc_timestamp(created: float) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).isoformat().replace("+00:00", "Z")


class MinimalJSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Dict messages (as produced by :func:`meetprep.telemetry.log_event` and the
    audit logger) are merged into the top level instead of being stringified.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited
        payload: dict[str, Any] = {
            "timestamp": _utc_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
        }
        message = record.getMessage()
        if isinstance(record.msg, dict):
            payload.update(record.msg)
        elif message:
            payload["message"] = message

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        )
        return json.dumps(payload, ensure_ascii=False, default=str)


def build_logging_config(log_dir: Path, level: str) -> dict[str, Any]:
    """Return the ``dictConfig`` schema used by :func:`configure_logging`."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": MinimalJSONFormatter}},
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "json"},
            "ingest_audit": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / AUDIT_LOG_FILENAME),
                "mode": "a",
                "encoding": "utf-8",
                "formatter": "json",
            },
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            AUDIT_LOGGER_NAME: {"level": "INFO", "handlers": ["ingest_audit"], "propagate": False},
        },
    }


def configure_logging(log_dir: str | Path | None = None, level: str | None = None) -> None:
    """Send JSON logs to stderr and audit records to ``<log_dir>/ingest_audit.log``.

    ``log_dir`` and ``level`` default to ``MEETPREP_LOG_DIR`` (``logs``) and
    ``MEETPREP_LOG_LEVEL`` (``INFO``).
    """

    directory = Path(log_dir or os.getenv("MEETPREP_LOG_DIR", "logs"))
    directory.mkdir(parents=True, exist_ok=True)
    root_level = (level or os.getenv("MEETPREP_LOG_LEVEL", "INFO")).upper()
    logging.config.dictConfig(build_logging_config(directory, root_level))
