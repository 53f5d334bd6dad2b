"""Explicit configuration for the processing pipeline."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields

from .errors import InvalidConfigError

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_CHUNK_CHARS = 2000
DEFAULT_OVERLAP_CHARS = 200
DEFAULT_MAX_ARCHIVE_ENTRIES = 2048
DEFAULT_MAX_UNCOMPRESSED_BYTES = 100 * 1024 * 1024


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


@dataclass(slots=True, frozen=True)
class ProcessingConfig:
    """Limits applied to a single ``process`` call.

    ``max_file_size_bytes`` rejects larger input buffers outright.
    ``max_chunk_chars`` bounds the length of every chunk and ``overlap_chars``
    is how much of the previous chunk's tail the next chunk repeats.
    ``max_archive_entries`` and ``max_uncompressed_bytes`` cap what the
    container unpacker is willing to look at inside DOCX and PPTX files.
    """

    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES
    max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS
    overlap_chars: int = DEFAULT_OVERLAP_CHARS
    max_archive_entries: int = DEFAULT_MAX_ARCHIVE_ENTRIES
    max_uncompressed_bytes: int = DEFAULT_MAX_UNCOMPRESSED_BYTES

    def __post_init__(self) -> None:
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigError(f"{config_field.name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidConfigError(f"{config_field.name} must be positive, got {value}")
        if self.overlap_chars >= self.max_chunk_chars:
            raise InvalidConfigError(
                f"overlap_chars ({self.overlap_chars}) must be smaller than "
                f"max_chunk_chars ({self.max_chunk_chars})"
            )

    @classmethod
    def from_env(cls) -> "ProcessingConfig":
        """Build a config from ``MEETPREP_*`` environment variables."""

        return cls(
            max_file_size_bytes=_int_from_env("MEETPREP_MAX_FILE_SIZE_BYTES", DEFAULT_MAX_FILE_SIZE_BYTES),
            max_chunk_chars=_int_from_env("MEETPREP_MAX_CHUNK_CHARS", DEFAULT_MAX_CHUNK_CHARS),
            overlap_chars=_int_from_env("MEETPREP_OVERLAP_CHARS", DEFAULT_OVERLAP_CHARS),
            max_archive_entries=_int_from_env("MEETPREP_MAX_ARCHIVE_ENTRIES", DEFAULT_MAX_ARCHIVE_ENTRIES),
            max_uncompressed_bytes=_int_from_env(
                "MEETPREP_MAX_UNCOMPRESSED_BYTES", DEFAULT_MAX_UNCOMPRESSED_BYTES
            ),
        )
