"""Document processing pipeline: detect, unpack, extract, normalise, chunk."""
from __future__ import annotations

from .config import ProcessingConfig
from .errors import (
    ArchiveLimitExceededError,
    CorruptArchiveError,
    EmptyDocumentError,
    FileTooLargeError,
    InvalidConfigError,
    MissingRequiredPartError,
    ProcessingError,
    UnsupportedFileTypeError,
)
from .format_detection import FileType, classify
from .models import Chunk, ProcessingResult
from .pipeline import process

__all__ = [
    "ArchiveLimitExceededError",
    "Chunk",
    "CorruptArchiveError",
    "EmptyDocumentError",
    "FileTooLargeError",
    "FileType",
    "InvalidConfigError",
    "MissingRequiredPartError",
    "ProcessingConfig",
    "ProcessingError",
    "ProcessingResult",
    "UnsupportedFileTypeError",
    "classify",
    "process",
]
