"""Errors raised by the document processing pipeline."""
from __future__ import annotations


class ProcessingError(RuntimeError):
    """Base class for terminal document processing failures.

    ``kind`` names the failure for callers that map errors to their own
    responses; ``category`` is ``"validation"`` for client-correctable input
    problems and ``"archive"`` for corrupted documents.
    """

    kind = "ProcessingError"
    category = "validation"

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.__cause__ = cause


class UnsupportedFileTypeError(ProcessingError):
    kind = "UnsupportedFileType"


class FileTooLargeError(ProcessingError):
    kind = "FileTooLarge"

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"File size {size} bytes exceeds the limit of {limit} bytes")
        self.size = size
        self.limit = limit


class CorruptArchiveError(ProcessingError):
    """Raised when a container format cannot be opened or read."""

    kind = "CorruptArchive"
    category = "archive"


class ArchiveLimitExceededError(CorruptArchiveError):
    """Raised when an archive exceeds the configured entry or size caps."""


class MissingRequiredPartError(ProcessingError):
    kind = "MissingRequiredPart"
    category = "archive"

    def __init__(self, part_name: str, *, reason: str | None = None) -> None:
        super().__init__(reason or f"Archive is missing required part {part_name!r}")
        self.part_name = part_name


class EmptyDocumentError(ProcessingError):
    kind = "EmptyDocument"


class InvalidConfigError(ProcessingError):
    kind = "InvalidConfig"
