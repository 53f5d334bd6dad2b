"""Utilities for detecting the format of uploaded documents."""
from __future__ import annotations

from enum import Enum
from pathlib import PurePath
from typing import Tuple


class FileType(str, Enum):
    """Document formats understood by the pipeline."""

    PLAIN_TEXT = "txt"
    WORD_DOCUMENT = "docx"
    SLIDE_DECK = "pptx"
    UNSUPPORTED = "unsupported"


_EXTENSION_MAP = {
    ".txt": FileType.PLAIN_TEXT,
    ".docx": FileType.WORD_DOCUMENT,
    ".pptx": FileType.SLIDE_DECK,
}


def classify(filename: str) -> FileType:
    """Return the file type implied by the filename's extension.

    Matching is case-insensitive and looks at the name only, never at the
    content: a renamed file is treated as whatever its extension says. Names
    without a recognised extension map to ``FileType.UNSUPPORTED``.
    """

    if not filename:
        return FileType.UNSUPPORTED
    # PurePath treats ".txt" as a stem with no suffix, which is what we want.
    suffix = PurePath(filename.replace("\\", "/")).suffix.lower()
    return _EXTENSION_MAP.get(suffix, FileType.UNSUPPORTED)


def supported_extensions() -> Tuple[str, ...]:
    return tuple(_EXTENSION_MAP)


def describe_supported_types() -> str:
    """Human-readable list of supported types, e.g. ``"TXT, DOCX, PPTX"``."""

    return ", ".join(extension.lstrip(".").upper() for extension in supported_extensions())
