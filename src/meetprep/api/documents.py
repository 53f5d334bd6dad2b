"""API router exposing the document processing pipeline."""
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from meetprep.ingest import (
    FileType,
    InvalidConfigError,
    ProcessingConfig,
    ProcessingError,
    ProcessingResult,
    classify,
    process,
)
from meetprep.ingest.format_detection import describe_supported_types

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

_STATUS_BY_KIND = {
    "UnsupportedFileType": 415,
    "FileTooLarge": 413,
    "EmptyDocument": 422,
}
_STATUS_BY_CATEGORY = {"validation": 400, "archive": 422}


class ChunkPayload(BaseModel):
    index: int
    text: str
    start_offset: int
    end_offset: int


class ProcessResponse(BaseModel):
    """Response body returned from the process endpoint."""

    filename: str
    file_type: str
    text_length: int
    chunk_count: int
    extracted_text: str
    chunks: list[ChunkPayload]
    warnings: list[str]


def _http_error(error: ProcessingError) -> HTTPException:
    status_code = _STATUS_BY_KIND.get(error.kind) or _STATUS_BY_CATEGORY.get(error.category, 400)
    return HTTPException(status_code=status_code, detail={"error": str(error), "code": error.kind})


def get_processing_config() -> ProcessingConfig:
    try:
        return ProcessingConfig.from_env()
    except InvalidConfigError as exc:
        LOGGER.error("Invalid processing configuration: %s", exc)
        raise _http_error(exc) from exc


def _serialise(filename: str, result: ProcessingResult) -> ProcessResponse:
    return ProcessResponse(
        filename=filename,
        file_type=result.file_type.value,
        text_length=len(result.full_text),
        chunk_count=len(result.chunks),
        extracted_text=result.full_text,
        chunks=[
            ChunkPayload(
                index=item.index,
                text=item.text,
                start_offset=item.start_offset,
                end_offset=item.end_offset,
            )
            for item in result.chunks
        ],
        warnings=result.warnings,
    )


@router.post("/process", response_model=ProcessResponse)
async def process_document(
    file: UploadFile = File(...),
    config: ProcessingConfig = Depends(get_processing_config),
) -> ProcessResponse:
    """Extract and chunk a single uploaded meeting document."""

    filename = file.filename or ""
    if not filename:
        raise HTTPException(status_code=400, detail={"error": "No file provided", "code": "MissingFile"})
    if classify(filename) is FileType.UNSUPPORTED:
        raise HTTPException(
            status_code=415,
            detail={
                "error": f"Unsupported file type. Supported types: {describe_supported_types()}",
                "code": "UnsupportedFileType",
            },
        )

    # One byte past the limit is enough for process() to reject the upload.
    data = await file.read(config.max_file_size_bytes + 1)
    try:
        result = process(data, filename, config, req_id=uuid.uuid4().hex)
    except ProcessingError as exc:
        raise _http_error(exc) from exc
    return _serialise(filename, result)
