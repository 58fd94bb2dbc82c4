from __future__ import annotations

import os
from typing import Optional

import structlog
from fastapi import HTTPException, UploadFile, status

from src.classification.features import get_file_extension
from src.classification.types import UploadedFile
from src.core.config import Settings, get_settings

__all__: list[str] = ["validate_file", "upload_size", "to_uploaded_file"]

logger = structlog.get_logger(__name__)


def upload_size(file: UploadFile) -> int:
    """Return the size of *file* in bytes without moving its read position.

    Raises
    ------
    OSError
        When the underlying temp-file cannot be seeked.
    """
    current_pos = file.file.tell()
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(current_pos)
    return size


def _validate_filename(filename: Optional[str]) -> str:
    """Ensure filename exists and is not empty."""
    if not filename:
        logger.warning("file_upload_no_filename")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No filename provided."
        )
    return filename.lower()


def _validate_extension(filename: str, settings: Settings) -> str:
    """Reject files whose extension is outside the accepted set."""
    extension = get_file_extension(os.path.basename(filename))
    if not extension:
        logger.warning("file_upload_no_extension", filename=filename)
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="File has no extension.",
        )

    if not settings.is_extension_allowed(extension):
        logger.warning(
            "file_upload_invalid_extension", extension=extension, filename=filename
        )
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Unsupported file extension: .{extension}",
        )
    return extension


def _validate_size(file: UploadFile, filename: str, settings: Settings) -> int:
    """Reject empty and oversized files."""
    try:
        size = upload_size(file)
    except OSError as e:
        logger.error("file_size_check_failed", error=str(e), filename=filename)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unable to assess uploaded file size. The upload may be corrupted.",
        ) from e

    if size == 0:
        logger.warning("file_upload_empty", filename=filename)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )

    max_size = settings.max_file_size_mb * 1024 * 1024
    if size > max_size:
        logger.warning(
            "file_upload_too_large", size=size, max_size=max_size, filename=filename
        )
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=(
                f"File size {size / 1024 / 1024:.2f} MB exceeds the "
                f"limit of {settings.max_file_size_mb} MB."
            ),
        )
    return size


def validate_file(file: UploadFile, *, settings: Optional[Settings] = None) -> int:
    """
    Validate an uploaded file against the upload acceptance rules.

    Args:
        file: The uploaded file to validate
        settings: Optional Settings instance (uses global if not provided)

    Returns:
        The file size in bytes.

    Raises:
        HTTPException: With appropriate status code if validation fails
            - 400: Missing filename, empty file, size check error
            - 413: File too large
            - 415: Missing or unsupported extension
    """
    settings = settings or get_settings()

    filename_lower = _validate_filename(file.filename)
    _validate_extension(filename_lower, settings)
    size = _validate_size(file, filename_lower, settings)

    logger.debug(
        "upload_validation_passed",
        filename=file.filename,
        size_bytes=size,
        content_type=file.content_type,
    )
    return size


def to_uploaded_file(file: UploadFile, size: int) -> UploadedFile:
    """Convert a Starlette upload into the classifier's :class:`UploadedFile`.

    Browsers send folder uploads with the relative path as the filename; the
    path is kept and the base name becomes the file name.
    """
    raw_name = file.filename or ""
    name = os.path.basename(raw_name)
    return UploadedFile(
        name=name,
        size=size,
        declared_type=file.content_type or "",
        relative_path=raw_name if raw_name != name else "",
    )
