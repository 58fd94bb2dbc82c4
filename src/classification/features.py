"""src/classification/features.py
###############################################################################
Feature encoder
###############################################################################
Maps file metadata onto the fixed 6-value :class:`FeatureVector` consumed by
the network:

    [has_sensitive_keyword, file_type_id, extension_id,
     location_id, permission_id, normalized_log_size]

Categorical values come from closed, hand-assigned vocabularies. Anything
outside a vocabulary encodes as ``0`` so unknown inputs are representable
rather than an error. The encoder never raises.
"""

from __future__ import annotations

import math
import os
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from src.classification.types import FeatureVector, FileMetadata, UploadedFile

__all__: list[str] = [
    "EXTENSION_IDS",
    "FILE_TYPE_IDS",
    "LOCATION_IDS",
    "PERMISSION_IDS",
    "SENSITIVE_KEYWORDS",
    "DEFAULT_LOCATION",
    "DEFAULT_PERMISSION",
    "encode",
    "extract_metadata",
    "determine_file_type",
    "get_file_extension",
    "has_sensitive_keyword",
]

EXTENSION_IDS: Dict[str, int] = {
    "pdf": 1,
    "doc": 2,
    "docx": 3,
    "xls": 4,
    "xlsx": 5,
    "txt": 6,
    "csv": 7,
    "zip": 8,
    "rar": 9,
    "jpg": 10,
}

FILE_TYPE_IDS: Dict[str, int] = {
    "PDF Document": 1,
    "Word Document": 2,
    "Excel Spreadsheet": 3,
    "Text File": 4,
    "CSV File": 5,
    "Image": 6,
    "Archive": 7,
}

LOCATION_IDS: Dict[str, int] = {
    "Local Upload": 1,
    "Cloud Storage": 2,
    "Network Drive": 3,
}

PERMISSION_IDS: Dict[str, int] = {
    "Read/Write": 1,
    "Read Only": 2,
    "Full Control": 3,
}

# Financial, medical, identity and confidentiality terms.
SENSITIVE_KEYWORDS: Tuple[str, ...] = (
    "pan",
    "aadhar",
    "passport",
    "bank",
    "statement",
    "financial",
    "medical",
    "health",
    "insurance",
    "tax",
    "salary",
    "personal",
    "confidential",
    "private",
    "secret",
    "social",
    "security",
    "credit",
    "debit",
    "card",
    "ssn",
    "dob",
    "birth",
)

# Uploads always come from the local machine with full rights for the uploader.
DEFAULT_LOCATION = "Local Upload"
DEFAULT_PERMISSION = "Read/Write"
DEFAULT_OWNER = "Current User"
UNKNOWN_FILE_TYPE = "Unknown File Type"

_FILE_TYPE_BY_EXTENSION: Dict[str, str] = {
    "pdf": "PDF Document",
    "doc": "Word Document",
    "docx": "Word Document",
    "xls": "Excel Spreadsheet",
    "xlsx": "Excel Spreadsheet",
    "ppt": "PowerPoint Presentation",
    "pptx": "PowerPoint Presentation",
    "txt": "Text File",
    "csv": "CSV File",
    "jpg": "Image",
    "jpeg": "Image",
    "png": "Image",
    "gif": "Image",
    "zip": "Archive",
    "rar": "Archive",
}

_SIZE_NORMALISER: float = 20.0


def get_file_extension(filename: Optional[str]) -> str:
    """Return the text after the last dot, or ``""`` for dot-less names.

    A single leading dot marks a dot-file (``.bashrc``) rather than an
    extension; ``..pdf`` still yields ``pdf``.

    The original casing is preserved; callers lower-case when they need to.
    """
    if not filename:
        return ""
    head, dot, extension = filename.rpartition(".")
    return extension if dot and head else ""


def determine_file_type(filename: Optional[str]) -> str:
    """Return the human-readable file type label for *filename*."""
    extension = get_file_extension(filename).lower()
    return _FILE_TYPE_BY_EXTENSION.get(extension, UNKNOWN_FILE_TYPE)


def has_sensitive_keyword(filename: Optional[str]) -> bool:
    """Case-insensitive substring match against :data:`SENSITIVE_KEYWORDS`."""
    lowered = (filename or "").lower()
    return any(keyword in lowered for keyword in SENSITIVE_KEYWORDS)


def normalized_log_size(size: Optional[int]) -> float:
    """``ln(size + 1) / 20``; absent or negative sizes count as empty files."""
    safe_size = max(size or 0, 0)
    return math.log(safe_size + 1) / _SIZE_NORMALISER


def extract_metadata(file: UploadedFile) -> FileMetadata:
    """Build the :class:`FileMetadata` view of an uploaded file."""
    now = datetime.now(timezone.utc)
    return FileMetadata(
        id=uuid.uuid4().hex,
        name=file.name,
        path=file.relative_path or f"/{file.name}",
        mime_type=file.declared_type,
        size=file.size,
        extension=get_file_extension(file.name),
        location=DEFAULT_LOCATION,
        owner=DEFAULT_OWNER,
        created=now,
        modified=file.last_modified or now,
        permissions=DEFAULT_PERMISSION,
    )


def encode_fields(
    name: Optional[str],
    size: Optional[int],
    location: Optional[str] = DEFAULT_LOCATION,
    permissions: Optional[str] = DEFAULT_PERMISSION,
) -> FeatureVector:
    """Encode raw field values; shared by :func:`encode` and the dataset generator."""
    lowered = (name or "").lower()
    extension = get_file_extension(lowered)
    return FeatureVector(
        has_sensitive_keyword=1.0 if has_sensitive_keyword(lowered) else 0.0,
        file_type_id=float(FILE_TYPE_IDS.get(determine_file_type(lowered), 0)),
        extension_id=float(EXTENSION_IDS.get(extension, 0)),
        location_id=float(LOCATION_IDS.get(location or "", 0)),
        permission_id=float(PERMISSION_IDS.get(permissions or "", 0)),
        normalized_log_size=normalized_log_size(size),
    )


def encode(metadata: FileMetadata) -> FeatureVector:
    """Encode *metadata* into a :class:`FeatureVector`. Pure and deterministic."""
    return encode_fields(
        metadata.name,
        metadata.size,
        location=metadata.location,
        permissions=metadata.permissions,
    )
