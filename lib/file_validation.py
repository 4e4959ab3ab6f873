# =============================================================================
# lib/file_validation.py - Upload Validation
# =============================================================================
# Validates uploaded media before it is written to storage:
# - MIME type allow list per category (audio, image, video)
# - Size limits per category
# - Magic-byte signature check against the declared MIME type
# - Safe extension lookup and filename sanitizing
#
# Usage:
#   from lib.file_validation import validate_file
#   result = validate_file(content, "image/png", "image")
#   if not result.valid:
#       raise InvalidFileError(result.error)
# =============================================================================

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

FileCategory = Literal["audio", "image", "video"]

MB = 1024 * 1024

ALLOWED_MIME_TYPES: dict[str, tuple[str, ...]] = {
    "audio": (
        "audio/webm",
        "audio/mp4",
        "audio/mpeg",
        "audio/ogg",
        "audio/wav",
    ),
    "image": (
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
    ),
    "video": (
        "video/mp4",
        "video/webm",
        "video/quicktime",
        "video/x-msvideo",
        "video/x-ms-wmv",
    ),
}

FILE_SIZE_LIMITS: dict[str, int] = {
    "audio": 50 * MB,
    "image": 10 * MB,
    "video": 400 * MB,
}

MIME_TO_EXTENSION: dict[str, str] = {
    # Audio
    "audio/webm": "webm",
    "audio/mp4": "m4a",
    "audio/mpeg": "mp3",
    "audio/ogg": "ogg",
    "audio/wav": "wav",
    # Image
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    # Video
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
    "video/x-msvideo": "avi",
    "video/x-ms-wmv": "wmv",
}

_EBML = ((0, b"\x1a\x45\xdf\xa3"),)

# Each entry is a list of alternatives; an alternative matches when every
# (offset, bytes) part matches.
FILE_SIGNATURES: dict[str, tuple[tuple[tuple[int, bytes], ...], ...]] = {
    "image/jpeg": (
        ((0, b"\xff\xd8\xff"),),
    ),
    "image/png": (
        ((0, b"\x89PNG\r\n\x1a\n"),),
    ),
    "image/gif": (
        ((0, b"GIF87a"),),
        ((0, b"GIF89a"),),
    ),
    "image/webp": (
        ((0, b"RIFF"), (8, b"WEBP")),
    ),
    "video/mp4": (
        ((4, b"ftyp"),),
    ),
    "video/webm": (_EBML,),
    "audio/webm": (_EBML,),
    "audio/mpeg": (
        ((0, b"\xff\xfb"),),
        ((0, b"\xff\xfa"),),
        ((0, b"ID3"),),
    ),
    "audio/wav": (
        ((0, b"RIFF"), (8, b"WAVE")),
    ),
}


@dataclass(frozen=True)
class FileValidationResult:
    """Outcome of a validation step. `extension` is set on full success."""
    valid: bool
    error: str | None = None
    extension: str | None = None


_OK = FileValidationResult(True)


def validate_file_type(mime_type: str, category: FileCategory) -> FileValidationResult:
    """Check the declared MIME type against the category's allow list."""
    allowed = ALLOWED_MIME_TYPES[category]
    if mime_type not in allowed:
        return FileValidationResult(
            False, f"Invalid file type. Allowed types: {', '.join(allowed)}"
        )
    return _OK


def validate_file_size(size: int, category: FileCategory) -> FileValidationResult:
    """Reject files over the category limit, and empty files."""
    max_size = FILE_SIZE_LIMITS[category]
    if size > max_size:
        return FileValidationResult(
            False, f"File too large. Maximum size: {max_size // MB}MB"
        )
    if size == 0:
        return FileValidationResult(False, "File is empty")
    return _OK


def get_safe_file_extension(mime_type: str) -> str:
    """Extension for a MIME type; unknown types get 'bin'."""
    return MIME_TO_EXTENSION.get(mime_type, "bin")


def validate_file_content(content: bytes, declared_mime_type: str) -> FileValidationResult:
    """
    Check the file's leading bytes against the declared MIME type.

    Types without a known signature (ogg, svg, quicktime, ...) pass.
    """
    alternatives = FILE_SIGNATURES.get(declared_mime_type)
    if not alternatives:
        return _OK

    for parts in alternatives:
        if all(
            content[offset:offset + len(signature)] == signature
            for offset, signature in parts
        ):
            return _OK

    return FileValidationResult(
        False, f"File content does not match declared type: {declared_mime_type}"
    )


def sanitize_filename(filename: str) -> str:
    """Strip path separators, collapse dot runs and drop a leading dot."""
    cleaned = re.sub(r"[/\\]", "", filename)
    cleaned = re.sub(r"\.{2,}", ".", cleaned)
    cleaned = re.sub(r"^\.", "", cleaned)
    return cleaned.strip()


def validate_file(
    content: bytes,
    mime_type: str,
    category: FileCategory,
    size: int | None = None,
) -> FileValidationResult:
    """
    Run type, size and content checks in order.

    Args:
        content: File bytes (at least the first few KB)
        mime_type: MIME type declared by the client
        category: "audio", "image" or "video"
        size: Declared size; defaults to len(content)

    Returns:
        First failing result, or a valid result carrying the safe extension
    """
    for result in (
        validate_file_type(mime_type, category),
        validate_file_size(len(content) if size is None else size, category),
        validate_file_content(content, mime_type),
    ):
        if not result.valid:
            return result

    return FileValidationResult(True, extension=get_safe_file_extension(mime_type))
