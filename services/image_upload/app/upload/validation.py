"""Upload validation and storage key generation."""

import uuid

from services.image_upload.app.config import ALLOWED_CONTENT_TYPES, MAX_UPLOAD_BYTES
from services.image_upload.app.core.schemas import UploadError, UploadErrorKind, UploadRequest


def normalize_content_type(content_type: str | None) -> str:
    return (content_type or "").strip().lower()


def validate_upload(request: UploadRequest) -> UploadError | None:
    """Check an upload against the fixed policy.

    Checks run in order and the first violation wins:
    empty file, then content type, then size.

    Returns:
        The violation, or None if the upload may be stored
    """
    if not request.has_content or request.size_bytes == 0:
        return UploadError(UploadErrorKind.EMPTY_FILE, "No file provided")

    if normalize_content_type(request.declared_content_type) not in ALLOWED_CONTENT_TYPES:
        return UploadError(
            UploadErrorKind.UNSUPPORTED_TYPE,
            "Only image files are allowed (JPEG, PNG, GIF, WebP)",
        )

    if request.size_bytes > MAX_UPLOAD_BYTES:
        return UploadError(UploadErrorKind.TOO_LARGE, "File size must be less than 5MB")

    return None


def extract_extension(file_name: str | None) -> str:
    """Return the extension of file_name including the dot, or "".

    Only the last path segment is considered. Casing is kept as given.
    """
    if not file_name:
        return ""
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    dot = base.rfind(".")
    if dot < 0 or dot == len(base) - 1:
        return ""
    return base[dot:]


def generate_key(file_name: str | None) -> str:
    """Build a fresh storage key: a random UUID plus the original extension."""
    return f"{uuid.uuid4()}{extract_extension(file_name)}"
