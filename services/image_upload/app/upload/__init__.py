"""Image upload handling module."""

from services.image_upload.app.upload.handler import UploadHandler
from services.image_upload.app.upload.validation import (
    extract_extension,
    generate_key,
    validate_upload,
)

__all__ = ["UploadHandler", "extract_extension", "generate_key", "validate_upload"]
