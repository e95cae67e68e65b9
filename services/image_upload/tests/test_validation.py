"""Tests for upload validation and key generation."""

import uuid

import pytest

from services.image_upload.app.config import ALLOWED_CONTENT_TYPES, MAX_UPLOAD_BYTES
from services.image_upload.app.core.schemas import UploadErrorKind, UploadRequest
from services.image_upload.app.upload.validation import (
    extract_extension,
    generate_key,
    validate_upload,
)


def make_request(
    size: int = 1024,
    content_type: str = "image/jpeg",
    file_name: str = "photo.jpg",
    data: bytes | None = None,
) -> UploadRequest:
    if data is None:
        data = b"x" * size
    return UploadRequest(
        file_bytes=data,
        declared_content_type=content_type,
        declared_file_name=file_name,
        size_bytes=size,
    )


class TestValidateUpload:
    """Tests for validate_upload."""

    def test_valid_upload_passes(self):
        assert validate_upload(make_request()) is None

    def test_zero_size_is_empty_file(self):
        error = validate_upload(make_request(size=0, data=b""))

        assert error.kind == UploadErrorKind.EMPTY_FILE
        assert error.is_client_error is True

    def test_missing_bytes_is_empty_file(self):
        request = UploadRequest(
            file_bytes=None,
            declared_content_type="",
            declared_file_name="",
            size_bytes=0,
        )

        assert validate_upload(request).kind == UploadErrorKind.EMPTY_FILE

    @pytest.mark.parametrize("content_type", sorted(ALLOWED_CONTENT_TYPES))
    def test_allowed_types_pass(self, content_type):
        assert validate_upload(make_request(content_type=content_type)) is None

    @pytest.mark.parametrize("content_type", ["IMAGE/PNG", "Image/Jpeg", " image/webp "])
    def test_content_type_check_ignores_case(self, content_type):
        assert validate_upload(make_request(content_type=content_type)) is None

    @pytest.mark.parametrize(
        "content_type",
        ["application/pdf", "image/svg+xml", "image/bmp", "text/plain", ""],
    )
    def test_other_types_are_unsupported(self, content_type):
        error = validate_upload(make_request(content_type=content_type))

        assert error.kind == UploadErrorKind.UNSUPPORTED_TYPE
        assert "Only image files are allowed" in error.message

    def test_size_at_limit_passes(self):
        assert validate_upload(make_request(size=MAX_UPLOAD_BYTES)) is None

    def test_size_above_limit_is_too_large(self):
        error = validate_upload(make_request(size=MAX_UPLOAD_BYTES + 1))

        assert error.kind == UploadErrorKind.TOO_LARGE
        assert "5MB" in error.message

    def test_empty_check_runs_before_type_check(self):
        error = validate_upload(make_request(size=0, data=b"", content_type="text/plain"))

        assert error.kind == UploadErrorKind.EMPTY_FILE

    def test_type_check_runs_before_size_check(self):
        error = validate_upload(
            make_request(size=MAX_UPLOAD_BYTES + 1, content_type="application/zip")
        )

        assert error.kind == UploadErrorKind.UNSUPPORTED_TYPE


class TestExtractExtension:
    """Tests for extract_extension."""

    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("photo.jpg", ".jpg"),
            ("photo.JPG", ".JPG"),
            ("archive.tar.Gz", ".Gz"),
            ("noextension", ""),
            ("trailingdot.", ""),
            ("", ""),
            (None, ""),
            ("dir.v2/photo", ""),
            ("C:\\Users\\me\\cat.PNG", ".PNG"),
        ],
    )
    def test_extract_extension(self, file_name, expected):
        assert extract_extension(file_name) == expected


class TestGenerateKey:
    """Tests for generate_key."""

    def test_key_is_uuid_plus_extension(self):
        key = generate_key("photo.JPG")

        assert key.endswith(".JPG")
        uuid.UUID(key[: -len(".JPG")])

    def test_keys_are_unique_for_same_name(self):
        keys = {generate_key("photo.jpg") for _ in range(100)}

        assert len(keys) == 100
