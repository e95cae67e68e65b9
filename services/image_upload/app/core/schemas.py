"""Schemas for the Image Upload Service."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadErrorKind(str, Enum):
    """Why an upload was not stored."""

    EMPTY_FILE = "empty_file"
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    DEPENDENCY_FAILURE = "dependency_failure"


CLIENT_ERROR_KINDS = frozenset(
    {
        UploadErrorKind.EMPTY_FILE,
        UploadErrorKind.UNSUPPORTED_TYPE,
        UploadErrorKind.TOO_LARGE,
    }
)


@dataclass
class UploadRequest:
    """One uploaded file as received from the client.

    The body is either already in file_bytes or fetched later through reader,
    so an upload can be rejected on its declared size without reading it.
    """

    file_bytes: bytes | None
    declared_content_type: str
    declared_file_name: str
    size_bytes: int
    reader: Callable[[], Awaitable[bytes]] | None = None

    @property
    def has_content(self) -> bool:
        return bool(self.file_bytes) or self.reader is not None

    async def read(self) -> bytes:
        if self.file_bytes is None and self.reader is not None:
            self.file_bytes = await self.reader()
        return self.file_bytes or b""


@dataclass
class UploadError:
    """A rejected or failed upload."""

    kind: UploadErrorKind
    message: str
    stage: str | None = None

    @property
    def is_client_error(self) -> bool:
        return self.kind in CLIENT_ERROR_KINDS


class StoredObject(BaseModel):
    """An object written to the store by a successful upload."""

    generated_key: str
    content_type: str
    size_bytes: int
    access_url: str
    expires_at: Optional[datetime] = None


@dataclass
class UploadResult:
    """Outcome of handling one upload: a stored object or an error, never both."""

    stored: StoredObject | None = None
    error: UploadError | None = None

    @classmethod
    def success(cls, stored: StoredObject) -> "UploadResult":
        return cls(stored=stored)

    @classmethod
    def failure(cls, error: UploadError) -> "UploadResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.stored is not None


class UploadResponse(BaseModel):
    """Success body of POST /upload-image."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    file_name: str = Field(..., alias="fileName")
    url: str
    size: int
    content_type: str = Field(..., alias="contentType")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")

    @classmethod
    def from_stored(cls, stored: StoredObject) -> "UploadResponse":
        return cls(
            file_name=stored.generated_key,
            url=stored.access_url,
            size=stored.size_bytes,
            content_type=stored.content_type,
            expires_at=stored.expires_at,
        )


class ErrorResponse(BaseModel):
    """Body returned for rejected client input."""

    error: str


class ProblemResponse(BaseModel):
    """RFC 7807 problem details for server-side failures."""

    type: str = "about:blank"
    title: str = "An error occurred while processing your request."
    status: int = 500
    detail: str
    correlation_id: Optional[str] = Field(None, alias="correlationId")

    model_config = ConfigDict(populate_by_name=True)
