"""Test fixtures for the image upload service."""

from datetime import datetime, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from services.image_upload.app.config import AccessUrlPolicy, Settings
from services.image_upload.app.main import create_app
from services.image_upload.app.upload.handler import UploadHandler
from shared.utils.storage import ObjectStore

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
SIGNED_URL = "https://storage.example.com/images/signed?X-Amz-Signature=abc"


@pytest.fixture
def fixed_now() -> datetime:
    """The time the handler clock is frozen at."""
    return FIXED_NOW


@pytest.fixture
def signed_url() -> str:
    """URL the mock store hands out when signing."""
    return SIGNED_URL


@pytest.fixture
def settings() -> Settings:
    """Settings with a fake storage endpoint and the signed URL policy."""
    return Settings(
        storage_endpoint_url="http://localhost:4566",
        access_url_policy=AccessUrlPolicy.SIGNED,
        log_json=False,
    )


@pytest.fixture
def public_settings() -> Settings:
    """Settings using plain object URLs on a public container."""
    return Settings(
        storage_endpoint_url="http://localhost:4566",
        access_url_policy=AccessUrlPolicy.PUBLIC,
        log_json=False,
    )


@pytest.fixture
def mock_store():
    """Create mock object store."""
    mock = MagicMock(spec=ObjectStore)
    mock.ensure_container = AsyncMock()
    mock.upload = AsyncMock()
    mock.sign = AsyncMock(return_value=SIGNED_URL)
    mock.object_url = MagicMock(
        side_effect=lambda container, key: f"http://localhost:4566/{container}/{key}"
    )
    return mock


@pytest.fixture
def handler(mock_store, settings) -> UploadHandler:
    """Upload handler with a mock store and a frozen clock."""
    return UploadHandler(store=mock_store, settings=settings, clock=lambda: FIXED_NOW)


@pytest_asyncio.fixture
async def client(settings, mock_store) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    app = create_app(settings=settings, store=mock_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_image():
    """Build bytes that start like a JPEG, padded to the requested size."""

    def _make(size: int) -> bytes:
        header = b"\xff\xd8\xff\xe0"
        if size <= len(header):
            return header[:size]
        return header + b"\x00" * (size - len(header))

    return _make
