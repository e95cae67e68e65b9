"""Root and health check endpoints."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from services.image_upload.app.api.deps import AppSettings

router = APIRouter()


@router.get("/")
async def root(settings: AppSettings):
    """Greeting."""
    return {"ok": True, "message": settings.greeting}


@router.get("/health", response_class=PlainTextResponse)
async def health_check():
    """Liveness check. Does not touch storage."""
    return PlainTextResponse("healthy")
