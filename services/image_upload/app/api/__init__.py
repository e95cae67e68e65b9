"""Image Upload API routes."""

from fastapi import APIRouter

from services.image_upload.app.api.routes import health, upload

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(upload.router, tags=["upload"])

__all__ = ["api_router"]
