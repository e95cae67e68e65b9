"""API dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from services.image_upload.app.config import Settings
from services.image_upload.app.upload.handler import UploadHandler


def get_app_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def get_upload_handler(request: Request) -> UploadHandler:
    """Upload handler created once at startup."""
    return request.app.state.upload_handler


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Handler = Annotated[UploadHandler, Depends(get_upload_handler)]
