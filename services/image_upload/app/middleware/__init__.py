"""Middleware for the Image Upload Service."""

from services.image_upload.app.middleware.correlation import CorrelationMiddleware
from services.image_upload.app.middleware.logging import RequestLoggingMiddleware

__all__ = ["CorrelationMiddleware", "RequestLoggingMiddleware"]
