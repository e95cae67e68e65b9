"""Shared utilities for the upload and hello services."""

from shared.utils.logging import (
    configure_logging,
    error_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)
from shared.utils.metrics import MetricsMiddleware, create_counter
from shared.utils.storage import ContainerAccess, ObjectStore, ObjectStoreError, S3ObjectStore

__all__ = [
    "configure_logging",
    "error_context",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
    "MetricsMiddleware",
    "create_counter",
    "ContainerAccess",
    "ObjectStore",
    "ObjectStoreError",
    "S3ObjectStore",
]
