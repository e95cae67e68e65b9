"""Structured logging for the upload and hello services.

Every event carries the service name and, inside a request, the correlation
id set by the correlation middleware.
"""

import contextvars
import logging
import sys
import uuid
from typing import Any

import structlog

_correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


def get_correlation_id() -> str:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Use correlation_id for the current request, or a fresh UUID."""
    cid = correlation_id or str(uuid.uuid4())
    _correlation_id.set(cid)
    return cid


def _with_correlation_id(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    cid = _correlation_id.get()
    if cid:
        event_dict.setdefault("correlation_id", cid)
    return event_dict


def error_context(exc: BaseException) -> dict[str, Any]:
    """Describe an exception as log fields.

    Includes the message of the chained cause when there is one, which is
    where SDK wrappers usually keep the interesting part.
    """
    fields: dict[str, Any] = {
        "error": str(exc),
        "error_type": type(exc).__name__,
    }
    inner = exc.__cause__ or exc.__context__
    if inner is not None:
        fields["inner_error"] = str(inner)
        fields["inner_error_type"] = type(inner).__name__
    return fields


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Route structlog through stdlib logging on stdout.

    JSON lines in deployed environments, colored console output otherwise.
    Safe to call again; the last call wins.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _with_correlation_id,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level.upper(),
        force=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
