"""Correlation ID middleware for request tracing."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.utils.logging import set_correlation_id


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Take the caller's correlation ID or mint one, and echo it back."""

    CORRELATION_ID_HEADER = "X-Correlation-ID"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        correlation_id = set_correlation_id(request.headers.get(self.CORRELATION_ID_HEADER))
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[self.CORRELATION_ID_HEADER] = correlation_id
        return response
