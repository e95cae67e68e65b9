"""Prometheus metrics shared by both services."""

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse


def create_counter(name: str, description: str, labels: list[str] | None = None) -> Counter:
    return Counter(name, description, labels or [])


REQUEST_COUNT = create_counter(
    "http_requests_total",
    "HTTP requests by method, route and status",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "Time to produce an HTTP response",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count requests and time responses, skipping the scrape endpoint."""

    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.exclude_paths = set(exclude_paths or ["/metrics"])

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        # Route template, not raw path; the hello catch-all would be unbounded
        route = request.scope.get("route")
        endpoint = route.path if route is not None else request.url.path

        REQUEST_COUNT.labels(request.method, endpoint, response.status_code).inc()
        REQUEST_LATENCY.labels(request.method, endpoint).observe(elapsed)
        return response


async def metrics_endpoint(request: Request) -> StarletteResponse:
    return StarletteResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
