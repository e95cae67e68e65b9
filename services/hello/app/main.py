"""Hello service - a plain-text greeting server with optional telemetry."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from services.hello.app.config import Settings, get_settings
from shared.utils.logging import configure_logging, error_context, get_logger
from shared.utils.metrics import MetricsMiddleware, create_counter, metrics_endpoint

logger = get_logger(__name__)

# The server answers whatever method it is sent
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

EVENTS_TOTAL = create_counter(
    "hello_events_total",
    "Custom telemetry events",
    ["name"],
)


def track_event(name: str) -> None:
    """Record a named telemetry event."""
    EVENTS_TOTAL.labels(name=name).inc()
    logger.info("telemetry_event", name=name)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the hello application.

    Telemetry (the startup event, request metrics and /metrics) is wired
    only when a telemetry connection string is configured.
    """
    settings = settings or get_settings()

    configure_logging(
        service_name=settings.service_name,
        log_level=settings.log_level,
        json_format=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "starting_service",
            service=settings.service_name,
            telemetry_enabled=settings.telemetry_enabled,
        )
        if settings.telemetry_enabled:
            track_event("AppStarted")
        yield

    app = FastAPI(title="Hello Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    if settings.telemetry_enabled:
        app.add_middleware(MetricsMiddleware)
        app.add_route("/metrics", metrics_endpoint)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception", path=request.url.path, **error_context(exc))
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.api_route("/fail", methods=ALL_METHODS)
    async def fail():
        """Always fails; used to check error reporting end to end."""
        raise RuntimeError("Boom")

    @app.api_route("/{path:path}", methods=ALL_METHODS, response_class=PlainTextResponse)
    async def hello(path: str):
        return f"Hello Secure World! Secret={settings.secret}\n"

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.hello.app.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=get_settings().port,
    )
