"""Image Upload Service - FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.image_upload.app.api import api_router
from services.image_upload.app.config import Settings, get_settings
from services.image_upload.app.core.schemas import ProblemResponse
from services.image_upload.app.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from services.image_upload.app.upload.handler import UploadHandler
from shared.utils.logging import configure_logging, error_context, get_correlation_id, get_logger
from shared.utils.metrics import MetricsMiddleware, metrics_endpoint
from shared.utils.storage import ObjectStore, get_object_store

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    store: ObjectStore | None = None,
) -> FastAPI:
    """Build the application.

    Settings are resolved here, once. A missing storage endpoint raises
    StartupConfigurationError and the process never starts serving.

    Args:
        settings: Service settings (read from the environment if omitted)
        store: Object store (built from settings if omitted)
    """
    settings = settings or get_settings()

    configure_logging(
        service_name=settings.service_name,
        log_level=settings.log_level,
        json_format=settings.log_json,
    )

    store = store or get_object_store(
        endpoint_url=settings.storage_endpoint_url,
        region=settings.storage_region,
        addressing_style=settings.storage_addressing_style,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "starting_service",
            service=settings.service_name,
            container=settings.container_name,
            access_url_policy=settings.access_url_policy.value,
        )
        yield
        logger.info("shutting_down_service")

    app = FastAPI(
        title="Image Upload Service",
        description="Validates image uploads and stores them in object storage",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upload_handler = UploadHandler(store=store, settings=settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.metrics_enabled:
        app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.exception(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            **error_context(exc),
        )
        problem = ProblemResponse(
            detail=str(exc) or "An internal error occurred",
            correlation_id=get_correlation_id() or None,
        )
        return JSONResponse(
            status_code=500,
            content=problem.model_dump(by_alias=True, exclude_none=True),
            media_type="application/problem+json",
        )

    app.include_router(api_router)

    if settings.metrics_enabled:
        app.add_route("/metrics", metrics_endpoint)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.image_upload.app.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )
