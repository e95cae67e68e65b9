"""Image Upload Service configuration via environment variables."""

from enum import Enum
from functools import lru_cache

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fixed upload policy, shared read-only by every request
ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class AccessUrlPolicy(str, Enum):
    """How uploaded objects are made readable.

    Chosen once per deployment: a signed policy keeps the container private,
    a public policy opens it for anonymous reads.
    """

    SIGNED = "signed"
    PUBLIC = "public"


class StartupConfigurationError(RuntimeError):
    """Configuration is missing or invalid; the service cannot start."""


class Settings(BaseSettings):
    """Image Upload Service configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="UPLOAD_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Service settings
    service_name: str = "image-upload"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = True
    greeting: str = "Hello from the image upload service!"

    # Storage settings
    storage_endpoint_url: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices(
            "UPLOAD_STORAGE_ENDPOINT_URL",
            "STORAGE_ENDPOINT_URL",
            "storage_endpoint_url",
        ),
    )
    storage_region: str = "us-east-1"
    storage_addressing_style: str = "path"  # 'path' or 'virtual'
    container_name: str = "images"

    # Access URL settings
    access_url_policy: AccessUrlPolicy = AccessUrlPolicy.SIGNED
    signed_url_ttl_seconds: int = Field(default=7 * 24 * 3600, gt=0, le=7 * 24 * 3600)

    # Telemetry
    metrics_enabled: bool = True

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        StartupConfigurationError: If the storage endpoint is not configured
            or any setting fails validation
    """
    try:
        return Settings()
    except ValidationError as e:
        missing = [
            ".".join(str(part) for part in err["loc"])
            for err in e.errors()
            if err["type"] == "missing"
        ]
        if any("storage_endpoint_url" in loc.lower() for loc in missing):
            raise StartupConfigurationError(
                "Storage endpoint not found. Set UPLOAD_STORAGE_ENDPOINT_URL "
                "or the STORAGE_ENDPOINT_URL environment variable."
            ) from e
        raise StartupConfigurationError(f"Invalid configuration: {e}") from e
