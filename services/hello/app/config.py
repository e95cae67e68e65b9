"""Hello service configuration via environment variables."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Hello service configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="HELLO_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    service_name: str = "hello"
    port: int = Field(default=8080, validation_alias=AliasChoices("HELLO_PORT", "PORT", "port"))
    log_level: str = "INFO"
    log_json: bool = True

    secret: str = Field(
        default="(no secret)",
        validation_alias=AliasChoices("HELLO_SECRET", "MY_SECRET"),
    )

    # Telemetry is switched on by the presence of a connection string
    telemetry_connection_string: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "HELLO_TELEMETRY_CONNECTION_STRING",
            "APPLICATIONINSIGHTS_CONNECTION_STRING",
            "telemetry_connection_string",
        ),
    )

    @property
    def telemetry_enabled(self) -> bool:
        return bool(self.telemetry_connection_string)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
