"""Configuration management for the Gmail HTTP API.

This module handles application configuration using Pydantic settings.
Configuration is loaded from environment variables or a local .env file.
The variable names are fixed by the deployment contract, so no prefix is used
(e.g. GOOGLE_CLIENT_ID, API_KEY, PORT).
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gmail_http_api.exceptions import ConfigurationError

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OAuth client credentials (from Google Cloud Console)
    google_client_id: str = Field(
        min_length=1,
        description="OAuth client ID",
    )
    google_client_secret: str = Field(
        min_length=1,
        description="OAuth client secret",
    )

    # OAuth tokens (obtained once with scripts/get_tokens.py)
    google_refresh_token: str = Field(
        min_length=1,
        description="Long-lived OAuth refresh token",
    )
    google_access_token: str | None = Field(
        default=None,
        description="Optional seed access token; refreshed on demand",
    )
    google_token_uri: str = Field(
        default=GOOGLE_TOKEN_URI,
        description="OAuth token endpoint used for refreshes",
    )

    gmail_user_id: str = Field(
        default="me",
        description="Gmail user ID used for every API call",
    )

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="HTTP port")
    api_key: str | None = Field(
        default=None,
        description="Shared secret expected in the x-api-key header; unset disables the check",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    # Application configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @field_validator("api_key", "google_access_token", mode="before")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def auth_enabled(self) -> bool:
        """Whether requests must carry the shared API key."""
        return self.api_key is not None


def load_settings(**overrides: object) -> Settings:
    """Load settings, turning validation failures into a ConfigurationError.

    Raises:
        ConfigurationError: If a required variable is missing or invalid.
    """
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        lines = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())).upper()
            lines.append(f"{field}: {error.get('msg', 'invalid value')}")
        raise ConfigurationError("Environment configuration error:\n" + "\n".join(lines)) from exc


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return load_settings()
