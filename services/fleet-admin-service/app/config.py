"""
Configuration module for the fleet admin service.

Centralized configuration management using Pydantic settings. Every value can be
overridden through environment variables or a .env file and is validated when
the settings object is created.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://xuperb.spinwish.tech/api/v1"


class Settings(BaseSettings):
    """
    Application settings for the fleet admin service.

    Attributes:
        API_URL: Versioned base URL of the fleet management REST backend
        API_HEALTH_PATH: Path (relative to API_URL) probed by health checks
        AUTH_STORAGE_PATH: JSON file holding the persisted auth token
        CLEAR_AUTH_ON_UNAUTHORIZED: Drop stored credentials when the backend answers 401
        APP_NAME: Display name for the application
        SERVICE_NAME: Service identifier used in logs and health responses
        ENVIRONMENT: Deployment environment name
        DEBUG: Enable debug mode (exposes API docs)
        HOST: Server bind address
        PORT: Server port number
        LOG_LEVEL: Logging level
        LOG_JSON: Emit JSON structured logs instead of human-readable lines
        REQUEST_TIMEOUT: Default timeout for backend requests in seconds
        HEALTH_CHECK_TIMEOUT: Timeout for the backend health probe in seconds
        ENABLE_TRACING: Enable OpenTelemetry tracing
        OTLP_ENDPOINT: OTLP collector endpoint used when tracing is enabled
    """

    # Backend API
    API_URL: str = Field(
        default=DEFAULT_API_URL,
        description="Versioned base URL of the fleet management REST backend",
    )
    API_HEALTH_PATH: str = Field(
        default="health/",
        description="Path probed by backend health checks",
    )

    # Authentication storage
    AUTH_STORAGE_PATH: Path = Field(
        default=Path.home() / ".fleet-admin" / "storage.json",
        description="JSON file used as persistent local storage for auth tokens",
    )
    CLEAR_AUTH_ON_UNAUTHORIZED: bool = Field(
        default=False,
        description="Clear stored auth keys when the backend returns 401",
    )

    # Application configuration
    APP_NAME: str = Field(
        default="Fleet Admin",
        description="Display name for the application",
    )
    SERVICE_NAME: str = Field(
        default="fleet-admin-service",
        description="Service identifier",
    )
    ENVIRONMENT: str = Field(
        default="development",
        description="Deployment environment name",
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Server configuration
    HOST: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    PORT: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Server port number",
    )

    # Logging configuration
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Use JSON structured logging",
    )

    # HTTP client configuration
    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=60.0,
        description="Default timeout for backend requests in seconds",
    )
    HEALTH_CHECK_TIMEOUT: float = Field(
        default=2.0,
        gt=0,
        le=30.0,
        description="Timeout for the backend health probe in seconds",
    )

    # Tracing
    ENABLE_TRACING: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )
    OTLP_ENDPOINT: Optional[str] = Field(
        default=None,
        description="OTLP collector endpoint",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("API_URL")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """
        Validate that the backend URL is properly formatted.

        Args:
            value: The URL to validate

        Returns:
            The validated URL without trailing slash

        Raises:
            ValueError: If URL is invalid
        """
        if not value:
            raise ValueError("API URL cannot be empty")

        value = value.rstrip("/")

        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError(
                f"API URL must start with http:// or https://, got: {value}"
            )

        return value

    @field_validator("AUTH_STORAGE_PATH")
    @classmethod
    def expand_storage_path(cls, value: Path) -> Path:
        """Expand ``~`` in the token storage path."""
        return value.expanduser()


# Global settings instance
settings = Settings()
