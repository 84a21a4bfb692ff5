# backend/dca_tracker/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging verbosity and output format
- RATE_LIMIT_ENABLED: Toggle slowapi rate limiting
- ANALYTICS_CACHE_*: Report cache toggle, TTL and size

The analytics algorithm thresholds are NOT configurable here; they live in
dca_tracker/services/constants.py.

Usage:
    from dca_tracker.config import settings

    limiter = Limiter(..., enabled=settings.rate_limit_enabled)
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Single .env in the project root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - APP_NAME: Application name (default: "DCA Tracker")
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - RATE_LIMIT_ENABLED: Enable per-client rate limits (default: True)

    Analytics cache settings:
        - ANALYTICS_CACHE_ENABLED: Cache full reports (default: True)
        - ANALYTICS_CACHE_TTL_SECONDS: Entry lifetime (default: 3600)
        - ANALYTICS_CACHE_MAX_SIZE: Max cached reports (default: 256)
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    app_name: str = "DCA Tracker"

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    rate_limit_enabled: bool = Field(
        default=True,
        description="Apply slowapi rate limits to API endpoints"
    )

    # =========================================================================
    # ANALYTICS CACHE
    # =========================================================================
    analytics_cache_enabled: bool = Field(
        default=True,
        description="Cache analytics reports keyed by their full input"
    )
    analytics_cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="Cached report lifetime in seconds"
    )
    analytics_cache_max_size: int = Field(
        default=256,
        ge=1,
        le=10000,
        description="Maximum number of cached reports"
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Allowed CORS origins (JSON list in env var)"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"],
        description="Allowed HTTP methods for CORS"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        description="Allowed HTTP headers for CORS"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper().strip()


# Create single instance
settings = Settings()
