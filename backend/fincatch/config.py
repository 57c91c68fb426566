# backend/fincatch/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- DATA_API_*: Location and timeout of the Fin-Catch market data API
- FX_CACHE_TTL_SECONDS: Lifetime of cached "current" exchange rates
- MAX_CONCURRENT_FETCHES: Bound on concurrent price/rate requests
- DATABASE_URL: Coupon payment store (SQLite or PostgreSQL)

Environment-specific behavior:
- test: Forces an in-memory SQLite coupon store
- development: Falls back to a local SQLite file when DATABASE_URL is unset
- production: Requires DATABASE_URL and an HTTPS data API

Usage:
    from fincatch.config import settings

    ttl = settings.fx_cache_ttl_seconds
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# The .env file lives in the project root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

_DEVELOPMENT_DATABASE_URL = "sqlite:///fincatch.db"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - DATA_API_BASE_URL: Base URL of the market data API
        - DATA_API_TOKEN: Optional bearer token for the data API
        - DATA_API_TIMEOUT_SECONDS: Per-request timeout (default: 30)
        - FX_CACHE_TTL_SECONDS: Exchange rate cache TTL (default: 300)
        - MAX_CONCURRENT_FETCHES: Concurrent fetch bound (default: 8)
        - DATABASE_URL: Coupon payment store connection string
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    app_name: str = "Fin-Catch Valuation Engine"
    debug: bool = Field(
        default=False,
        description="Echo SQL issued against the coupon store"
    )

    # =========================================================================
    # MARKET DATA API
    # =========================================================================
    data_api_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the Fin-Catch market data API"
    )
    data_api_token: str | None = Field(
        default=None,
        description="Bearer token sent to the data API (optional)"
    )
    data_api_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="HTTP timeout for a single data API request"
    )

    # =========================================================================
    # VALUATION ENGINE
    # =========================================================================
    fx_cache_ttl_seconds: int = Field(
        default=300,
        ge=0,
        le=86400,
        description="How long a current exchange rate stays cached"
    )
    max_concurrent_fetches: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Maximum number of in-flight price/rate requests"
    )

    # =========================================================================
    # COUPON PAYMENT STORE
    # =========================================================================
    database_url: str | None = Field(
        default=None,
        description="Connection string for the coupon payment store"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_environment(self) -> "Settings":
        """
        Validate storage and data API configuration per environment.

        Rules:
        - test: in-memory SQLite, whatever DATABASE_URL says
        - development: local SQLite file when DATABASE_URL is unset
        - production: DATABASE_URL required, data API must use HTTPS
        """
        if self.environment == "test":
            object.__setattr__(self, "database_url", "sqlite:///:memory:")
            return self

        if self.environment == "development":
            if self.database_url is None:
                object.__setattr__(self, "database_url", _DEVELOPMENT_DATABASE_URL)
            return self

        if self.database_url is None:
            raise ValueError(
                "DATABASE_URL is required in production environment. "
                "Set DATABASE_URL to the coupon payment store connection string."
            )
        if not self.data_api_base_url.lower().startswith("https://"):
            raise ValueError(
                "Production environment requires an HTTPS data API. "
                f"DATA_API_BASE_URL must start with 'https://', got: {self.data_api_base_url}"
            )
        return self

    @property
    def is_sqlite(self) -> bool:
        """Check if the coupon store is SQLite."""
        return self.database_url is not None and self.database_url.lower().startswith("sqlite://")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
