# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.ERP_API_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The ERP connection values are NOT required at startup. A gateway without
# them still boots and answers every request with a configuration error,
# which is what the diagnostic endpoint (/api/test-env) is for.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance, or via
    get_settings() where a fresh cached instance is preferred.
    """

    # -------------------------------------------------------------------------
    # ERP Connection
    # -------------------------------------------------------------------------
    # Checked on every request; empty means "not configured"

    ERP_API_URL: str = Field(
        default="",
        description="Base URL of the Frappe/ERPNext site (e.g., https://erp.example.com)"
    )

    ERP_API_KEY: str = Field(
        default="",
        description="API key of the ERP integration user"
    )

    ERP_API_SECRET: str = Field(
        default="",
        description="API secret of the ERP integration user"
    )

    ERP_TIMEOUT_SECONDS: float | None = Field(
        default=None,
        gt=0,
        description="Transport timeout for ERP calls (unset = wait indefinitely)"
    )

    # -------------------------------------------------------------------------
    # Document Defaults
    # -------------------------------------------------------------------------

    DEFAULT_CURRENCY: str = Field(
        default="ETB",
        description="Currency applied to new documents that do not name one"
    )

    LIST_LIMIT: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Page size for list endpoints that hydrate every record"
    )

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum size of a file sent to /api/files"
    )

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment stage; production restricts CORS to CORS_ORIGINS"
    )

    DEBUG: bool = Field(
        default=False,
        description="Log at DEBUG level (includes every ERP call)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Bind address used by `python -m app.main`"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Bind port used by `python -m app.main`"
    )

    # Only enforced in production; other stages allow any origin
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Browser origins allowed to call the gateway (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Treat VAR= as unset
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS_ORIGINS split on commas, blanks dropped."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def missing_erp_settings(self) -> list[str]:
        """
        Names of the ERP connection variables that are not set.

        An empty list means the gateway can talk to the ERP.
        """
        values = {
            "ERP_API_URL": self.ERP_API_URL,
            "ERP_API_KEY": self.ERP_API_KEY,
            "ERP_API_SECRET": self.ERP_API_SECRET,
        }
        return [name for name, value in values.items() if not value.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MAX_UPLOAD_SIZE_MB to bytes."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Auto-reload is on in development."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Production is the only stage with a CORS allow-list."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """Settings parsed once per process (tests build their own Settings)."""
    return Settings()


# Process-wide settings used at startup (logging, CORS, the ERP client)
settings = get_settings()
