# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Services never read the global instance directly; the container in
# app/dependencies.py passes a Settings object into each constructor.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Caps enforced by the triggers in supabase/migrations/0001_lokolo_core.sql.
# Schema constants, not settings: change them together with a migration.
MAX_PHOTOS_PER_BUSINESS = 3
MAX_DOCUMENTS_PER_REQUEST = 10


def _split_csv(value: str) -> list[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used when a token carries no key id"
    )

    DB_TIMEOUT_SECONDS: int = Field(
        default=10,
        ge=1,
        le=120,
        description="Timeout for PostgREST calls (spatial queries, RPCs)"
    )

    # -------------------------------------------------------------------------
    # Storage Configuration
    # -------------------------------------------------------------------------

    STORAGE_BUCKET: str = Field(
        default="lokolo-media",
        description="Bucket holding business media and verification documents"
    )

    UPLOAD_URL_TTL_SECONDS: int = Field(
        default=15 * 60,
        ge=60,
        description="Lifetime of signed upload URLs"
    )

    DOWNLOAD_URL_TTL_SECONDS: int = Field(
        default=60 * 60,
        ge=60,
        description="Lifetime of signed download URLs"
    )

    STORAGE_TIMEOUT_SECONDS: int = Field(
        default=3,
        ge=1,
        le=30,
        description="Timeout for a single storage gateway call"
    )

    # -------------------------------------------------------------------------
    # Search Settings
    # -------------------------------------------------------------------------

    SEARCH_DEFAULT_RADIUS_KM: float = Field(default=50.0, gt=0)
    SEARCH_MIN_RADIUS_KM: float = Field(default=1.0, gt=0)
    SEARCH_MAX_RADIUS_KM: float = Field(default=500.0, gt=0)

    NEARBY_DEFAULT_RADIUS_M: float = Field(
        default=10_000.0,
        gt=0,
        description="Radius used by /nearby when the caller sends none"
    )

    DEFAULT_PAGE_SIZE: int = Field(default=20, ge=1, le=100)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1, le=500)

    ENRICHMENT_MAX_WORKERS: int = Field(
        default=16,
        ge=1,
        le=100,
        description="Upper bound on threads used to sign logo URLs for one page"
    )

    ENRICHMENT_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        description="Time budget for per-result enrichment of one page"
    )

    # -------------------------------------------------------------------------
    # Media & Verification Limits
    # -------------------------------------------------------------------------

    MAX_IMAGE_SIZE_MB: int = Field(default=5, ge=1)

    MAX_DOCUMENT_SIZE_MB: int = Field(default=10, ge=1)

    ALLOWED_IMAGE_TYPES: str = Field(
        default="image/jpeg,image/jpg,image/png,image/webp",
        description="Allowed MIME types for logos and photos (comma-separated)"
    )

    ALLOWED_DOCUMENT_TYPES: str = Field(
        default="application/pdf,image/jpeg,image/jpg,image/png",
        description="Allowed MIME types for verification documents (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://lokolo.app" -> ["http://localhost:3000", "https://lokolo.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_image_types_list(self) -> list[str]:
        return _split_csv(self.ALLOWED_IMAGE_TYPES)

    @property
    def allowed_document_types_list(self) -> list[str]:
        return _split_csv(self.ALLOWED_DOCUMENT_TYPES)

    @property
    def max_image_size_bytes(self) -> int:
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024

    @property
    def max_document_size_bytes(self) -> int:
        return self.MAX_DOCUMENT_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
