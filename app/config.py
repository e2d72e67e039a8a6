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
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Postgres (via PostgREST) and Storage. Required.

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    # -------------------------------------------------------------------------
    # Google OAuth Configuration
    # -------------------------------------------------------------------------

    GOOGLE_CLIENT_ID: str = Field(
        ...,
        description="OAuth client ID from the Google Cloud console"
    )

    GOOGLE_CLIENT_SECRET: str = Field(
        ...,
        description="OAuth client secret from the Google Cloud console"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # OpenAI / Food Analysis Configuration
    # -------------------------------------------------------------------------
    # Optional - without a key every analysis uses the fallback values

    OPENAI_API_KEY: str = Field(
        default="",
        description="OpenAI API key for food image/text analysis"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Vision-capable model used for food analysis (must support JSON mode)"
    )

    ANALYSIS_TEMPERATURE: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for food analysis"
    )

    ANALYSIS_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single analysis request"
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
        default=5000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    FRONTEND_URL: str = Field(
        default="http://localhost:5000",
        description="Base URL of the web client (OAuth redirects land here)"
    )

    FRONTEND_DIST_DIR: str | None = Field(
        default=None,
        description="Directory holding a built SPA bundle to serve at /"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing session cookies and bearer tokens"
    )

    SESSION_MAX_AGE_SECONDS: int = Field(
        default=24 * 60 * 60,
        ge=60,
        description="Lifetime of the session cookie"
    )

    ACCESS_TOKEN_TTL_MINUTES: int = Field(
        default=60,
        ge=1,
        description="Lifetime of bearer tokens issued by /auth/token"
    )

    DEMO_LOGIN_ENABLED: bool = Field(
        default=True,
        description="Allow POST /auth/demo to sign in as the shared demo user"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Image Upload Settings
    # -------------------------------------------------------------------------

    MAX_IMAGE_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum food image size in MB"
    )

    ALLOWED_IMAGE_TYPES: str = Field(
        default="image/jpeg,image/png,image/webp,image/gif",
        description="Allowed image content types (comma-separated)"
    )

    IMAGE_BUCKET: str = Field(
        default="food-images",
        description="Supabase Storage bucket for listing images"
    )

    # -------------------------------------------------------------------------
    # Listings & Background Jobs
    # -------------------------------------------------------------------------

    LISTINGS_DEFAULT_LIMIT: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Default page size for GET /food-listings"
    )

    LISTING_EXPIRY_SWEEP_SECONDS: int = Field(
        default=300,
        ge=10,
        description="How often the worker deactivates expired listings"
    )

    PLATFORM_STATS_REFRESH_SECONDS: int = Field(
        default=900,
        ge=10,
        description="How often the worker recomputes platform statistics"
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

        Example: "http://localhost:5000, https://ecoshare.app" -> ["http://localhost:5000", "https://ecoshare.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def allowed_image_types_list(self) -> list[str]:
        """
        Parse ALLOWED_IMAGE_TYPES string into a list.

        Example: "image/jpeg, image/png" -> ["image/jpeg", "image/png"]
        """
        return [t.strip().lower() for t in self.ALLOWED_IMAGE_TYPES.split(",") if t.strip()]

    @property
    def max_image_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024

    @property
    def ai_enabled(self) -> bool:
        """Food analysis calls OpenAI only when a key is configured."""
        return bool(self.OPENAI_API_KEY.strip())

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

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
