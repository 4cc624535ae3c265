# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import load_settings
#   settings = load_settings()
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Settings are read once at startup and handed to build_context(); there is
# no module-level settings instance. Missing required values raise
# ConfigError immediately instead of failing at first use.
# =============================================================================

from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from lib.errors import ConfigError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development
    """

    # -------------------------------------------------------------------------
    # Hosted Service (Supabase)
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

    # -------------------------------------------------------------------------
    # Backend API / Analytics
    # -------------------------------------------------------------------------

    API_URL: str = Field(
        ...,
        description="Base URL of the backend API (e.g., https://api.example.com/api)"
    )

    ANALYTICS_ENDPOINT: str = Field(
        ...,
        description="Full URL the page-view tracker POSTs events to"
    )

    # -------------------------------------------------------------------------
    # Data Access
    # -------------------------------------------------------------------------

    PUBLIC_COLLECTIONS: str = Field(
        default="blog_posts,projects,learning,work_history,education,certifications,skills,feature_flags",
        description="Collections readable without signing in (comma-separated)"
    )

    KEEPALIVE_COLLECTION: str = Field(
        default="blog_posts",
        description="Lightweight collection probed by the keep-alive endpoint"
    )

    # -------------------------------------------------------------------------
    # Session Settings
    # -------------------------------------------------------------------------

    SESSION_REFRESH_MARGIN_SECONDS: int = Field(
        default=60,
        ge=0,
        le=3600,
        description="Refresh the access token when less than this many seconds remain"
    )

    CREDENTIAL_STORE_PATH: str | None = Field(
        default=None,
        description="JSON file holding the persisted session (in-memory when unset)"
    )

    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for every outgoing HTTP request"
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
        description="Enable debug mode (verbose logging)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def public_collections_set(self) -> frozenset[str]:
        """
        Parse PUBLIC_COLLECTIONS into a set.

        Example: "blog_posts, projects" -> frozenset({"blog_posts", "projects"})
        """
        return frozenset(
            name.strip() for name in self.PUBLIC_COLLECTIONS.split(",") if name.strip()
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


def load_settings(**overrides) -> Settings:
    """
    Load and validate settings.

    Keyword overrides take precedence over the environment (used by tests and
    by callers that assemble configuration themselves).

    Raises:
        ConfigError: If a required value is missing or a value is invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = [
            ".".join(str(part) for part in err["loc"])
            for err in e.errors()
            if err["type"] == "missing"
        ]
        invalid = [
            ".".join(str(part) for part in err["loc"])
            for err in e.errors()
            if err["type"] != "missing"
        ]
        parts = []
        if missing:
            parts.append(f"missing {', '.join(missing)}")
        if invalid:
            parts.append(f"invalid {', '.join(invalid)}")
        raise ConfigError(f"Invalid configuration: {'; '.join(parts)}", missing=missing) from e
