"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Tests (ignore any local .env)
    settings = Settings(environment="test", database_url="sqlite://", _env_file=None)
"""

import json
from functools import lru_cache
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production, test",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )

    # -------------------------------------------------------------------------
    # HTTP Server
    # -------------------------------------------------------------------------
    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to",
    )
    port: int = Field(
        default=3000,
        description="HTTP listen port",
    )
    static_dir: str = Field(
        default="public",
        description="Directory with the browser front-end, served at / when present",
    )

    # -------------------------------------------------------------------------
    # Session Store
    # -------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite:///./chat.db",
        description="SQLAlchemy database URL (sqlite:/// or postgresql+psycopg://)",
    )

    # -------------------------------------------------------------------------
    # Completion Provider (OpenAI-compatible, Groq by default)
    # -------------------------------------------------------------------------
    groq_api_key: Optional[str] = Field(
        default=None,
        description="API key for the completion provider",
    )
    completion_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="Base URL of the OpenAI-compatible completion API",
    )
    default_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Model used for chat completions",
    )
    completion_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for a single completion request",
    )
    completion_max_retries: int = Field(
        default=2,
        ge=0,
        description="Retries performed internally by the provider SDK",
    )
    history_window: int = Field(
        default=15,
        ge=1,
        description="Number of most recent messages sent with each completion",
    )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------
    allowed_origins: List[str] = Field(
        default_factory=list,
        description="Allowed CORS origins. If empty, defaults to localhost:3000/3001.",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v: Union[str, List[str], None]) -> List[str]:
        """Accept JSON array, comma-separated string, or list."""
        if v is None:
            return []
        if isinstance(v, list):
            return v
        v = v.strip()
        if not v:
            return []
        if v.startswith("["):
            return json.loads(v)
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {valid_levels}")
        return v.upper()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def allowed_origins_list(self) -> List[str]:
        """CORS origins with the local development fallback applied."""
        if self.allowed_origins:
            return self.allowed_origins
        return ["http://localhost:3000", "http://localhost:3001"]

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
