# src/uploads_api/settings.py
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    The instance is frozen: it is built once at process start and handed to
    ``create_app``, which passes the values on to each component.

    Usage:
        from uploads_api.settings import get_settings
        settings = get_settings()
        storage_root = settings.volume_path
    """

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to"
    )

    port: int = Field(
        default=3000,
        description="Port the HTTP server listens on"
    )

    base_url: str = Field(
        default="http://localhost:3000",
        description="Externally visible base URL used to build download links"
    )

    # Storage
    volume_path: str = Field(
        default="uploads",
        description="Directory holding uploaded files (created on demand)"
    )

    # Auth
    auth_token: Optional[str] = Field(
        default=None,
        description="Shared bearer secret; when unset every protected request is rejected"
    )

    # Logging
    log_level: str = Field(
        default="info",
        description="Logging level"
    )

    app_env: str = Field(
        default="development",
        description="Free-form environment name shown in logs and /health"
    )

    cors_allow_origins: List[str] = Field(
        default_factory=list,
        description="Origins allowed by CORS; empty disables the middleware"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept any stdlib level name, case-insensitively."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log_level: {v}")
        return level.lower()

    def summary(self) -> Dict[str, Any]:
        """Settings as a dict with the auth token redacted."""
        values = self.model_dump()
        values["auth_token"] = "***" if self.auth_token else "<unset>"
        return values

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
