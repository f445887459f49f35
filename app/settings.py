"""Centralized client settings using pydantic-settings."""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Completion client configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="TESTPILOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Endpoint settings
    llm_api_endpoint: str | None = Field(default=None, description="Chat completion endpoint URL")
    llm_auth_headers: str | None = Field(
        default=None, description="JSON object of headers merged into every request"
    )
    llm_model: str = Field(default="gpt-4o-mini", description="Model identifier sent with each request")
    llm_attempts: int = Field(default=3, ge=1, description="Maximum request attempts including the first")
    llm_timeout_seconds: float = Field(default=120.0, gt=0, description="HTTP timeout in seconds")

    # Request options
    llm_max_tokens: int = Field(default=1000, ge=1, description="Maximum completion tokens")
    llm_temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="Sampling temperature")
    llm_top_p: float = Field(default=1.0, ge=0.0, le=1.0, description="Nucleus sampling mass")

    # Rate limiting
    rate_limiter: Literal["fixed", "benchmark", "none"] = Field(
        default="fixed", description="Rate limiter policy"
    )
    rate_limit_interval_seconds: float = Field(
        default=1.0, ge=0.0, description="Minimum delay between admitted requests"
    )
    rate_limit_max_interval_seconds: float = Field(
        default=30.0, ge=0.0, description="Upper bound for the adaptive limiter delay"
    )

    # Retry backoff
    retry_wait_min_seconds: float = Field(default=1.0, ge=0.0, description="Lower retry backoff bound")
    retry_wait_max_seconds: float = Field(default=10.0, ge=0.0, description="Upper retry backoff bound")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path | None = Field(default=None, description="Optional directory for rotating log files")


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
