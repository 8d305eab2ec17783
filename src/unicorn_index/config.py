"""
Application settings.

Values are read from environment variables prefixed with ``UNICORN_INDEX_``
(and an optional ``.env`` file), e.g. ``UNICORN_INDEX_RATE_LIMIT_INTERVAL=2``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Longest window the weather API serves in one request
MAX_ANALYSIS_DAYS = 92


class Settings(BaseSettings):
    """Runtime configuration with validation."""

    model_config = SettingsConfigDict(
        env_prefix="UNICORN_INDEX_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "unicorn-index"
    app_env: str = "development"
    debug: bool = False

    # External APIs
    github_api_url: str = "https://api.github.com"
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"

    # Weather location (Bangalore)
    lat: float = Field(default=12.9716, ge=-90, le=90)
    lon: float = Field(default=77.5946, ge=-180, le=180)
    timezone: str = "Asia/Kolkata"

    # Industry baseline
    baseline_orgs: list[str] = Field(
        default_factory=lambda: ["zerodha", "razorpay", "postmanlabs", "hasura"]
    )
    analysis_days: int = Field(default=30, ge=1, le=MAX_ANALYSIS_DAYS)
    # None means each series is scaled by its own maximum
    normalization_max: float | None = Field(default=None, gt=0)

    # Request policy
    rate_limit_interval: float = Field(default=1.0, ge=0)
    request_timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=1)
    backoff_base: float = Field(default=1.0, ge=0)
    backoff_jitter: float = Field(default=1.0, ge=0)
    max_workers: int = Field(default=4, ge=1)
    event_pages: int = Field(default=3, ge=1, le=10)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
