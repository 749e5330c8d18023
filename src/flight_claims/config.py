"""
Runtime configuration for the Flight Claims engine.
Values come from ``FLIGHT_CLAIMS_*`` environment variables or a ``.env`` file.
"""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="FLIGHT_CLAIMS_", extra="ignore")

    # Flight data providers
    aviationstack_api_key: str = ""
    aviationstack_base_url: str = "http://api.aviationstack.com/v1"
    flightlabs_api_key: str = ""
    flightlabs_base_url: str = "https://app.goflightlabs.com"
    provider_timeout_s: float = Field(default=10.0, gt=0)
    lookup_cache_ttl_s: float = Field(default=900.0, ge=0)
    lookup_cache_size: int = Field(default=512, ge=1)

    # Reconciliation and eligibility
    reconcile_tolerance_minutes: int = Field(default=15, ge=0)
    low_confidence_threshold: float = Field(default=0.5, ge=0, le=1)

    # Refund guarantee windows
    filing_deadline_hours: int = Field(default=48, gt=0)
    refund_request_window_hours: int = Field(default=24, gt=0)

    # Background sweeps
    sweep_interval_minutes: int = Field(default=15, gt=0)
    follow_up_interval_minutes: int = Field(default=60, gt=0)
    sweep_workers: int = Field(default=8, ge=1)

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"FLIGHT_CLAIMS_LOG_LEVEL must be a logging level, got {v!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()


__all__ = ["Settings", "get_settings"]
