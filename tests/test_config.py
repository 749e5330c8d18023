"""
Tests for environment-driven settings.
"""

import os

import pytest
from pydantic import ValidationError

from flight_claims.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop any FLIGHT_CLAIMS_* variables from the test environment."""
    for key in list(os.environ):
        if key.startswith("FLIGHT_CLAIMS_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        """Test the documented default windows and intervals."""
        settings = Settings()

        assert settings.filing_deadline_hours == 48
        assert settings.refund_request_window_hours == 24
        assert settings.reconcile_tolerance_minutes == 15
        assert settings.low_confidence_threshold == 0.5
        assert settings.sweep_interval_minutes == 15
        assert settings.aviationstack_api_key == ""
        assert settings.log_level == "INFO"

    def test_env_override(self, monkeypatch) -> None:
        """Test prefixed environment variables override defaults."""
        monkeypatch.setenv("FLIGHT_CLAIMS_FILING_DEADLINE_HOURS", "72")
        monkeypatch.setenv("FLIGHT_CLAIMS_AVIATIONSTACK_API_KEY", "secret")
        monkeypatch.setenv("FLIGHT_CLAIMS_LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.filing_deadline_hours == 72
        assert settings.aviationstack_api_key == "secret"
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch) -> None:
        """Test an unknown log level is rejected."""
        monkeypatch.setenv("FLIGHT_CLAIMS_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_window(self) -> None:
        """Test non-positive windows are rejected."""
        with pytest.raises(ValidationError):
            Settings(filing_deadline_hours=0)

    def test_get_settings_cached(self, monkeypatch) -> None:
        """Test get_settings returns one instance until the cache is cleared."""
        first = get_settings()
        assert get_settings() is first

        monkeypatch.setenv("FLIGHT_CLAIMS_SWEEP_WORKERS", "2")
        assert get_settings().sweep_workers == first.sweep_workers

        get_settings.cache_clear()
        assert get_settings().sweep_workers == 2
