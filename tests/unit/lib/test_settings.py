"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from dochub.lib.config import Settings


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_lock_defaults(self, monkeypatch):
        for name in ("LOCK_DEFAULT_TTL_MINUTES", "LOCK_MAX_EXTEND_MINUTES", "LOCK_ISOLATION_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.lock_default_ttl_minutes == 30
        assert settings.lock_max_extend_minutes == 120
        assert settings.lock_transaction_timeout_seconds == 5.0
        assert settings.lock_isolation_level == "SERIALIZABLE"
        assert settings.lock_sweep_interval_seconds is None

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("LOCK_DEFAULT_TTL_MINUTES", "15")
        monkeypatch.setenv("API_KEY", "secret")

        settings = Settings(_env_file=None)

        assert settings.lock_default_ttl_minutes == 15
        assert settings.api_key == "secret"

    def test_rejects_non_positive_ttl(self, monkeypatch):
        monkeypatch.setenv("LOCK_DEFAULT_TTL_MINUTES", "0")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)
