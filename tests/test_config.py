"""Tests for environment configuration."""

import pytest
from pathlib import Path

from lead_lifecycle.config import Settings, reset_settings, settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("ENV", "DATA_DIR", "STORAGE", "MAX_ACTIVITIES", "SESSION_TTL_DAYS", "PORT"):
            monkeypatch.delenv(f"LEAD_ENGINE_{name}", raising=False)

        config = Settings()
        assert config.environment == "production"
        assert config.storage == "json"
        assert config.max_activities is None
        assert config.session_ttl_days == 30
        assert config.port == 8000
        assert config.data_dir == Path.home() / ".lead-lifecycle"
        assert not config.debug

    def test_environment_variables(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LEAD_ENGINE_ENV", "development")
        monkeypatch.setenv("LEAD_ENGINE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("LEAD_ENGINE_STORAGE", "SQLite")
        monkeypatch.setenv("LEAD_ENGINE_MAX_ACTIVITIES", "100")

        config = Settings()
        assert config.debug
        assert config.data_dir == tmp_path
        assert config.storage == "sqlite"
        assert config.max_activities == 100

    def test_unknown_storage_falls_back(self, monkeypatch):
        monkeypatch.setenv("LEAD_ENGINE_STORAGE", "redis")
        assert Settings().storage == "json"

    def test_overrides(self, tmp_path):
        config = Settings.from_overrides(data_dir=str(tmp_path), storage="memory", max_activities=0, port=None)

        assert config.data_dir == tmp_path
        assert config.storage == "memory"
        assert config.max_activities is None
        assert config.port == Settings().port

    def test_unknown_override(self):
        with pytest.raises(AttributeError):
            Settings.from_overrides(colour="blue")

    def test_lazy_proxy(self, monkeypatch):
        monkeypatch.setenv("LEAD_ENGINE_ENV", "staging")
        reset_settings()
        try:
            assert settings.environment == "staging"
        finally:
            reset_settings()
