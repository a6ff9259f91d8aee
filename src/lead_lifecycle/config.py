"""Environment-based configuration for the lead lifecycle engine."""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("json", "sqlite", "memory")


class Settings:
    """Engine configuration loaded from environment variables."""

    def __init__(self):
        self.environment = os.getenv("LEAD_ENGINE_ENV", "production")
        self.data_dir = Path(
            os.getenv("LEAD_ENGINE_DATA_DIR", str(Path.home() / ".lead-lifecycle"))
        )
        self.storage = os.getenv("LEAD_ENGINE_STORAGE", "json").lower()
        if self.storage not in STORAGE_BACKENDS:
            logger.warning(f"Unknown storage backend '{self.storage}', using json")
            self.storage = "json"

        # 0 keeps every activity
        max_activities = int(os.getenv("LEAD_ENGINE_MAX_ACTIVITIES", "0"))
        self.max_activities: Optional[int] = max_activities if max_activities > 0 else None

        self.session_ttl_days = int(os.getenv("LEAD_ENGINE_SESSION_TTL_DAYS", "30"))
        self.log_level = os.getenv("LEAD_ENGINE_LOG_LEVEL", "INFO").upper()

        self.host = os.getenv("LEAD_ENGINE_HOST", "0.0.0.0")
        self.port = int(os.getenv("LEAD_ENGINE_PORT", "8000"))

    @property
    def debug(self) -> bool:
        return self.environment != "production"

    @classmethod
    def from_overrides(cls, **overrides) -> "Settings":
        """Build settings from the environment, then apply explicit overrides."""
        instance = cls()
        for name, value in overrides.items():
            if value is None:
                continue
            if not hasattr(instance, name):
                raise AttributeError(f"Unknown setting: {name}")
            if name == "data_dir":
                value = Path(value)
            elif name == "max_activities" and value <= 0:
                value = None
            setattr(instance, name, value)
        return instance


_settings = None


def _get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None


class _SettingsProxy:
    """Lazy proxy so settings aren't loaded until first access."""

    def __getattr__(self, name):
        return getattr(_get_settings(), name)


settings = _SettingsProxy()


def configure_logging(level: Optional[str] = None):
    """Configure root logging once for a process entry point."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
