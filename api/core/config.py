"""
Configuration helpers for the tracker backend.

Routers, stores and the app factory read settings through get_settings()
instead of fetching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    storage_backend: str
    seed_test_user: bool
    log_level: str
    cors_origins: tuple[str, ...]
    auth_rate_limit: int
    auth_rate_window_seconds: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    origins = tuple(o.strip().rstrip("/") for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip())
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", ""),
        storage_backend=(os.getenv("STORAGE_BACKEND") or "memory").strip().lower(),
        seed_test_user=_bool(os.getenv("SEED_TEST_USER"), True),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=origins,
        auth_rate_limit=_int(os.getenv("AUTH_RATE_LIMIT", "20"), 20),
        auth_rate_window_seconds=_int(os.getenv("AUTH_RATE_WINDOW_SECONDS", "60"), 60),
    )
