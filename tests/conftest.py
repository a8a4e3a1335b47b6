from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Make the api package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api.core import config as core_config  # noqa: E402
from api.db import models  # noqa: E402
from api.db import session as db_session  # noqa: E402
from api.repositories.memory_storage import MemoryStorage  # noqa: E402
from api.repositories.sql_repository import SQLStorage  # noqa: E402


class FakeClock:
    """Deterministic clock: each call returns the current instant then advances by ``step``."""

    def __init__(self, start: datetime = datetime(2024, 3, 10, 8, 0, 0), step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def set(self, value: datetime) -> None:
        self.current = value

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + self.step
        return value


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database with full teardown so the file is not left locked on Windows."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    # clear caches so the env var is read again
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session.get_sessionmaker.cache_clear()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    try:
        models.Base.metadata.drop_all(bind=engine)
    finally:
        engine.dispose()
        core_config.get_settings.cache_clear()
        db_session.get_engine.cache_clear()
        db_session.get_sessionmaker.cache_clear()


@pytest.fixture()
def memory_store(clock):
    return MemoryStorage(seed=False, clock=clock)


@pytest.fixture()
def sql_store(temp_db, clock):
    return SQLStorage(clock=clock)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Runs the test once per backend."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture()
def test_settings():
    return replace(
        core_config.get_settings(),
        app_env="test",
        storage_backend="memory",
        seed_test_user=False,
        log_level="WARNING",
        cors_origins=(),
        auth_rate_limit=100,
    )
