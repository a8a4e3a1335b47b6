"""
Persistence adapters.

Routers and services depend on the Storage contract (base.py); the composing
layer picks MemoryStorage or SQLStorage once at startup through build_storage.
"""
from __future__ import annotations

import logging

from api.core.config import Settings
from api.repositories.base import Storage

logger = logging.getLogger(__name__)


def build_storage(settings: Settings) -> Storage:
    backend = settings.storage_backend
    if backend == "memory":
        from api.repositories.memory_storage import MemoryStorage

        return MemoryStorage(seed=settings.seed_test_user)
    if backend == "sql":
        from api.db.create_tables import create_all
        from api.repositories.sql_repository import SQLStorage

        create_all()
        return SQLStorage()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r} (expected 'memory' or 'sql')")
