"""
Storage backends for the esports arena.

Exactly one backend is built per process, chosen by ``STORAGE_BACKEND``:

- ``memory``: ``MemStorage``, optionally seeded with demo fixtures
- ``database``: ``DatabaseStorage`` over the configured ``DATABASE_URL``

Route handlers receive it through the ``get_storage`` dependency, which
tests override with a fresh store.
"""
from typing import Optional

from esports_arena.core.config import Settings, settings as default_settings
from esports_arena.core.logging import get_logger
from esports_arena.storage.base import Storage
from esports_arena.storage.database import DatabaseStorage
from esports_arena.storage.memory import MemStorage

logger = get_logger(__name__)

_storage: Optional[Storage] = None


def create_storage(settings: Settings) -> Storage:
    """Build the backend selected by ``settings``."""
    if settings.uses_database():
        from esports_arena.core.database import get_engine, get_session_factory, init_db

        init_db(get_engine())
        logger.info("Using database storage", extra={"backend": "database"})
        return DatabaseStorage(get_session_factory())

    logger.info("Using in-memory storage", extra={"backend": "memory", "seeded": settings.SEED_DEMO_DATA})
    return MemStorage(seed=settings.SEED_DEMO_DATA)


def get_storage() -> Storage:
    """FastAPI dependency returning the process-wide storage backend."""
    global _storage
    if _storage is None:
        _storage = create_storage(default_settings)
    return _storage


__all__ = ["Storage", "MemStorage", "DatabaseStorage", "create_storage", "get_storage"]
