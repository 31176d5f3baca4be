"""
Storage Selection

This module builds the attribution storage backend from settings.
The backend is chosen once at startup; the rest of the code only sees the
AttributionStorage interface.

The backend pattern allows us to:
- Use SQLite by default (durable, file-based)
- Switch to in-memory storage for ephemeral deployments via STORAGE_BACKEND
- Add new backends without touching the services
"""

import logging
from typing import Optional

from tg_redirect.core.setting import Settings, StorageBackend, settings as default_settings
from tg_redirect.db.interface import AttributionStorage
from tg_redirect.db.memory_adapter import MemoryStorage
from tg_redirect.db.sqlite_adapter import SQLiteStorage

logger = logging.getLogger(__name__)


def build_storage(settings: Optional[Settings] = None) -> AttributionStorage:
    """
    Instantiate the configured backend without initializing it.

    Args:
        settings: Application settings (module settings by default)

    Returns:
        AttributionStorage instance
    """
    settings = settings or default_settings

    if settings.STORAGE_BACKEND is StorageBackend.memory:
        logger.warning("Using in-memory storage: attribution data is lost on restart")
        return MemoryStorage(max_click_logs=settings.MEMORY_MAX_CLICK_LOGS)

    return SQLiteStorage(settings.DATABASE_URL)


async def create_storage(settings: Optional[Settings] = None) -> AttributionStorage:
    """
    Build and initialize the configured backend.

    Usage:
        storage = await create_storage(settings)
        ...
        await storage.close()
    """
    storage = build_storage(settings)
    await storage.init()
    return storage
