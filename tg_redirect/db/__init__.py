"""
Storage module with abstraction layer.

This module provides:
- AttributionStorage interface: Abstract base class for storage backends
- SQLiteStorage: durable SQLite implementation (default)
- MemoryStorage: ephemeral in-process implementation
- create_storage(): picks and initializes the backend from settings

To add a new backend:
1. Create a new class inheriting from AttributionStorage
2. Implement all abstract methods
3. Register it in build_storage() in session.py
"""

from tg_redirect.db.interface import AttributionStorage
from tg_redirect.db.memory_adapter import MemoryStorage
from tg_redirect.db.session import build_storage, create_storage
from tg_redirect.db.sqlite_adapter import SQLiteStorage

__all__ = [
    "AttributionStorage",
    "MemoryStorage",
    "SQLiteStorage",
    "build_storage",
    "create_storage",
]
