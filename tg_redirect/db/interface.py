"""
Storage Abstraction Interface

This module defines the storage abstraction layer that allows switching
between attribution backends (SQLite, in-memory) without changing the
rest of the codebase.

The interface defines the operations the redirect and resolve services
need. Backends are selected once at startup by create_storage() and never
switched at runtime.

Contract shared by all backends:
- Reads return deep copies; mutating a returned object never changes
  stored state
- Backend failures propagate as the backend's own exceptions; services
  decide whether a failure is fatal for the request
"""

from abc import ABC, abstractmethod
from typing import Optional

from tg_redirect.core.types import ClickLog, CodeMapping

DEFAULT_CLICK_LOG_LIMIT = 100


class AttributionStorage(ABC):
    """
    Abstract base class for attribution storage backends.

    To add a new backend:
    1. Create a new class inheriting from AttributionStorage
    2. Implement all abstract methods
    3. Add it to the StorageBackend enum and create_storage()
    """

    @abstractmethod
    async def init(self) -> None:
        """
        Prepare the backend (create tables, open connections).

        Safe to call more than once.
        """
        pass

    @abstractmethod
    async def store_code(self, mapping: CodeMapping) -> None:
        """
        Persist a new code mapping.

        Args:
            mapping: The mapping to store (stored unresolved)
        """
        pass

    @abstractmethod
    async def get_code(self, code: str) -> Optional[CodeMapping]:
        """
        Retrieve a code mapping.

        Returns:
            Copy of the stored mapping, or None if the code is unknown
        """
        pass

    @abstractmethod
    async def mark_resolved(self, code: str, resolved_at: Optional[str] = None) -> bool:
        """
        Mark a code as resolved.

        Only an unresolved mapping is updated, so concurrent callers cannot
        overwrite each other's resolved_at.

        Args:
            code: The code to mark
            resolved_at: ISO-8601 timestamp, defaults to now

        Returns:
            True if this call performed the transition, False if the code
            was already resolved or does not exist
        """
        pass

    @abstractmethod
    async def delete_code(self, code: str) -> None:
        """Delete a code mapping. Deleting an unknown code is a no-op."""
        pass

    @abstractmethod
    async def log_click(self, entry: ClickLog) -> None:
        """Append a click log entry."""
        pass

    @abstractmethod
    async def get_click_logs(self, slug: str, limit: int = DEFAULT_CLICK_LOG_LIMIT) -> list[ClickLog]:
        """
        Get click logs for a slug.

        Returns:
            At most ``limit`` entries, most recent first; empty when
            ``limit`` is below 1
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        pass
