"""
Code Resolution Cache

In-process LRU cache with per-entry expiry for hot code resolves.
Sits in front of the attribution storage; storage stays the source of truth.

Design Decisions:
- cachetools.TTLCache: least-recently-used eviction at capacity, and every
  entry expires ttl seconds after it was written, whichever comes first
- Values are copied on the way in and out so a cached mapping can only
  change through set()
- One instance per application, injected into ResolveService
"""

from typing import Optional

from cachetools import TTLCache

from tg_redirect.core.types import CodeMapping

DEFAULT_MAX_SIZE = 1000
DEFAULT_TTL_SECONDS = 5 * 60


class CodeCache:
    """Bounded, time-limited cache of code mappings keyed by code."""

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, ttl_seconds: float = DEFAULT_TTL_SECONDS, timer=None):
        """
        Args:
            max_size: Maximum number of cached mappings
            ttl_seconds: Lifetime of each entry
            timer: Clock function (seconds); overridable for tests
        """
        if timer is None:
            self._cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl_seconds)
        else:
            self._cache = TTLCache(maxsize=max_size, ttl=ttl_seconds, timer=timer)

    def get(self, code: str) -> Optional[CodeMapping]:
        mapping = self._cache.get(code)
        return mapping.model_copy(deep=True) if mapping is not None else None

    def set(self, code: str, mapping: CodeMapping) -> None:
        self._cache[code] = mapping.model_copy(deep=True)

    def delete(self, code: str) -> None:
        self._cache.pop(code, None)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, code: str) -> bool:
        return code in self._cache
