"""
In-Memory Storage Backend

This module implements the AttributionStorage interface in process memory.

WARNING: Data is lost when the process restarts. Use it for development,
tests, or ephemeral/serverless deployments where attribution may be
best-effort.

Key characteristics:
- Code mappings in a dict, click logs in a bounded deque
- When the click log is full the oldest entry is evicted
- State belongs to the instance; two instances never share data
- Copies in and copies out, so callers never alias stored objects
"""

from collections import deque
from typing import Optional

from tg_redirect.core.types import ClickLog, CodeMapping
from tg_redirect.core.utils import utc_now_iso
from tg_redirect.db.interface import DEFAULT_CLICK_LOG_LIMIT, AttributionStorage

DEFAULT_MAX_CLICK_LOGS = 10000


class MemoryStorage(AttributionStorage):
    """In-memory implementation of the storage interface."""

    def __init__(self, max_click_logs: int = DEFAULT_MAX_CLICK_LOGS):
        self.max_click_logs = max_click_logs
        self._code_mappings: dict[str, CodeMapping] = {}
        self._click_logs: deque[ClickLog] = deque(maxlen=max_click_logs)

    async def init(self) -> None:
        # Nothing to prepare
        pass

    async def store_code(self, mapping: CodeMapping) -> None:
        stored = mapping.model_copy(deep=True)
        stored.resolved = False
        stored.resolved_at = None
        self._code_mappings[mapping.code] = stored

    async def get_code(self, code: str) -> Optional[CodeMapping]:
        mapping = self._code_mappings.get(code)
        return mapping.model_copy(deep=True) if mapping else None

    async def mark_resolved(self, code: str, resolved_at: Optional[str] = None) -> bool:
        mapping = self._code_mappings.get(code)
        if mapping is None or mapping.resolved:
            return False
        mapping.resolved = True
        mapping.resolved_at = resolved_at or utc_now_iso()
        return True

    async def delete_code(self, code: str) -> None:
        self._code_mappings.pop(code, None)

    async def log_click(self, entry: ClickLog) -> None:
        self._click_logs.append(entry.model_copy(deep=True))

    async def get_click_logs(self, slug: str, limit: int = DEFAULT_CLICK_LOG_LIMIT) -> list[ClickLog]:
        if limit < 1:
            return []

        logs = []
        for entry in reversed(self._click_logs):
            if len(logs) >= limit:
                break
            if entry.slug == slug:
                logs.append(entry.model_copy(deep=True))
        return logs

    async def close(self) -> None:
        pass

    def get_stats(self) -> dict[str, int]:
        """Counts of stored codes and click logs (for debugging)."""
        return {
            "codes": len(self._code_mappings),
            "clicks": len(self._click_logs),
        }

    def clear(self) -> None:
        """Drop all data."""
        self._code_mappings.clear()
        self._click_logs.clear()
