"""
Statistics Service

This service summarizes recent clicks for a slug from the click log.

Design Decisions:
- Reads only the most recent N clicks (storage returns newest first)
- Counts are computed in Python; the click log is small per slug
- Intended for operators during development, not a public API
"""

from collections import Counter
from typing import Optional

from tg_redirect.db.interface import DEFAULT_CLICK_LOG_LIMIT, AttributionStorage
from tg_redirect.services.slugs import SlugRegistry


class StatsService:
    """
    Service for retrieving slug click statistics.
    """

    def __init__(self, storage: AttributionStorage, slugs: SlugRegistry):
        self.storage = storage
        self.slugs = slugs

    async def get_stats(self, slug: str, limit: int = DEFAULT_CLICK_LOG_LIMIT) -> Optional[dict]:
        """
        Summarize recent clicks for a slug.

        Returns:
            Dictionary with:
            - slug: The slug
            - click_count: Clicks in the sampled window
            - codes_issued: Clicks that produced an attribution code
            - utm_sources: Click count per utm_source
            - last_click_at: Timestamp of the newest click (None if no clicks)
            - recent_clicks: The sampled click logs, newest first

        Returns None if the slug is unknown or inactive.
        """
        if self.slugs.get(slug) is None:
            return None

        logs = await self.storage.get_click_logs(slug, limit)
        sources = Counter(
            log.query_params["utm_source"] for log in logs if "utm_source" in log.query_params
        )

        return {
            "slug": slug,
            "click_count": len(logs),
            "codes_issued": sum(1 for log in logs if log.code),
            "utm_sources": dict(sources),
            "last_click_at": logs[0].timestamp if logs else None,
            "recent_clicks": logs,
        }
