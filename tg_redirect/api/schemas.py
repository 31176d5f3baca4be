"""
API Response Schemas

This module defines the Pydantic models returned by the HTTP endpoints.
Field names are camelCase on the wire, matching what the Telegram bots
consume.
"""

from typing import Literal, Optional

from pydantic import Field

from tg_redirect.core.types import CamelModel, ClickAttribution, ClickLog, CodeMapping


class ResolveResponse(CamelModel):
    """Response model for GET /r/{code}."""
    success: bool
    data: Optional[ClickAttribution] = None
    error: Optional[str] = None


class CodeStatusResponse(CamelModel):
    """Response model for GET /r/{code}/status when the code exists."""
    exists: bool = True
    resolved: bool
    created_at: str
    resolved_at: Optional[str] = None
    bot_username: str

    @classmethod
    def from_mapping(cls, mapping: CodeMapping) -> "CodeStatusResponse":
        return cls(
            resolved=mapping.resolved,
            created_at=mapping.created_at,
            resolved_at=mapping.resolved_at,
            bot_username=mapping.bot_username,
        )


class SlugSummary(CamelModel):
    """One entry of the development slug listing."""
    slug: str
    type: str
    mode: str
    destination: str
    description: Optional[str] = None
    url: str


class SlugListResponse(CamelModel):
    message: str = "Available redirect slugs (development only)"
    slugs: list[SlugSummary] = Field(default_factory=list)


class HealthResponse(CamelModel):
    status: Literal["ok", "error"]
    timestamp: str
    version: str
    uptime: int


class StatsResponse(CamelModel):
    """Response model for the statistics endpoint."""
    slug: str
    click_count: int
    codes_issued: int
    utm_sources: dict[str, int]
    last_click_at: Optional[str] = None
    recent_clicks: list[ClickLog] = Field(default_factory=list)
