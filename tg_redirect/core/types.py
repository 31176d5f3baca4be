"""
Domain Types

Pydantic models for the attribution data that flows through the service:
- UTMParams / DeviceInfo: click context produced by the extractors
- ClickAttribution: everything captured for one click
- CodeMapping: the stored unit behind an attribution code
- ClickLog: append-only record of every click

Design Decisions:
- JSON uses camelCase (the payload consumed by the downstream bot)
- Python code uses snake_case; both names are accepted on input
- Click context is frozen; only CodeMapping's resolution fields change
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DestinationType = Literal["bot", "public", "invite"]
RedirectMode = Literal["302", "shim"]
DeviceType = Literal["mobile", "tablet", "desktop", "unknown"]


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UTMParams(BaseModel):
    """UTM parameters extracted from the click query string."""
    model_config = ConfigDict(frozen=True)

    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None

    def present(self) -> dict[str, str]:
        """Only the parameters that were actually supplied."""
        return self.model_dump(exclude_none=True)


class DeviceInfo(CamelModel):
    """Device summary derived from the user agent."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    type: DeviceType = "unknown"
    os: str = "Unknown"
    browser: str = "Unknown"
    has_telegram_app: bool = False


class ClickAttribution(CamelModel):
    """Marketing and device context captured for one click."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    slug: str
    timestamp: str
    utm: UTMParams = Field(default_factory=UTMParams)
    extra_params: dict[str, str] = Field(default_factory=dict)
    ip_hash: str = "unknown"
    user_agent: str = ""
    device: DeviceInfo = Field(default_factory=DeviceInfo)
    request_id: str = ""


class CodeMapping(CamelModel):
    """
    Stored attribution code record.

    ``resolved`` implies ``resolved_at`` is set and not earlier than
    ``created_at``.
    """

    code: str
    attribution: ClickAttribution
    bot_username: str
    created_at: str
    resolved: bool = False
    resolved_at: Optional[str] = None


class ClickLog(CamelModel):
    """Append-only record of a single click, whatever the destination."""

    request_id: str
    slug: str
    timestamp: str
    ip_hash: str
    user_agent: str
    redirect_target: str
    code: Optional[str] = None
    query_params: dict[str, str] = Field(default_factory=dict)
