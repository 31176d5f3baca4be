"""
Database Models for the Attribution Store

This module defines the SQLModel database schemas for:
- CodeMappingRecord: attribution code -> click attribution
- ClickLogRecord: one row per click, for analytics

Design Decisions:
- Attribution and query parameters are stored as JSON text; they are only
  ever read back whole
- Timestamps are ISO-8601 UTC strings, which sort chronologically
- Indexes on click_logs.slug and click_logs.timestamp serve per-slug log
  queries; code_mappings.created_at supports retention cleanup
"""

import json
from typing import Optional

from sqlalchemy import Boolean, Column, String, Text
from sqlmodel import Field, SQLModel

from tg_redirect.core.types import ClickAttribution, ClickLog, CodeMapping


class CodeMappingRecord(SQLModel, table=True):
    """
    Table storing attribution code mappings.

    Fields:
    - code: The signed attribution code (primary key)
    - bot_username: Bot the code was issued for
    - attribution: ClickAttribution serialized as JSON
    - created_at: When the code was issued
    - resolved / resolved_at: Set once on first resolution
    """
    __tablename__ = "code_mappings"

    code: str = Field(sa_column=Column(String(64), primary_key=True))
    bot_username: str = Field(sa_column=Column(String(64), nullable=False))
    attribution: str = Field(sa_column=Column(Text, nullable=False))
    created_at: str = Field(sa_column=Column(String(40), nullable=False, index=True))
    resolved: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False)
    )
    resolved_at: Optional[str] = Field(
        default=None,
        sa_column=Column(String(40), nullable=True)
    )

    @classmethod
    def from_mapping(cls, mapping: CodeMapping) -> "CodeMappingRecord":
        return cls(
            code=mapping.code,
            bot_username=mapping.bot_username,
            attribution=mapping.attribution.model_dump_json(by_alias=True),
            created_at=mapping.created_at,
            resolved=False,
            resolved_at=None,
        )

    def to_mapping(self) -> CodeMapping:
        return CodeMapping(
            code=self.code,
            bot_username=self.bot_username,
            attribution=ClickAttribution.model_validate_json(self.attribution),
            created_at=self.created_at,
            resolved=bool(self.resolved),
            resolved_at=self.resolved_at,
        )


class ClickLogRecord(SQLModel, table=True):
    """
    Click log table for analytics.

    Rows are only ever inserted; retention is handled outside the service.
    """
    __tablename__ = "click_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    request_id: str = Field(sa_column=Column(String(36), nullable=False))
    slug: str = Field(sa_column=Column(String(100), nullable=False, index=True))
    timestamp: str = Field(sa_column=Column(String(40), nullable=False, index=True))
    ip_hash: str = Field(sa_column=Column(String(32), nullable=False))
    user_agent: str = Field(sa_column=Column(Text, nullable=False))
    redirect_target: str = Field(sa_column=Column(Text, nullable=False))
    code: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    query_params: str = Field(sa_column=Column(Text, nullable=False))

    @classmethod
    def from_log(cls, entry: ClickLog) -> "ClickLogRecord":
        return cls(
            request_id=entry.request_id,
            slug=entry.slug,
            timestamp=entry.timestamp,
            ip_hash=entry.ip_hash,
            user_agent=entry.user_agent,
            redirect_target=entry.redirect_target,
            code=entry.code,
            query_params=json.dumps(entry.query_params),
        )

    def to_log(self) -> ClickLog:
        return ClickLog(
            request_id=self.request_id,
            slug=self.slug,
            timestamp=self.timestamp,
            ip_hash=self.ip_hash,
            user_agent=self.user_agent,
            redirect_target=self.redirect_target,
            code=self.code,
            query_params=json.loads(self.query_params),
        )
