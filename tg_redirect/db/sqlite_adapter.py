"""
SQLite Storage Backend

This module implements the AttributionStorage interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is the durable backend:
- File-based (single .db file), no server required
- WAL journal mode: readers don't block the writer
- Single writer at a time (file locking serializes writes)

Key characteristics:
- Async access through SQLAlchemy + aiosqlite
- Attribution payloads stored as JSON text
- Every read builds fresh domain objects, so callers never share state
  with the database layer
"""

import logging
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import delete, event, select, update
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, Pool, StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from tg_redirect.core.types import ClickLog, CodeMapping
from tg_redirect.core.utils import utc_now_iso
from tg_redirect.db.interface import DEFAULT_CLICK_LOG_LIMIT, AttributionStorage
from tg_redirect.db.models import ClickLogRecord, CodeMappingRecord

logger = logging.getLogger(__name__)


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


class SQLiteStorage(AttributionStorage):
    """
    SQLite storage backend.

    Usage:
        storage = SQLiteStorage("sqlite+aiosqlite:///./data/telegram-redirect.db")
        await storage.init()
    """

    def __init__(self, database_url: str):
        """
        Args:
            database_url: SQLite connection string (sqlite+aiosqlite:///...)
        """
        self.database_url = database_url
        self.engine = self.create_engine(database_url)
        self._session_maker = async_sessionmaker(
            self.engine,
            class_=SQLModelAsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def is_in_memory(self) -> bool:
        database = make_url(self.database_url).database
        return not database or database == ":memory:"

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        SQLite-specific configuration:
        - NullPool for files, StaticPool for :memory: (one shared connection,
          otherwise every connection would see an empty database)
        - check_same_thread=False: Required for async SQLite operations
        - WAL and synchronous=NORMAL set on every new connection
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        engine = create_async_engine(
            database_url,
            poolclass=self.get_pool_class(),
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)
        return engine

    def get_pool_class(self) -> type[Pool]:
        return StaticPool if self.is_in_memory else NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"

    async def init(self) -> None:
        """Create the database directory and tables if missing."""
        if not self.is_in_memory:
            database = make_url(self.database_url).database
            Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        logger.info(f"SQLite storage initialized: {self.database_url}")

    async def store_code(self, mapping: CodeMapping) -> None:
        async with self._session_maker() as session:
            session.add(CodeMappingRecord.from_mapping(mapping))
            await session.commit()

    async def get_code(self, code: str) -> Optional[CodeMapping]:
        async with self._session_maker() as session:
            record = await session.get(CodeMappingRecord, code)
            return record.to_mapping() if record else None

    async def mark_resolved(self, code: str, resolved_at: Optional[str] = None) -> bool:
        # Conditional UPDATE: only the first resolver flips the row
        statement = (
            update(CodeMappingRecord)
            .where(CodeMappingRecord.code == code)
            .where(CodeMappingRecord.resolved == False)  # noqa: E712
            .values(resolved=True, resolved_at=resolved_at or utc_now_iso())
        )
        async with self._session_maker() as session:
            result = await session.execute(statement)
            await session.commit()
            return result.rowcount == 1

    async def delete_code(self, code: str) -> None:
        statement = delete(CodeMappingRecord).where(CodeMappingRecord.code == code)
        async with self._session_maker() as session:
            await session.execute(statement)
            await session.commit()

    async def log_click(self, entry: ClickLog) -> None:
        async with self._session_maker() as session:
            session.add(ClickLogRecord.from_log(entry))
            await session.commit()

    async def get_click_logs(self, slug: str, limit: int = DEFAULT_CLICK_LOG_LIMIT) -> list[ClickLog]:
        # SQLite treats a negative LIMIT as no limit
        if limit < 1:
            return []

        statement = (
            select(ClickLogRecord)
            .where(ClickLogRecord.slug == slug)
            .order_by(ClickLogRecord.timestamp.desc(), ClickLogRecord.id.desc())
            .limit(limit)
        )
        async with self._session_maker() as session:
            result = await session.execute(statement)
            return [record.to_log() for record in result.scalars().all()]

    async def close(self) -> None:
        await self.engine.dispose()
