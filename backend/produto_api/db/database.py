import asyncio
from typing import Any

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import DeclarativeBase

from produto_api.config import Config


# SQLAlchemy Base for table definitions
class Base(DeclarativeBase):
    pass


def get_async_url(url: str) -> str:
    """Convert database URL to async SQLAlchemy format."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the async engine (and its connection pool) for one application.

    Every call acquires a pooled connection for a single statement and gives
    it back before returning.
    """

    def __init__(self, url: str | None = None, timeout: float | None = None):
        self.url = get_async_url(url or Config.DATABASE_URL)
        self.timeout = timeout if timeout is not None else Config.QUERY_TIMEOUT_SECONDS
        self.engine: AsyncEngine | None = None

    async def connect(self):
        """Create database engine."""
        self.engine = create_async_engine(self.url, echo=False)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async def disconnect(self):
        """Close database engine."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None

    async def create_schema(self):
        """Create the tables declared on Base if they do not exist."""
        # Registers the produto table on Base.metadata
        from produto_api.models.produto import Produto  # noqa: F401

        if not self.engine:
            await self.connect()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def execute_query(self, sql: str, params: dict | None = None) -> list[dict[str, Any]]:
        """Execute a SELECT query and return results as list of dicts.

        Args:
            sql: SQL query (can use :param_name for parameterized queries)
            params: Optional dict of parameter values

        Raises:
            asyncio.TimeoutError: when the statement runs past ``self.timeout``
        """
        return await asyncio.wait_for(self._fetch(sql, params), timeout=self.timeout)

    async def execute(self, sql: str, params: dict | None = None) -> tuple[list[dict[str, Any]], int]:
        """Execute a writing statement (INSERT, UPDATE, DELETE) and commit it.

        Returns the rows produced by a RETURNING clause (empty otherwise) and
        the number of affected rows.
        """
        return await asyncio.wait_for(self._write(sql, params), timeout=self.timeout)

    async def _fetch(self, sql: str, params: dict | None) -> list[dict[str, Any]]:
        if not self.engine:
            await self.connect()

        async with self.engine.connect() as conn:
            result = await conn.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings().all()]

    async def _write(self, sql: str, params: dict | None) -> tuple[list[dict[str, Any]], int]:
        if not self.engine:
            await self.connect()

        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params or {})
            rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
            rowcount = len(rows) if result.returns_rows else result.rowcount
            return rows, rowcount


def get_db(request: Request) -> Database:
    """FastAPI dependency: the Database created by the application lifespan."""
    return request.app.state.db
