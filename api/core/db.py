"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. It is built from a `DatabaseConfig`,
opened on app startup and closed on shutdown (see `api/main.py`). Every call
acquires its own connection from the pool and releases it on every exit path.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import asyncpg

from .config import DatabaseConfig
from .errors import ConstraintViolationError, DataAccessError

logger = logging.getLogger(__name__)

CONTACT_DDL = """
CREATE TABLE IF NOT EXISTS contact (
    id          serial PRIMARY KEY,
    name        varchar NOT NULL,
    gender      varchar,
    birthday    date,
    address     text,
    contact_num varchar
)
"""


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


CONSTRAINT_ERRORS = (asyncpg.IntegrityConstraintViolationError, asyncpg.DataError)


def translate_error(exc: BaseException) -> DataAccessError:
    """
    Map driver exceptions onto the project's error taxonomy.
    """
    if isinstance(exc, CONSTRAINT_ERRORS):
        return ConstraintViolationError(str(exc))
    if isinstance(exc, asyncio.TimeoutError):
        return DataAccessError("Database statement timed out.")
    return DataAccessError(str(exc) or exc.__class__.__name__)


_DRIVER_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


class Database:
    def __init__(self, config: DatabaseConfig) -> None:
        self.config = config
        self._pool: asyncpg.Pool | None = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def open(self) -> None:
        if self._pool is not None:
            return None
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.config.dsn,
                ssl=self.config.sslmode,
                min_size=self.config.min_size,
                max_size=self.config.max_size,
                command_timeout=self.config.command_timeout,
            )
        except _DRIVER_ERRORS as exc:
            logger.exception("db_pool_open_failed")
            raise translate_error(exc) from exc
        logger.info(
            "db_pool_open min_size=%s max_size=%s command_timeout=%s",
            self.config.min_size,
            self.config.max_size,
            self.config.command_timeout,
        )
        if self.config.create_schema:
            await self.ensure_schema()

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
        logger.info("db_pool_closed")

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise DataAccessError("DB pool is not initialized. Call open() on startup.")
        return self._pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Scoped connection: acquired from the pool, always released.

        Driver exceptions raised inside the block come out as `DataAccessError`.
        """
        pool = self.pool()
        try:
            async with pool.acquire() as conn:
                yield conn
        except _DRIVER_ERRORS as exc:
            raise translate_error(exc) from exc

    @asynccontextmanager
    async def transaction(
        self,
        *,
        isolation: str | None = None,
        readonly: bool = False,
    ) -> AsyncIterator[asyncpg.Connection]:
        """
        Scoped connection inside one transaction (commit on success, rollback on error).
        """
        async with self.connection() as conn:
            kwargs: dict[str, Any] = {"readonly": readonly}
            if isolation:
                kwargs["isolation"] = isolation
            async with conn.transaction(**kwargs):
                yield conn

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        async with self.connection() as conn:
            row = await conn.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self.connection() as conn:
            rows = await conn.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        async with self.connection() as conn:
            return await conn.fetchval(sql, *args)

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the status tag.
        """
        async with self.connection() as conn:
            return await conn.execute(sql, *args)

    async def ensure_schema(self) -> None:
        await self.execute(CONTACT_DDL)
        logger.info("db_schema_ready")

    async def ping(self) -> bool:
        return (await self.fetch_val("SELECT 1")) == 1
