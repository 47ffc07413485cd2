"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI opens it on startup and
closes it on shutdown (see `api/main.py`); the dispatcher borrows one
connection per request through `ConnectionPool.acquire()`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any

import asyncpg

from .errors import ValidationError
from .settings import PoolSettings

logger = logging.getLogger(__name__)


class PoolTimeout(RuntimeError):
    """No connection could be acquired before the deadline."""


class ConnectionPool:
    """
    Bounded asyncpg pool with deadline-bounded acquisition.

    asyncpg handles min/max sizing and idle eviction
    (`max_inactive_connection_lifetime`). Max lifetime is enforced here:
    every connection's creation time is recorded by the `init` hook and a
    connection older than `max_lifetime_s` is closed on acquire and replaced.
    """

    def __init__(self, settings: PoolSettings, *, clock: Callable[[], float] = time.monotonic):
        self._settings = settings
        self._clock = clock
        self._pool: asyncpg.Pool | None = None
        self._born: dict[int, float] = {}

    @property
    def settings(self) -> PoolSettings:
        return self._settings

    async def open(self) -> None:
        if self._pool is not None:
            return None
        self._pool = await asyncpg.create_pool(
            dsn=self._settings.dsn,
            min_size=self._settings.min_size,
            max_size=self._settings.max_size,
            max_inactive_connection_lifetime=self._settings.idle_timeout_s,
            command_timeout=self._settings.command_timeout_s,
            init=self._on_connect,
        )
        logger.info(
            "pool_opened min_size=%s max_size=%s",
            self._settings.min_size,
            self._settings.max_size,
        )

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
        self._born.clear()
        logger.info("pool_closed")

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call open() on startup.")
        return self._pool

    async def _on_connect(self, conn: asyncpg.Connection) -> None:
        pid = conn.get_server_pid()
        self._born[pid] = self._clock()
        # Idle eviction and broken connections never pass through _recycle.
        conn.add_termination_listener(lambda _conn: self._forget(pid))

    def _forget(self, pid: int) -> None:
        self._born.pop(pid, None)

    def _is_expired(self, conn: asyncpg.Connection) -> bool:
        born = self._born.get(conn.get_server_pid())
        if born is None:
            return False
        return self._clock() - born >= self._settings.max_lifetime_s

    async def _recycle(self, pool: asyncpg.Pool, conn: asyncpg.Connection) -> None:
        pid = conn.get_server_pid()
        self._forget(pid)
        try:
            await conn.close()
        finally:
            # No-op for a connection that close() already handed back.
            await pool.release(conn)
        logger.info("pool_connection_recycled pid=%s", pid)

    @asynccontextmanager
    async def acquire(self, timeout: float) -> AsyncIterator[asyncpg.Connection]:
        """
        Borrow a connection for the duration of the `async with` block.

        Raises `PoolTimeout` once `timeout` seconds have elapsed without a
        usable connection. The connection is released exactly once on exit.
        """
        pool = self._require_pool()
        deadline = self._clock() + timeout

        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise PoolTimeout(f"Timed out acquiring a connection after {timeout}s.")
            try:
                conn = await pool.acquire(timeout=remaining)
            except asyncio.TimeoutError as exc:
                raise PoolTimeout(f"Timed out acquiring a connection after {timeout}s.") from exc

            if not self._is_expired(conn):
                break
            await self._recycle(pool, conn)

        try:
            yield conn
        finally:
            await pool.release(conn)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(conn: asyncpg.Connection, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(conn: asyncpg.Connection, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(conn: asyncpg.Connection, sql: str, *args: Any) -> int:
    """
    Run a statement (INSERT/UPDATE/DELETE) and return the affected-row count.
    """
    status = await conn.execute(sql, *args)
    return affected_rows(status)


def affected_rows(status: str) -> int:
    """
    Parse the row count out of a command tag such as "DELETE 1" or "INSERT 0 3".
    """
    parts = (status or "").split()
    if not parts:
        return 0
    try:
        return int(parts[-1])
    except ValueError:
        return 0


@contextmanager
def constraint_errors(
    *,
    foreign_key: str | None = None,
    not_null: str | None = None,
    unique: str | None = None,
) -> Iterator[None]:
    """
    Turn the named constraint violations into `ValidationError`s.

    Each keyword is the client-facing message for that violation. Violations
    without a message, and every other storage error, propagate unchanged.
    """
    try:
        yield
    except asyncpg.exceptions.ForeignKeyViolationError as exc:
        if foreign_key is None:
            raise
        raise ValidationError(foreign_key) from exc
    except asyncpg.exceptions.NotNullViolationError as exc:
        if not_null is None:
            raise
        raise ValidationError(not_null) from exc
    except asyncpg.exceptions.UniqueViolationError as exc:
        if unique is None:
            raise
        raise ValidationError(unique) from exc
