"""
Per-request transaction orchestration.

For every request:
1) borrow a pooled connection (bounded wait)
2) open a transaction on it
3) run the handler for the request's operation
4) commit on success, roll back on any other exit (including cancellation)
5) hand the connection back to the pool, always exactly once
"""

from __future__ import annotations

import logging
from typing import Any

from categories import service as category_service
from core import settings
from core.context import HandlerContext
from core.db import ConnectionPool, PoolTimeout
from core.errors import Internal, QuoteServiceError, ResourceExhausted
from core.queries import QueryCatalog
from core.rows import RowMapper
from quotes import service as quote_service

from .operations import Operation, Request

logger = logging.getLogger(__name__)


class RequestDispatcher:
    def __init__(
        self,
        pool: ConnectionPool,
        catalog: QueryCatalog,
        rows: RowMapper,
        *,
        acquire_timeout_s: float = settings.DEFAULT_ACQUIRE_TIMEOUT_S,
        isolation: str | None = None,
    ):
        self._pool = pool
        self._catalog = catalog
        self._rows = rows
        self._acquire_timeout_s = acquire_timeout_s
        self._isolation = isolation

    async def dispatch(self, request: Request) -> Any:
        operation = request.operation.value
        try:
            # One stat per request; rows below resolve against the cached set.
            self._rows.images.refresh_if_changed()
            async with self._pool.acquire(self._acquire_timeout_s) as conn:
                ctx = HandlerContext(conn=conn, catalog=self._catalog, rows=self._rows)
                return await self._run_in_transaction(ctx, request)
        except QuoteServiceError:
            raise
        except PoolTimeout as exc:
            logger.warning(
                "pool_acquire_timeout operation=%s timeout_s=%s",
                operation,
                self._acquire_timeout_s,
            )
            raise ResourceExhausted() from exc
        except Exception as exc:
            # Connect, recycle and release failures.
            logger.exception("connection_failed operation=%s", operation)
            raise Internal() from exc

    async def _run_in_transaction(self, ctx: HandlerContext, request: Request) -> Any:
        operation = request.operation.value
        try:
            if self._isolation:
                tx = ctx.conn.transaction(isolation=self._isolation)
            else:
                tx = ctx.conn.transaction()
            await tx.start()
        except Exception as exc:
            logger.exception("transaction_start_failed operation=%s", operation)
            raise Internal() from exc

        try:
            result = await self._route(ctx, request)
        except QuoteServiceError as exc:
            await self._rollback(tx, operation, reason=type(exc).__name__)
            raise
        except Exception as exc:
            logger.exception("handler_failed operation=%s", operation)
            await self._rollback(tx, operation, reason=type(exc).__name__)
            raise Internal() from exc
        except BaseException:
            # Cancellation: abort and let it propagate.
            await self._rollback(tx, operation, reason="cancelled")
            raise

        try:
            await tx.commit()
        except Exception as exc:
            logger.exception("commit_failed operation=%s", operation)
            raise Internal() from exc
        return result

    async def _rollback(self, tx: Any, operation: str, *, reason: str) -> None:
        try:
            await tx.rollback()
        except Exception:
            # The original failure is what the caller sees; the connection is
            # reset by the pool on release.
            logger.exception("rollback_failed operation=%s", operation)
            return
        logger.info("transaction_rolled_back operation=%s reason=%s", operation, reason)

    async def _route(self, ctx: HandlerContext, request: Request) -> Any:
        op = request.operation

        if op is Operation.LIST_QUOTES:
            return await quote_service.list_quotes(ctx)
        elif op is Operation.GET_QUOTE:
            return await quote_service.get_quote(ctx, request.record_id)
        elif op is Operation.RANDOM_QUOTE:
            return await quote_service.random_quote(ctx)
        elif op is Operation.CREATE_QUOTE:
            return await quote_service.create_quote(ctx, request.payload)
        elif op is Operation.UPDATE_QUOTE:
            return await quote_service.update_quote(ctx, request.record_id, request.payload)
        elif op is Operation.DELETE_QUOTE:
            return await quote_service.delete_quote(ctx, request.record_id)
        elif op is Operation.LIST_CATEGORIES:
            return await category_service.list_categories(ctx)
        elif op is Operation.GET_CATEGORY:
            return await category_service.get_category(ctx, request.record_id)
        elif op is Operation.CREATE_CATEGORY:
            return await category_service.create_category(ctx, request.payload)
        elif op is Operation.DELETE_CATEGORY:
            return await category_service.delete_category(ctx, request.record_id)

        raise ValueError(f"Unhandled operation: {op!r}")
