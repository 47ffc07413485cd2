"""
Quote persistence.

Statements come from the query catalog; this module only binds arguments
and runs them on the connection the dispatcher acquired.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db, queries
from core.queries import QueryCatalog


async def list_quotes(conn: asyncpg.Connection, catalog: QueryCatalog) -> list[dict[str, Any]]:
    return await db.fetch_all(conn, catalog[queries.ALL])


async def get_quote(conn: asyncpg.Connection, catalog: QueryCatalog, quote_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(conn, catalog[queries.CHERRYPICK], quote_id)


async def random_quote(conn: asyncpg.Connection, catalog: QueryCatalog) -> dict[str, Any] | None:
    return await db.fetch_one(conn, catalog[queries.RAND])


async def insert_quote(
    conn: asyncpg.Connection,
    catalog: QueryCatalog,
    *,
    author: str,
    text: str,
    category: int | None,
    image: str | None,
) -> int:
    """
    Insert a quote and return its id.

    Statement arguments: $1 author, $2 text, $3 category, $4 imagename.
    """
    row = await db.fetch_one(conn, catalog[queries.SUBMIT], author, text, category, image)
    if row is None or "id" not in row:
        raise RuntimeError("Failed to insert quote.")
    return int(row["id"])


async def update_quote(
    conn: asyncpg.Connection,
    catalog: QueryCatalog,
    quote_id: int,
    *,
    author: str,
    text: str,
    category: int | None,
    image: str | None,
) -> int:
    """
    Replace every mutable column. Returns the affected-row count.

    Statement arguments: $1 author, $2 text, $3 category, $4 imagename, $5 id.
    """
    return await db.execute(conn, catalog[queries.CHANGE], author, text, category, image, quote_id)


async def delete_quote(conn: asyncpg.Connection, catalog: QueryCatalog, quote_id: int) -> int:
    return await db.execute(conn, catalog[queries.REMOVE], quote_id)
