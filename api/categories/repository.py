"""
Category persistence (catalog statements bound to the request connection).
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db, queries
from core.queries import QueryCatalog


async def list_categories(conn: asyncpg.Connection, catalog: QueryCatalog) -> list[dict[str, Any]]:
    return await db.fetch_all(conn, catalog[queries.CAT_ALL])


async def get_category(
    conn: asyncpg.Connection,
    catalog: QueryCatalog,
    category_id: int,
) -> dict[str, Any] | None:
    return await db.fetch_one(conn, catalog[queries.CAT_CHERRYPICK], category_id)


async def insert_category(conn: asyncpg.Connection, catalog: QueryCatalog, *, name: str) -> int:
    row = await db.fetch_one(conn, catalog[queries.CAT_SUBMIT], name)
    if row is None or "id" not in row:
        raise RuntimeError("Failed to insert category.")
    return int(row["id"])


async def delete_category(conn: asyncpg.Connection, catalog: QueryCatalog, category_id: int) -> int:
    return await db.execute(conn, catalog[queries.CAT_REMOVE], category_id)
