"""
Per-request state handed to every handler by the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass

import asyncpg

from .queries import QueryCatalog
from .rows import RowMapper


@dataclass(frozen=True)
class HandlerContext:
    conn: asyncpg.Connection
    catalog: QueryCatalog
    rows: RowMapper
