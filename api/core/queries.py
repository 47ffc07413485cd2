"""
Query catalog: logical statement name -> parameterized SQL.

Loaded once at startup from a JSON file (see `dbqueries.json`) and shared
read-only by every handler for the rest of the process lifetime.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

# Quotes
ALL = "ALL"
CHERRYPICK = "CHERRYPICK"
RAND = "RAND"
SUBMIT = "SUBMIT"
CHANGE = "CHANGE"
REMOVE = "REMOVE"

# Categories
CAT_ALL = "CAT_ALL"
CAT_CHERRYPICK = "CAT_CHERRYPICK"
CAT_SUBMIT = "CAT_SUBMIT"
CAT_REMOVE = "CAT_REMOVE"

REQUIRED_NAMES = (
    ALL,
    CHERRYPICK,
    RAND,
    SUBMIT,
    CHANGE,
    REMOVE,
    CAT_ALL,
    CAT_CHERRYPICK,
    CAT_SUBMIT,
    CAT_REMOVE,
)


class QueryCatalogError(RuntimeError):
    pass


class QueryCatalog(Mapping[str, str]):
    """
    Immutable name -> statement mapping.
    """

    def __init__(self, statements: Mapping[str, str]):
        missing = [name for name in REQUIRED_NAMES if name not in statements]
        if missing:
            raise QueryCatalogError(f"Query catalog is missing: {', '.join(missing)}")

        cleaned: dict[str, str] = {}
        for name, sql in statements.items():
            if not isinstance(sql, str) or not sql.strip():
                raise QueryCatalogError(f"Query {name!r} must be a non-empty string.")
            cleaned[str(name)] = sql.strip()

        self._statements = MappingProxyType(cleaned)

    @classmethod
    def from_file(cls, path: Path) -> QueryCatalog:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise QueryCatalogError(f"Could not load {path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise QueryCatalogError(f"Could not parse {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise QueryCatalogError(f"{path} must contain a JSON object.")
        return cls(data)

    def __getitem__(self, name: str) -> str:
        return self._statements[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._statements)

    def __len__(self) -> int:
        return len(self._statements)
