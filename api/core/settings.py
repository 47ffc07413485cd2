"""
Runtime settings read from the environment.

All values have local-dev defaults except the database URL.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

DEFAULT_ACQUIRE_TIMEOUT_S = 10.0


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    # asyncpg rejects libpq's sslmode query parameter.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip() or os.environ.get("DB_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def queries_path() -> Path:
    return Path(os.environ.get("QUERIES_PATH", "dbqueries.json").strip() or "dbqueries.json")


def pictures_dir() -> Path:
    return Path(os.environ.get("PICTURES_DIR", "pictures").strip() or "pictures")


ISOLATION_LEVELS = frozenset({"read_committed", "read_uncommitted", "repeatable_read", "serializable"})


def isolation_level() -> str | None:
    """
    Transaction isolation override. None keeps the server default.
    """
    raw = os.environ.get("DB_ISOLATION", "").strip().lower().replace("-", "_").replace(" ", "_")
    if not raw:
        return None
    if raw not in ISOLATION_LEVELS:
        raise ValueError(f"DB_ISOLATION must be one of {sorted(ISOLATION_LEVELS)}, got {raw!r}.")
    return raw


@dataclass(frozen=True)
class PoolSettings:
    dsn: str
    min_size: int = 1
    max_size: int = 10
    idle_timeout_s: float = 300.0
    max_lifetime_s: float = 3600.0
    command_timeout_s: float = 30.0

    def __post_init__(self) -> None:
        if self.min_size < 0 or self.max_size < 1 or self.min_size > self.max_size:
            raise ValueError(
                f"Invalid pool bounds: min_size={self.min_size} max_size={self.max_size}"
            )


def pool_settings() -> PoolSettings:
    return PoolSettings(
        dsn=database_url(),
        min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        max_size=_env_int("DB_POOL_MAX_SIZE", 10),
        idle_timeout_s=_env_float("DB_POOL_IDLE_TIMEOUT_S", 300.0),
        max_lifetime_s=_env_float("DB_POOL_MAX_LIFETIME_S", 3600.0),
        command_timeout_s=_env_float("DB_COMMAND_TIMEOUT_S", 30.0),
    )


def acquire_timeout_s() -> float:
    return _env_float("DB_ACQUIRE_TIMEOUT_S", DEFAULT_ACQUIRE_TIMEOUT_S)
