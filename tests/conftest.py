"""Shared test fixtures: an in-memory stand-in for asyncpg."""

import asyncio
import copy
import itertools
import os
from pathlib import Path

import asyncpg
import pytest
from fastapi.testclient import TestClient

ASSETS_DIR = Path(__file__).parent / "assets"

# Read when main mounts /pictures at import.
os.environ["PICTURES_DIR"] = str(ASSETS_DIR / "pictures")

from core.db import ConnectionPool  # noqa: E402
from core.images import ImageResolver  # noqa: E402
from core.queries import REQUIRED_NAMES, QueryCatalog  # noqa: E402
from core.rows import RowMapper  # noqa: E402
from core.settings import PoolSettings  # noqa: E402
from dispatch.dependencies import get_dispatcher  # noqa: E402
from dispatch.dispatcher import RequestDispatcher  # noqa: E402
from main import app  # noqa: E402

_pids = itertools.count(1000)


class FakeStore:
    """Tables keyed by id. Statements are looked up by catalog name."""

    def __init__(self):
        self.quotes: dict[int, dict] = {}
        self.categories: dict[int, dict] = {}
        self.next_quote_id = 1
        self.next_category_id = 1

    def add_category(self, name: str) -> int:
        category_id = self.next_category_id
        self.next_category_id += 1
        self.categories[category_id] = {"id": category_id, "name": name}
        return category_id

    def add_quote(self, author: str, text: str, category=None, imagename=None) -> int:
        quote_id = self.next_quote_id
        self.next_quote_id += 1
        self.quotes[quote_id] = {
            "id": quote_id,
            "author": author,
            "text": text,
            "imagename": imagename,
            "category": category,
        }
        return quote_id

    def snapshot(self) -> dict:
        return copy.deepcopy(self.__dict__)

    def restore(self, state: dict) -> None:
        self.__dict__.update(copy.deepcopy(state))


class FakeTransaction:
    def __init__(self, conn, isolation=None):
        self._conn = conn
        self.isolation = isolation
        self._saved = None

    async def start(self):
        self._saved = self._conn.store.snapshot()
        self._conn.events.append("begin")

    async def commit(self):
        if self._conn.fail_commit:
            raise asyncpg.exceptions.SerializationError("could not serialize access")
        self._conn.events.append("commit")

    async def rollback(self):
        self._conn.store.restore(self._saved)
        self._conn.events.append("rollback")


class FakeConnection:
    def __init__(self, store: FakeStore):
        self.store = store
        self.events: list[str] = []
        self.fail_commit = False
        self.closed = False
        self.termination_listeners = []
        self._pid = next(_pids)

    def get_server_pid(self) -> int:
        return self._pid

    def add_termination_listener(self, callback):
        self.termination_listeners.append(callback)

    def terminate(self):
        self.closed = True
        listeners, self.termination_listeners = self.termination_listeners, []
        for callback in listeners:
            callback(self)

    async def close(self):
        self.terminate()

    def transaction(self, isolation=None):
        return FakeTransaction(self, isolation=isolation)

    def _check_category(self, category):
        if category is not None and category not in self.store.categories:
            raise asyncpg.exceptions.ForeignKeyViolationError(
                'insert or update on table "quotes" violates foreign key constraint'
            )

    async def fetch(self, sql, *args):
        if sql == "ALL":
            return [dict(row) for _, row in sorted(self.store.quotes.items())]
        if sql == "CAT_ALL":
            return [dict(row) for _, row in sorted(self.store.categories.items())]
        raise AssertionError(f"unexpected fetch {sql}")

    async def fetchrow(self, sql, *args):
        if sql == "CHERRYPICK":
            row = self.store.quotes.get(args[0])
            return dict(row) if row else None
        if sql == "RAND":
            if not self.store.quotes:
                return None
            return dict(self.store.quotes[min(self.store.quotes)])
        if sql == "SUBMIT":
            author, text, category, imagename = args
            self._check_category(category)
            return {"id": self.store.add_quote(author, text, category, imagename)}
        if sql == "CAT_CHERRYPICK":
            row = self.store.categories.get(args[0])
            return dict(row) if row else None
        if sql == "CAT_SUBMIT":
            (name,) = args
            if any(row["name"] == name for row in self.store.categories.values()):
                raise asyncpg.exceptions.UniqueViolationError("duplicate key value")
            return {"id": self.store.add_category(name)}
        raise AssertionError(f"unexpected fetchrow {sql}")

    async def execute(self, sql, *args):
        if sql == "CHANGE":
            author, text, category, imagename, quote_id = args
            if quote_id not in self.store.quotes:
                return "UPDATE 0"
            self._check_category(category)
            self.store.quotes[quote_id].update(
                author=author, text=text, category=category, imagename=imagename
            )
            return "UPDATE 1"
        if sql == "REMOVE":
            return f"DELETE {1 if self.store.quotes.pop(args[0], None) else 0}"
        if sql == "CAT_REMOVE":
            (category_id,) = args
            if any(q["category"] == category_id for q in self.store.quotes.values()):
                raise asyncpg.exceptions.ForeignKeyViolationError(
                    'update or delete on table "categories" violates foreign key constraint'
                )
            return f"DELETE {1 if self.store.categories.pop(category_id, None) else 0}"
        raise AssertionError(f"unexpected execute {sql}")


class FakeRawPool:
    """Mimics the acquire/release half of asyncpg.Pool."""

    def __init__(self, store: FakeStore):
        self.store = store
        self.exhausted = False
        self.fail_commit = False
        self.connect_error: Exception | None = None
        self.acquired: list[FakeConnection] = []
        self.released: list[FakeConnection] = []
        self.timeouts: list[float] = []

    async def acquire(self, timeout=None):
        self.timeouts.append(timeout)
        if self.exhausted:
            raise asyncio.TimeoutError()
        if self.connect_error is not None:
            raise self.connect_error
        conn = FakeConnection(self.store)
        conn.fail_commit = self.fail_commit
        self.acquired.append(conn)
        return conn

    async def release(self, conn):
        self.released.append(conn)

    async def close(self):
        pass


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def raw_pool(store):
    return FakeRawPool(store)


@pytest.fixture
def connection_pool(raw_pool):
    pool = ConnectionPool(PoolSettings(dsn="postgresql://test@localhost/test"))
    pool._pool = raw_pool
    return pool


@pytest.fixture
def catalog():
    return QueryCatalog({name: name for name in REQUIRED_NAMES})


@pytest.fixture
def pictures_dir(tmp_path) -> Path:
    directory = tmp_path / "pictures"
    directory.mkdir()
    (directory / "fb_1.file").write_bytes(b"fallback-1")
    (directory / "own.file").write_bytes(b"own")
    return directory


@pytest.fixture
def images(pictures_dir):
    resolver = ImageResolver(pictures_dir)
    resolver.refresh()
    return resolver


@pytest.fixture
def dispatcher(connection_pool, catalog, images):
    return RequestDispatcher(connection_pool, catalog, RowMapper(images))


@pytest.fixture
def client(dispatcher):
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
