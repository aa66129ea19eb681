"""
Shared fixtures.
- memory_store: in-process durable store with an `available` switch to force StoreUnavailable.
- sql_store: SqlDurableStore over in-memory SQLite (aiosqlite).
- cache: LocalFallbackCache in tmp_path.
"""
import copy
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from showcase.config import Settings
from showcase.db import Base, create_session_factory
from showcase.errors import StoreUnavailable
from showcase.infrastructure.durable_store import SqlDurableStore
from showcase.infrastructure.local_cache import LocalFallbackCache

Record = Dict[str, Any]


class MemoryStore:
    """DurableStore double. available=False makes every call raise StoreUnavailable."""

    def __init__(self) -> None:
        self.available = True
        self.collections: Dict[str, Dict[Any, Record]] = {}
        self.calls: List[str] = []

    def _check(self, operation: str, collection: str) -> None:
        self.calls.append(operation)
        if not self.available:
            raise StoreUnavailable(operation, collection, "switched off")

    def _bucket(self, collection: str) -> Dict[Any, Record]:
        return self.collections.setdefault(collection, {})

    async def get(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        self._check("get", collection)
        rows = [
            copy.deepcopy(r)
            for r in self._bucket(collection).values()
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        if rows and "created_at" in rows[0]:
            rows.sort(key=lambda r: r["created_at"], reverse=True)
        return rows

    async def insert(self, collection: str, record: Record) -> Record:
        self._check("insert", collection)
        self._bucket(collection)[record["id"]] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def update(self, collection: str, record_id: Any, patch: Record) -> Optional[Record]:
        self._check("update", collection)
        row = self._bucket(collection).get(record_id)
        if row is None:
            return None
        row.update(copy.deepcopy(patch))
        return copy.deepcopy(row)

    async def delete(self, collection: str, record_id: Any) -> bool:
        self._check("delete", collection)
        return self._bucket(collection).pop(record_id, None) is not None

    async def increment(
        self,
        collection: str,
        record_id: Any,
        deltas: Dict[str, int],
        touch: Optional[str] = None,
    ) -> Optional[Record]:
        self._check("increment", collection)
        row = self._bucket(collection).get(record_id)
        if row is None:
            return None
        for name, delta in deltas.items():
            row[name] = int(row.get(name) or 0) + delta
        return copy.deepcopy(row)

    async def ping(self) -> None:
        self._check("ping", "-")

    async def close(self) -> None:
        return None


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "showcase-cache.json"


@pytest.fixture
def cache(cache_path: Path) -> LocalFallbackCache:
    c = LocalFallbackCache(cache_path)
    c.load()
    return c


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        APP_ENV="test",
        DATABASE_URL="",
        LOCAL_CACHE_PATH=str(tmp_path / "cache.json"),
        UPLOAD_DIR=str(tmp_path / "uploads"),
        BOOTSTRAP_ADMIN_USERNAME="xion",
        BOOTSTRAP_ADMIN_PASSWORD="s3cret-pass",
        JWT_SECRET="test-secret",
        OPENAI_API_KEY=None,
        REDIS_URL=None,
    )


@pytest_asyncio.fixture
async def sql_store():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    store = SqlDurableStore(create_session_factory(engine), timeout_seconds=5.0, engine=engine)
    yield store
    await store.close()
