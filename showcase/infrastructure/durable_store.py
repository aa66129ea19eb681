"""
Durable store adapter: uniform get/insert/update/delete over the remote SQL store.
Every transport, auth, query or timeout error is folded into StoreUnavailable,
so callers have exactly one branch to take: fall back to the local cache.
Records cross this boundary as plain dicts keyed by column name.
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, TypeVar

from sqlalchemy import select, text, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from showcase.config import Settings
from showcase.db import Base, create_engine, create_session_factory
from showcase.errors import StoreUnavailable
from showcase.logging_config import get_logger
from showcase.models import ChatStatistics, ContentItem, User

logger = get_logger(__name__)

Record = Dict[str, Any]
T = TypeVar("T")

COLLECTIONS: Dict[str, type[Base]] = {
    "content_items": ContentItem,
    "users": User,
    "chat_statistics": ChatStatistics,
}


class DurableStore(Protocol):
    """Contract shared by the SQL store, the disabled store and test doubles."""

    async def get(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Record]: ...

    async def insert(self, collection: str, record: Record) -> Record: ...

    async def update(self, collection: str, record_id: Any, patch: Record) -> Optional[Record]: ...

    async def delete(self, collection: str, record_id: Any) -> bool: ...

    async def increment(
        self,
        collection: str,
        record_id: Any,
        deltas: Dict[str, int],
        touch: Optional[str] = None,
    ) -> Optional[Record]: ...

    async def ping(self) -> None: ...


def _as_utc(value: Any) -> Any:
    # SQLite drops tzinfo; everything we write is UTC.
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(obj: Base) -> Record:
    return {col.key: _as_utc(getattr(obj, col.key)) for col in obj.__table__.columns}


def _check_columns(model: type[Base], names: Iterable[str]) -> None:
    columns = model.__table__.columns
    unknown = [n for n in names if n not in columns]
    if unknown:
        raise ValueError(f"unknown columns for {model.__tablename__}: {unknown}")


class SqlDurableStore:
    """Remote store over SQLAlchemy async sessions (PostgreSQL/asyncpg in production)."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float,
        engine: Optional[AsyncEngine] = None,
    ) -> None:
        self._session_factory = session_factory
        self._timeout_seconds = timeout_seconds
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> "SqlDurableStore":
        engine = create_engine(settings.database_url, echo=settings.log_level.upper() == "DEBUG")
        return cls(create_session_factory(engine), settings.store_timeout_seconds, engine=engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    def _model(self, collection: str) -> type[Base]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"unknown collection: {collection}") from None

    async def _run(self, operation: str, collection: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run one store call under the timeout; fold every failure into StoreUnavailable."""
        try:
            return await asyncio.wait_for(fn(), timeout=self._timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.warning("store.timeout", operation=operation, collection=collection, timeout_s=self._timeout_seconds)
            raise StoreUnavailable(operation, collection, "timeout") from e
        except Exception as e:
            logger.warning("store.unavailable", operation=operation, collection=collection, error=str(e))
            raise StoreUnavailable(operation, collection, type(e).__name__) from e

    async def get(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        """Rows matching equality filters, newest first when the table has created_at."""
        model = self._model(collection)
        filters = filters or {}
        _check_columns(model, filters)

        async def _get() -> List[Record]:
            q = select(model)
            for name, value in filters.items():
                q = q.where(getattr(model, name) == value)
            if "created_at" in model.__table__.columns:
                q = q.order_by(getattr(model, "created_at").desc())
            async with self._session_factory() as session:
                r = await session.execute(q)
                return [_to_record(row) for row in r.scalars().all()]

        return await self._run("get", collection, _get)

    async def insert(self, collection: str, record: Record) -> Record:
        model = self._model(collection)
        _check_columns(model, record)

        async def _insert() -> Record:
            async with self._session_factory() as session:
                obj = model(**record)
                session.add(obj)
                await session.commit()
                await session.refresh(obj)
                return _to_record(obj)

        return await self._run("insert", collection, _insert)

    async def update(self, collection: str, record_id: Any, patch: Record) -> Optional[Record]:
        """Apply patch to one row. None if the row does not exist."""
        model = self._model(collection)
        _check_columns(model, patch)

        async def _update() -> Optional[Record]:
            async with self._session_factory() as session:
                obj = await session.get(model, record_id)
                if obj is None:
                    return None
                for name, value in patch.items():
                    setattr(obj, name, value)
                await session.commit()
                await session.refresh(obj)
                return _to_record(obj)

        return await self._run("update", collection, _update)

    async def delete(self, collection: str, record_id: Any) -> bool:
        model = self._model(collection)

        async def _delete() -> bool:
            async with self._session_factory() as session:
                obj = await session.get(model, record_id)
                if obj is None:
                    return False
                await session.delete(obj)
                await session.commit()
                return True

        return await self._run("delete", collection, _delete)

    async def increment(
        self,
        collection: str,
        record_id: Any,
        deltas: Dict[str, int],
        touch: Optional[str] = None,
    ) -> Optional[Record]:
        """
        col = col + delta, evaluated by the database so concurrent writers never lose updates.
        touch: optional timestamp column set to now. None if the row does not exist.
        """
        model = self._model(collection)
        _check_columns(model, list(deltas) + ([touch] if touch else []))
        values: Dict[str, Any] = {name: getattr(model, name) + delta for name, delta in deltas.items()}
        if touch:
            values[touch] = datetime.now(timezone.utc)
        pk = getattr(model, "id")

        async def _increment() -> Optional[Record]:
            async with self._session_factory() as session:
                r = await session.execute(
                    update(model).where(pk == record_id).values(**values).execution_options(synchronize_session=False)
                )
                if r.rowcount == 0:
                    await session.rollback()
                    return None
                await session.commit()
                obj = await session.get(model, record_id)
                return _to_record(obj) if obj is not None else None

        return await self._run("increment", collection, _increment)

    async def ping(self) -> None:
        async def _ping() -> None:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))

        await self._run("ping", "-", _ping)


class DisabledDurableStore:
    """Local-only mode (DATABASE_URL empty): every call is unavailable."""

    async def get(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        raise StoreUnavailable("get", collection, "disabled")

    async def insert(self, collection: str, record: Record) -> Record:
        raise StoreUnavailable("insert", collection, "disabled")

    async def update(self, collection: str, record_id: Any, patch: Record) -> Optional[Record]:
        raise StoreUnavailable("update", collection, "disabled")

    async def delete(self, collection: str, record_id: Any) -> bool:
        raise StoreUnavailable("delete", collection, "disabled")

    async def increment(
        self,
        collection: str,
        record_id: Any,
        deltas: Dict[str, int],
        touch: Optional[str] = None,
    ) -> Optional[Record]:
        raise StoreUnavailable("increment", collection, "disabled")

    async def ping(self) -> None:
        raise StoreUnavailable("ping", "-", "disabled")

    async def close(self) -> None:
        return None


def build_durable_store(settings: Settings) -> SqlDurableStore | DisabledDurableStore:
    """SQL store from DATABASE_URL, or the disabled store when it is empty."""
    if not settings.database_url.strip():
        logger.warning("store.disabled", reason="DATABASE_URL empty; serving from local cache only")
        return DisabledDurableStore()
    return SqlDurableStore.from_settings(settings)
