"""
Durable-then-local access to one collection.

Policy (identical for every collection):
- always try the durable store first;
- use the local cache only on StoreUnavailable, or when the remote read is
  empty/unusable while the cache holds matching data;
- never merge results of both backends within one call;
- a successful remote write is mirrored into the cache (write-through).
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from showcase.errors import StoreUnavailable
from showcase.infrastructure.durable_store import DurableStore, Record
from showcase.infrastructure.local_cache import LocalFallbackCache
from showcase.logging_config import get_logger

logger = get_logger(__name__)

SOURCE_REMOTE = "remote"
SOURCE_LOCAL = "local"


def _non_empty(records: List[Record]) -> bool:
    return bool(records)


class FallbackCollection:
    """One collection served from the durable store, or from the local cache when it fails."""

    def __init__(
        self,
        name: str,
        store: DurableStore,
        cache: LocalFallbackCache,
        is_usable: Callable[[List[Record]], bool] = _non_empty,
        counter_fields: Iterable[str] = (),
    ) -> None:
        self.name = name
        self._store = store
        self._cache = cache
        self._is_usable = is_usable
        # Mirrored with max(): a remote value never lowers a local counter.
        self._counter_fields = tuple(counter_fields)

    async def find(self, filters: Optional[Dict[str, Any]] = None) -> Tuple[List[Record], str]:
        """Matching records and the backend that served them (remote | local)."""
        try:
            records = await self._store.get(self.name, filters)
        except StoreUnavailable:
            local = self._cache.find(self.name, filters)
            logger.info("fallback.read_local", collection=self.name, reason="unavailable", count=len(local))
            return local, SOURCE_LOCAL
        if not self._is_usable(records):
            local = self._cache.find(self.name, filters)
            if self._is_usable(local):
                logger.warning(
                    "fallback.read_local",
                    collection=self.name,
                    reason="remote_empty",
                    count=len(local),
                )
                return local, SOURCE_LOCAL
        return records, SOURCE_REMOTE

    async def get(self, record_id: Any) -> Optional[Record]:
        records, _ = await self.find({"id": record_id})
        return records[0] if records else None

    async def insert(self, record: Record) -> Record:
        try:
            stored = await self._store.insert(self.name, record)
        except StoreUnavailable:
            logger.info("fallback.write_local", collection=self.name, operation="insert", record_id=str(record.get("id")))
            return await self._cache.put(self.name, record)
        await self._cache.put(self.name, stored)
        return stored

    async def update(self, record_id: Any, patch: Record) -> Optional[Record]:
        """Patched record, or None when neither backend holds record_id."""
        try:
            stored = await self._store.update(self.name, record_id, patch)
        except StoreUnavailable:
            logger.info("fallback.write_local", collection=self.name, operation="update", record_id=str(record_id))
            return await self._cache.patch(self.name, record_id, patch)
        if stored is None:
            # Written while the remote was down: only the cache knows it.
            return await self._cache.patch(self.name, record_id, patch)
        await self._cache.put(self.name, stored)
        return stored

    async def delete(self, record_id: Any) -> bool:
        """True if a backend held record_id and it is gone now."""
        try:
            removed_remote = await self._store.delete(self.name, record_id)
        except StoreUnavailable:
            logger.info("fallback.write_local", collection=self.name, operation="delete", record_id=str(record_id))
            return await self._cache.remove(self.name, record_id) is not None
        removed_local = await self._cache.remove(self.name, record_id)
        return removed_remote or removed_local is not None

    async def increment(
        self,
        record_id: Any,
        deltas: Dict[str, int],
        touch: Optional[str] = None,
        seed: Optional[Record] = None,
    ) -> Record:
        """Atomic counter bump; the row is created from seed when the remote has none."""
        try:
            stored = await self._store.increment(self.name, record_id, deltas, touch)
            if stored is None:
                row = {**(seed or {}), "id": record_id}
                for field, delta in deltas.items():
                    row[field] = int(row.get(field) or 0) + delta
                stored = await self._store.insert(self.name, row)
        except StoreUnavailable:
            logger.info("fallback.write_local", collection=self.name, operation="increment", record_id=str(record_id))
            return await self._cache.increment(self.name, record_id, deltas, touch=touch, seed=seed)
        await self._cache.put_max(self.name, stored, fields=self._counter_fields or tuple(deltas))
        return stored
