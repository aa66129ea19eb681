"""
Local fallback cache: file-backed collection -> {id -> record} mapping.
Loaded once at startup, flushed to disk after every mutation (no write-behind).
A missing or corrupt file never stops the process: the cache starts empty.
A failed flush is logged; the in-memory state stays authoritative.
"""
import asyncio
import copy
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from showcase.errors import CorruptState
from showcase.logging_config import get_logger
from showcase.schemas.auth import UserRecord
from showcase.schemas.content import ContentItemRecord
from showcase.schemas.statistics import ChatCounts

logger = get_logger(__name__)

Record = Dict[str, Any]

CACHE_FORMAT_VERSION = 1

# Records of these collections must validate against their schema to be served.
RECORD_SCHEMAS: Dict[str, type[BaseModel]] = {
    "content_items": ContentItemRecord,
    "users": UserRecord,
    "chat_statistics": ChatCounts,
}


class CacheDocument(BaseModel):
    """On-disk layout. Record keys are the same column names the remote store uses."""

    version: int = CACHE_FORMAT_VERSION
    collections: Dict[str, Dict[str, Record]] = Field(default_factory=dict)


def _key(record_id: Any) -> str:
    return str(record_id)


def _matches(record: Record, filters: Optional[Dict[str, Any]]) -> bool:
    if not filters:
        return True
    return all(_key(record.get(name)) == _key(to_jsonable_python(value)) for name, value in filters.items())


class LocalFallbackCache:
    """
    In-memory mirror of the remote collections, persisted as one JSON document.
    Mutations on one collection are serialised by that collection's lock;
    writes of the backing file are serialised by a single flush lock.
    """

    def __init__(self, path: str | Path, schemas: Mapping[str, type[BaseModel]] = RECORD_SCHEMAS) -> None:
        self._path = Path(path)
        self._schemas = dict(schemas)
        self._collections: Dict[str, Dict[str, Record]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._flush_lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _lock(self, collection: str) -> asyncio.Lock:
        lock = self._locks.get(collection)
        if lock is None:
            lock = self._locks[collection] = asyncio.Lock()
        return lock

    def _bucket(self, collection: str) -> Dict[str, Record]:
        return self._collections.setdefault(collection, {})

    # --- load / save ---

    def load(self) -> None:
        """
        Read the backing file. Absent -> empty; unreadable -> warning + empty.
        Single records that do not match their collection schema are dropped with a warning.
        """
        if not self._path.exists():
            logger.info("local_cache.absent", path=str(self._path))
            self._collections = {}
            return
        try:
            self._collections = self._read()
        except CorruptState as e:
            logger.warning("local_cache.corrupt", path=str(self._path), error=str(e))
            self._collections = {}
            return
        logger.info(
            "local_cache.loaded",
            path=str(self._path),
            counts={name: len(records) for name, records in self._collections.items()},
        )

    def _read(self) -> Dict[str, Dict[str, Record]]:
        try:
            raw = self._path.read_text(encoding="utf-8")
            doc = CacheDocument.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, PydanticValidationError) as e:
            raise CorruptState(str(e)) from e
        return {name: self._valid_records(name, records) for name, records in doc.collections.items()}

    def _valid_records(self, collection: str, records: Dict[str, Record]) -> Dict[str, Record]:
        schema = self._schemas.get(collection)
        valid: Dict[str, Record] = {}
        for key, record in records.items():
            if schema is not None:
                try:
                    schema.model_validate(record)
                except PydanticValidationError as e:
                    logger.warning(
                        "local_cache.corrupt_record",
                        collection=collection,
                        record_id=key,
                        errors=e.error_count(),
                    )
                    continue
            valid[key] = record
        return valid

    async def save(self) -> bool:
        """Flush the whole document atomically (temp file + replace). False if the write failed."""
        async with self._flush_lock:
            payload = CacheDocument(collections=self._collections).model_dump_json(indent=2)
            try:
                await asyncio.to_thread(self._write, payload)
            except OSError as e:
                logger.warning("local_cache.save_failed", path=str(self._path), error=str(e))
                return False
        return True

    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, self._path)

    # --- reads (no await: always consistent with the last completed mutation) ---

    def all(self, collection: str) -> List[Record]:
        return self.find(collection)

    def find(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        """Copies of the records matching equality filters (unordered)."""
        return [copy.deepcopy(r) for r in self._bucket(collection).values() if _matches(r, filters)]

    def get(self, collection: str, record_id: Any) -> Optional[Record]:
        record = self._bucket(collection).get(_key(record_id))
        return copy.deepcopy(record) if record is not None else None

    def is_empty(self, collection: str) -> bool:
        return not self._collections.get(collection)

    # --- mutations ---

    async def put(self, collection: str, record: Record) -> Record:
        """Insert or fully replace a record by its id."""
        stored = to_jsonable_python(record)
        async with self._lock(collection):
            self._bucket(collection)[_key(stored["id"])] = stored
            await self.save()
        return copy.deepcopy(stored)

    async def patch(self, collection: str, record_id: Any, changes: Record) -> Optional[Record]:
        """Apply changes to an existing record. None if absent."""
        async with self._lock(collection):
            bucket = self._bucket(collection)
            current = bucket.get(_key(record_id))
            if current is None:
                return None
            updated = {**current, **to_jsonable_python(changes)}
            bucket[_key(record_id)] = updated
            await self.save()
        return copy.deepcopy(updated)

    async def remove(self, collection: str, record_id: Any) -> Optional[Record]:
        """Delete a record. Returns the removed record or None if absent."""
        async with self._lock(collection):
            removed = self._bucket(collection).pop(_key(record_id), None)
            if removed is not None:
                await self.save()
        return removed

    async def increment(
        self,
        collection: str,
        record_id: Any,
        deltas: Dict[str, int],
        touch: Optional[str] = None,
        seed: Optional[Record] = None,
    ) -> Record:
        """Add deltas to integer fields; a missing record starts from seed."""
        async with self._lock(collection):
            bucket = self._bucket(collection)
            current = bucket.get(_key(record_id))
            updated = dict(current) if current is not None else to_jsonable_python({**(seed or {}), "id": record_id})
            for name, delta in deltas.items():
                updated[name] = int(updated.get(name) or 0) + delta
            if touch:
                updated[touch] = to_jsonable_python(datetime.now(timezone.utc))
            bucket[_key(record_id)] = updated
            await self.save()
        return copy.deepcopy(updated)

    async def put_max(self, collection: str, record: Record, fields: Iterable[str]) -> Record:
        """Replace a record but never let the given counter fields go down."""
        stored = to_jsonable_python(record)
        async with self._lock(collection):
            bucket = self._bucket(collection)
            current = bucket.get(_key(stored["id"]))
            if current is not None:
                for name in fields:
                    stored[name] = max(int(stored.get(name) or 0), int(current.get(name) or 0))
            bucket[_key(stored["id"])] = stored
            await self.save()
        return copy.deepcopy(stored)
