"""
Content repository: sole owner of the content_items collection.
Reads and writes go durable store first, local cache on failure (see infrastructure.fallback).
Every mutation notifies subscribers (statistics reconciler) after it is stored.
"""
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from showcase.errors import NotFound, ValidationError
from showcase.infrastructure.durable_store import DurableStore
from showcase.infrastructure.fallback import FallbackCollection
from showcase.infrastructure.local_cache import LocalFallbackCache
from showcase.logging_config import get_logger
from showcase.schemas.content import ContentItemRecord, ContentStatus, ContentSubmission, ContentUpdate

logger = get_logger(__name__)

CONTENT_COLLECTION = "content_items"
REQUIRED_FIELDS = ("title", "category", "author")

ContentListener = Callable[[str, ContentItemRecord], Awaitable[None]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _required(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value


def validate_submission(submission: ContentSubmission) -> None:
    """Raise ValidationError for the first blank required field."""
    for field in REQUIRED_FIELDS:
        _required(getattr(submission, field), field)


def validate_update(changes: ContentUpdate) -> None:
    """Required fields may be omitted from an edit but not blanked."""
    for field in REQUIRED_FIELDS:
        value = getattr(changes, field)
        if value is not None:
            _required(value, field)


def parse_status(value: ContentStatus | str) -> ContentStatus:
    """ContentStatus from enum or raw string; anything else is a ValidationError."""
    try:
        return ContentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ContentStatus)
        raise ValidationError(f"invalid status {value!r} (allowed: {allowed})", field="status") from None


class ContentRepository:
    """create / get_by_status / get / update_status / update_fields / delete over both backends."""

    def __init__(self, store: DurableStore, cache: LocalFallbackCache) -> None:
        self._items = FallbackCollection(CONTENT_COLLECTION, store, cache)
        self._listeners: List[ContentListener] = []

    def subscribe(self, listener: ContentListener) -> None:
        """Register an async callback (event, item) run after each mutation."""
        self._listeners.append(listener)

    async def _notify(self, event: str, item: ContentItemRecord) -> None:
        for listener in self._listeners:
            try:
                await listener(event, item)
            except Exception:
                # write already stored; subscribers cannot undo it
                logger.exception("content.listener_failed", content_event=event, item_id=item.id)

    async def create(self, submission: ContentSubmission) -> ContentItemRecord:
        """
        Validate title/category/author, assign id, status=pending, timestamps=now; store.
        Raises ValidationError on a missing required field.
        """
        validate_submission(submission)
        now = _utcnow()
        item = ContentItemRecord(
            id=str(uuid.uuid4()),
            title=submission.title,
            category=submission.category,
            author=submission.author,
            url=submission.url or None,
            thumbnail_url=submission.thumbnail_url or None,
            status=ContentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        stored = ContentItemRecord.model_validate(await self._items.insert(item.model_dump()))
        logger.info("content.created", item_id=stored.id, category=stored.category, author=stored.author)
        await self._notify("created", stored)
        return stored

    async def get_by_status(self, status: ContentStatus | str | None = None) -> List[ContentItemRecord]:
        """Items with the given status (all items when None), newest first."""
        filters = {"status": parse_status(status).value} if status is not None else None
        records, source = await self._items.find(filters)
        items = [ContentItemRecord.model_validate(r) for r in records]
        items.sort(key=lambda it: it.created_at, reverse=True)
        logger.debug("content.listed", status=filters and filters["status"], count=len(items), source=source)
        return items

    async def get(self, item_id: str) -> ContentItemRecord:
        """Single item; NotFound when neither backend has it."""
        record = await self._items.get(item_id)
        if record is None:
            raise NotFound(CONTENT_COLLECTION, item_id)
        return ContentItemRecord.model_validate(record)

    async def update_status(self, item_id: str, new_status: ContentStatus | str) -> ContentItemRecord:
        """
        Set status and refresh updated_at. Idempotent: the same status twice only moves updated_at.
        Raises ValidationError for an unknown status, NotFound for an unknown id.
        """
        status = parse_status(new_status)
        record = await self._items.update(item_id, {"status": status.value, "updated_at": _utcnow()})
        if record is None:
            raise NotFound(CONTENT_COLLECTION, item_id)
        item = ContentItemRecord.model_validate(record)
        logger.info("content.status_updated", item_id=item_id, status=item.status)
        await self._notify("status_updated", item)
        return item

    async def update_fields(self, item_id: str, changes: ContentUpdate) -> ContentItemRecord:
        """Admin edit of title/category/author/url/thumbnail_url; None keeps the value."""
        validate_update(changes)
        patch = changes.model_dump(exclude_none=True)
        patch["updated_at"] = _utcnow()
        record = await self._items.update(item_id, patch)
        if record is None:
            raise NotFound(CONTENT_COLLECTION, item_id)
        item = ContentItemRecord.model_validate(record)
        logger.info("content.updated", item_id=item_id, fields=sorted(k for k in patch if k != "updated_at"))
        await self._notify("updated", item)
        return item

    async def delete(self, item_id: str) -> ContentItemRecord:
        """Hard delete from whichever backend holds the item. Returns the deleted item."""
        item = await self.get(item_id)
        if not await self._items.delete(item_id):
            raise NotFound(CONTENT_COLLECTION, item_id)
        logger.info("content.deleted", item_id=item_id, status=item.status)
        await self._notify("deleted", item)
        return item
