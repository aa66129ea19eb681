"""
Content repository over both backends: validation, write-through,
fallback on outage and on empty remote reads, never merging results.
"""
import asyncio

import pytest

from showcase.errors import NotFound, ValidationError
from showcase.schemas.content import ContentStatus, ContentSubmission, ContentUpdate
from showcase.services.content_repository import CONTENT_COLLECTION, ContentRepository


def _submission(title: str = "Rollups explained", **overrides) -> ContentSubmission:
    data = {"title": title, "category": "article", "author": "bob", "url": "https://example.com/a"}
    data.update(overrides)
    return ContentSubmission(**data)


@pytest.fixture
def repository(memory_store, cache) -> ContentRepository:
    return ContentRepository(memory_store, cache)


@pytest.mark.asyncio
async def test_create_sets_pending_and_mirrors_locally(repository, memory_store, cache) -> None:
    item = await repository.create(_submission())
    assert item.status == ContentStatus.PENDING.value
    assert item.created_at == item.updated_at
    assert item.id in memory_store.collections[CONTENT_COLLECTION]
    assert cache.get(CONTENT_COLLECTION, item.id)["title"] == "Rollups explained"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "category", "author"])
async def test_create_requires_non_blank_fields(repository, memory_store, field) -> None:
    with pytest.raises(ValidationError) as exc:
        await repository.create(_submission(**{field: "   "}))
    assert exc.value.field == field
    assert memory_store.calls == []


@pytest.mark.asyncio
async def test_create_during_outage_goes_to_cache_only(repository, memory_store, cache) -> None:
    memory_store.available = False
    item = await repository.create(_submission())
    assert cache.get(CONTENT_COLLECTION, item.id) is not None
    assert memory_store.collections.get(CONTENT_COLLECTION, {}) == {}

    pending = await repository.get_by_status(ContentStatus.PENDING)
    assert [i.id for i in pending] == [item.id]


@pytest.mark.asyncio
async def test_empty_remote_read_falls_back_to_local(repository, memory_store) -> None:
    """Written during an outage; once the remote is back (and empty) the cache still serves it."""
    memory_store.available = False
    item = await repository.create(_submission())
    memory_store.available = True
    pending = await repository.get_by_status("pending")
    assert [i.id for i in pending] == [item.id]


@pytest.mark.asyncio
async def test_results_are_never_merged(repository, memory_store) -> None:
    remote_item = await repository.create(_submission("Remote"))
    memory_store.available = False
    await repository.create(_submission("Local only"))
    memory_store.available = True

    items = await repository.get_by_status(None)
    assert [i.id for i in items] == [remote_item.id]


@pytest.mark.asyncio
async def test_get_by_status_newest_first(repository) -> None:
    first = await repository.create(_submission("first"))
    await asyncio.sleep(0.002)
    second = await repository.create(_submission("second"))
    items = await repository.get_by_status(None)
    assert [i.id for i in items] == [second.id, first.id]


@pytest.mark.asyncio
async def test_get_by_status_rejects_unknown_status(repository) -> None:
    with pytest.raises(ValidationError):
        await repository.get_by_status("archived")


@pytest.mark.asyncio
async def test_update_status_is_idempotent(repository) -> None:
    item = await repository.create(_submission())
    once = await repository.update_status(item.id, "approved")
    twice = await repository.update_status(item.id, ContentStatus.APPROVED)
    assert once.status == twice.status == "approved"
    assert twice.created_at == item.created_at
    assert twice.updated_at >= once.updated_at


@pytest.mark.asyncio
async def test_update_status_errors(repository) -> None:
    item = await repository.create(_submission())
    with pytest.raises(ValidationError):
        await repository.update_status(item.id, "archived")
    with pytest.raises(NotFound):
        await repository.update_status("no-such-id", "approved")


@pytest.mark.asyncio
async def test_update_status_of_item_written_during_outage(repository, memory_store) -> None:
    memory_store.available = False
    item = await repository.create(_submission())
    memory_store.available = True
    updated = await repository.update_status(item.id, "rejected")
    assert updated.status == "rejected"


@pytest.mark.asyncio
async def test_update_fields(repository) -> None:
    item = await repository.create(_submission())
    updated = await repository.update_fields(item.id, ContentUpdate(title="New title"))
    assert updated.title == "New title"
    assert updated.author == item.author
    with pytest.raises(ValidationError):
        await repository.update_fields(item.id, ContentUpdate(author=""))
    with pytest.raises(NotFound):
        await repository.update_fields("missing", ContentUpdate(title="x"))


@pytest.mark.asyncio
async def test_delete_returns_item_then_not_found(repository, memory_store, cache) -> None:
    item = await repository.create(_submission())
    deleted = await repository.delete(item.id)
    assert deleted.id == item.id
    assert cache.get(CONTENT_COLLECTION, item.id) is None
    assert item.id not in memory_store.collections[CONTENT_COLLECTION]
    with pytest.raises(NotFound):
        await repository.get(item.id)
    with pytest.raises(NotFound):
        await repository.delete(item.id)


@pytest.mark.asyncio
async def test_listeners_run_after_each_mutation(repository) -> None:
    events = []

    async def listener(event, item) -> None:
        events.append((event, item.status))

    repository.subscribe(listener)
    item = await repository.create(_submission())
    await repository.update_status(item.id, "approved")
    await repository.delete(item.id)
    assert events == [("created", "pending"), ("status_updated", "approved"), ("deleted", "approved")]


@pytest.mark.asyncio
async def test_failing_listener_does_not_undo_write(repository) -> None:
    async def broken(event, item) -> None:
        raise RuntimeError("boom")

    repository.subscribe(broken)
    item = await repository.create(_submission())
    assert (await repository.get(item.id)).id == item.id
