"""
Moderation workflow: every state reaches every other, re-applying a status
only moves updated_at, each transition returns fresh statistics.
"""
import pytest

from showcase.errors import NotFound, ValidationError
from showcase.schemas.content import ContentSubmission
from showcase.services.chat_usage_service import ChatUsageCounter
from showcase.services.content_repository import ContentRepository
from showcase.services.moderation_service import ModerationWorkflow
from showcase.services.statistics_service import StatisticsReconciler


@pytest.fixture
def workflow(memory_store, cache):
    repository = ContentRepository(memory_store, cache)
    statistics = StatisticsReconciler(repository, ChatUsageCounter(memory_store, cache))
    return repository, ModerationWorkflow(repository, statistics)


async def _pending(repository):
    return await repository.create(ContentSubmission(title="Graphic", category="graphic", author="dan"))


@pytest.mark.asyncio
async def test_approve_returns_item_and_statistics(workflow) -> None:
    repository, moderation = workflow
    item = await _pending(repository)
    outcome = await moderation.approve(item.id, actor="xion")
    assert outcome.item.status == "approved"
    assert outcome.statistics.total_approved == 1
    assert outcome.statistics.total_pending == 0


@pytest.mark.asyncio
async def test_reject_with_reason(workflow) -> None:
    repository, moderation = workflow
    item = await _pending(repository)
    outcome = await moderation.reject(item.id, reason="off topic", actor="xion")
    assert outcome.item.status == "rejected"
    assert outcome.statistics.total_rejected == 1


@pytest.mark.asyncio
async def test_any_state_reaches_any_other(workflow) -> None:
    repository, moderation = workflow
    item = await _pending(repository)
    for status in ("approved", "rejected", "pending", "rejected", "approved", "pending"):
        outcome = await moderation.set_status(item.id, status)
        assert outcome.item.status == status
        assert outcome.statistics.total_submissions == 1


@pytest.mark.asyncio
async def test_reapplying_status_only_touches_updated_at(workflow) -> None:
    repository, moderation = workflow
    item = await _pending(repository)
    first = await moderation.approve(item.id)
    second = await moderation.approve(item.id)
    assert second.item.status == "approved"
    assert second.item.title == first.item.title
    assert second.item.created_at == item.created_at
    assert second.item.updated_at >= first.item.updated_at
    assert second.statistics.total_approved == 1


@pytest.mark.asyncio
async def test_unknown_item_and_status(workflow) -> None:
    repository, moderation = workflow
    with pytest.raises(NotFound):
        await moderation.approve("missing")
    item = await _pending(repository)
    with pytest.raises(ValidationError):
        await moderation.set_status(item.id, "published")
