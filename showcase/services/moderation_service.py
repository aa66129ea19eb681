"""
Moderation workflow: administrator-driven status transitions.
pending (initial) <-> approved <-> rejected; every state may move to every other
and re-applying the current state succeeds (only updated_at moves).
"""
from dataclasses import dataclass
from typing import Optional

from showcase.logging_config import get_logger
from showcase.schemas.content import ContentItemRecord, ContentStatus
from showcase.schemas.statistics import Statistics
from showcase.services.content_repository import ContentRepository, parse_status
from showcase.services.statistics_service import StatisticsReconciler

logger = get_logger(__name__)


@dataclass
class ModerationOutcome:
    item: ContentItemRecord
    statistics: Statistics


class ModerationWorkflow:
    """approve / reject / set_status, each followed by a statistics recomputation."""

    def __init__(self, repository: ContentRepository, statistics: StatisticsReconciler) -> None:
        self._repository = repository
        self._statistics = statistics

    async def approve(self, item_id: str, actor: Optional[str] = None) -> ModerationOutcome:
        return await self._transition(item_id, ContentStatus.APPROVED, actor=actor)

    async def reject(self, item_id: str, reason: Optional[str] = None, actor: Optional[str] = None) -> ModerationOutcome:
        return await self._transition(item_id, ContentStatus.REJECTED, actor=actor, reason=reason)

    async def set_status(
        self,
        item_id: str,
        status: ContentStatus | str,
        actor: Optional[str] = None,
    ) -> ModerationOutcome:
        return await self._transition(item_id, parse_status(status), actor=actor)

    async def _transition(
        self,
        item_id: str,
        status: ContentStatus,
        actor: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> ModerationOutcome:
        """
        Delegate to ContentRepository.update_status (NotFound propagates), then
        return the statistics recomputed by that mutation.
        """
        item = await self._repository.update_status(item_id, status)
        stats = self._statistics.snapshot or await self._statistics.current_statistics()
        logger.info(
            "moderation.transition",
            item_id=item_id,
            status=status.value,
            actor=actor,
            reason=reason,
        )
        return ModerationOutcome(item=item, statistics=stats)
