"""
Statistics reconciler.
Submission counters are recomputed from the live content collection on every
request; nothing increments them by hand, so deletes, manual edits and
restarts cannot make them drift.
"""
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from showcase.logging_config import get_logger
from showcase.schemas.content import ContentItemRecord, ContentStatus
from showcase.schemas.statistics import ChatCounts, Statistics
from showcase.services.chat_usage_service import ChatUsageCounter
from showcase.services.content_repository import ContentRepository

logger = get_logger(__name__)


class StatisticsReconciler:
    """current_statistics() + a cached snapshot refreshed after every mutation."""

    def __init__(self, repository: ContentRepository, chat_counter: ChatUsageCounter) -> None:
        self._repository = repository
        self._chat_counter = chat_counter
        self._snapshot: Optional[Statistics] = None
        repository.subscribe(self._on_content_changed)
        chat_counter.subscribe(self._on_chat_recorded)

    @property
    def snapshot(self) -> Optional[Statistics]:
        """Last computed statistics; None until the first computation (or after a failed refresh)."""
        return self._snapshot

    async def current_statistics(self) -> Statistics:
        """Partition all items by status and merge in the chat counters."""
        items = await self._repository.get_by_status(None)
        by_status = Counter(item.status for item in items)
        chat = await self._chat_counter.current_counts()
        stats = Statistics(
            total_chats=chat.total_chats,
            total_content_ideas=chat.total_content_ideas,
            total_approved=by_status[ContentStatus.APPROVED.value],
            total_pending=by_status[ContentStatus.PENDING.value],
            total_rejected=by_status[ContentStatus.REJECTED.value],
            total_submissions=len(items),
            last_updated=datetime.now(timezone.utc),
        )
        self._snapshot = stats
        return stats

    async def refresh(self, reason: str) -> Statistics:
        """Recompute after a mutation and log the new counters."""
        self._snapshot = None
        stats = await self.current_statistics()
        logger.info(
            "statistics.recomputed",
            reason=reason,
            total_submissions=stats.total_submissions,
            total_approved=stats.total_approved,
            total_pending=stats.total_pending,
            total_rejected=stats.total_rejected,
            total_chats=stats.total_chats,
        )
        return stats

    async def _on_content_changed(self, event: str, item: ContentItemRecord) -> None:
        await self.refresh(f"content.{event}")

    async def _on_chat_recorded(self, counts: ChatCounts) -> None:
        await self.refresh("chat.recorded")
