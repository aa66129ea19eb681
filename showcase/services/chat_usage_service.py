"""
Chat usage counter: total_chats on every chat interaction, total_content_ideas
when the message looks like a content request. Stored in the chat_statistics
singleton through the same durable-then-local policy as content items.
"""
from datetime import datetime, timezone
from typing import Awaitable, Callable, List

from showcase.infrastructure.durable_store import DurableStore, Record
from showcase.infrastructure.fallback import FallbackCollection
from showcase.infrastructure.local_cache import LocalFallbackCache
from showcase.logging_config import get_logger
from showcase.models.chat_statistics import STATISTICS_ROW_ID
from showcase.schemas.statistics import ChatCounts

logger = get_logger(__name__)

STATISTICS_COLLECTION = "chat_statistics"
COUNTER_FIELDS = ("total_chats", "total_content_ideas")
CONTENT_IDEA_KEYWORDS = (
    "content",
    "create",
    "idea",
    "video",
    "tutorial",
    "thread",
    "post",
    "article",
    "blog",
)

ChatListener = Callable[[ChatCounts], Awaitable[None]]


def is_content_idea(message: str) -> bool:
    """Case-insensitive substring match against CONTENT_IDEA_KEYWORDS."""
    lowered = message.lower()
    return any(keyword in lowered for keyword in CONTENT_IDEA_KEYWORDS)


def _has_chats(records: List[Record]) -> bool:
    # A missing or all-zero remote row counts as "no data" when the cache has some.
    return any(int(r.get("total_chats") or 0) > 0 for r in records)


class ChatUsageCounter:
    """record_chat_interaction / current_counts over the chat_statistics singleton."""

    def __init__(self, store: DurableStore, cache: LocalFallbackCache) -> None:
        self._stats = FallbackCollection(
            STATISTICS_COLLECTION,
            store,
            cache,
            is_usable=_has_chats,
            counter_fields=COUNTER_FIELDS,
        )
        self._listeners: List[ChatListener] = []

    def subscribe(self, listener: ChatListener) -> None:
        self._listeners.append(listener)

    async def record_chat_interaction(self, message: str) -> ChatCounts:
        """Count one chat message (and one content idea if keywords match)."""
        idea = is_content_idea(message)
        deltas = {"total_chats": 1}
        if idea:
            deltas["total_content_ideas"] = 1
        seed = {"total_chats": 0, "total_content_ideas": 0, "last_updated": datetime.now(timezone.utc)}
        stored = await self._stats.increment(STATISTICS_ROW_ID, deltas, touch="last_updated", seed=seed)
        counts = ChatCounts.model_validate(stored)
        logger.info(
            "chat_usage.recorded",
            content_idea=idea,
            total_chats=counts.total_chats,
            total_content_ideas=counts.total_content_ideas,
        )
        for listener in self._listeners:
            try:
                await listener(counts)
            except Exception:
                logger.exception("chat_usage.listener_failed")
        return counts

    async def current_counts(self) -> ChatCounts:
        """Counters from the remote row, or the local mirror when the remote is down or empty."""
        # Never merged: after an outage the remote row wins even if the local mirror counted more.
        # Each backend is monotonic on its own; the reported value may step back once on recovery.
        records, _ = await self._stats.find({"id": STATISTICS_ROW_ID})
        if not records:
            return ChatCounts()
        return ChatCounts.model_validate(records[0])
