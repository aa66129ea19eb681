"""
Chat usage counter: keyword detection, singleton seeding, outage fallback,
per-backend monotonic counters.
"""
import asyncio

import pytest

from showcase.models.chat_statistics import STATISTICS_ROW_ID
from showcase.services.chat_usage_service import STATISTICS_COLLECTION, ChatUsageCounter, is_content_idea


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Give me a VIDEO idea", True),
        ("how do I create a thread?", True),
        ("Blogging tips", True),
        ("postgres or mysql?", True),
        ("hello there", False),
        ("what's the weather", False),
        ("", False),
    ],
)
def test_is_content_idea(message, expected) -> None:
    assert is_content_idea(message) is expected


@pytest.fixture
def counter(memory_store, cache) -> ChatUsageCounter:
    return ChatUsageCounter(memory_store, cache)


@pytest.mark.asyncio
async def test_first_interaction_seeds_the_singleton(counter, memory_store) -> None:
    counts = await counter.record_chat_interaction("hello")
    assert (counts.total_chats, counts.total_content_ideas) == (1, 0)
    row = memory_store.collections[STATISTICS_COLLECTION][STATISTICS_ROW_ID]
    assert row["total_chats"] == 1


@pytest.mark.asyncio
async def test_keyword_scenario(counter) -> None:
    await counter.record_chat_interaction("hello")
    await counter.record_chat_interaction("write me a tutorial")
    counts = await counter.record_chat_interaction("another article please")
    assert (counts.total_chats, counts.total_content_ideas) == (3, 2)
    assert (await counter.current_counts()).total_chats == 3


@pytest.mark.asyncio
async def test_outage_counts_locally(counter, memory_store, cache) -> None:
    memory_store.available = False
    await counter.record_chat_interaction("hi")
    counts = await counter.record_chat_interaction("video idea")
    assert (counts.total_chats, counts.total_content_ideas) == (2, 1)
    assert cache.get(STATISTICS_COLLECTION, STATISTICS_ROW_ID)["total_chats"] == 2
    assert (await counter.current_counts()).total_chats == 2


@pytest.mark.asyncio
async def test_missing_remote_row_falls_back_to_local_counts(counter, memory_store) -> None:
    memory_store.available = False
    await counter.record_chat_interaction("hi")
    memory_store.available = True
    assert (await counter.current_counts()).total_chats == 1


@pytest.mark.asyncio
async def test_counters_never_decrease_on_either_backend(counter, memory_store, cache) -> None:
    await counter.record_chat_interaction("one")
    memory_store.available = False
    await counter.record_chat_interaction("two")
    await counter.record_chat_interaction("three")
    memory_store.available = True
    remote = await counter.record_chat_interaction("four")

    assert remote.total_chats == 2
    assert cache.get(STATISTICS_COLLECTION, STATISTICS_ROW_ID)["total_chats"] == 3


@pytest.mark.asyncio
async def test_concurrent_interactions_are_not_lost(counter) -> None:
    await asyncio.gather(*(counter.record_chat_interaction("post idea") for _ in range(20)))
    counts = await counter.current_counts()
    assert counts.total_chats == 20
    assert counts.total_content_ideas == 20


@pytest.mark.asyncio
async def test_no_data_anywhere(counter) -> None:
    counts = await counter.current_counts()
    assert (counts.total_chats, counts.total_content_ideas) == (0, 0)


@pytest.mark.asyncio
async def test_recovered_remote_row_wins_over_higher_local_counts(counter, memory_store, cache) -> None:
    await counter.record_chat_interaction("one")
    memory_store.available = False
    await counter.record_chat_interaction("two")
    await counter.record_chat_interaction("three")
    assert (await counter.current_counts()).total_chats == 3

    memory_store.available = True
    assert (await counter.current_counts()).total_chats == 1
    assert cache.get(STATISTICS_COLLECTION, STATISTICS_ROW_ID)["total_chats"] == 3
