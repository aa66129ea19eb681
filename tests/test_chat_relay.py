"""
Chat relay against a mocked OpenAI client: SSE framing, rate limit and
mid-stream failures.
"""
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import APIConnectionError, RateLimitError

from showcase.schemas.chat import ChatTurn
from showcase.services.chat_relay_service import ChatRateLimited, ChatRelay, ChatRelayNotConfigured

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _chunk(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


def _client(create: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = create
    return client


async def _collect(events) -> list:
    return [json.loads(e[len("data: "):].strip()) async for e in events]


@pytest.fixture
def relay(settings) -> ChatRelay:
    return ChatRelay(settings.model_copy(update={"openai_api_key": "sk-test"}))


@pytest.mark.asyncio
async def test_not_configured(settings) -> None:
    relay = ChatRelay(settings)
    assert relay.configured is False
    with pytest.raises(ChatRelayNotConfigured):
        await relay.open_stream("hi", [])


def test_messages_include_system_prompt_and_history(relay) -> None:
    history = [ChatTurn(role="user", content="hi"), ChatTurn(role="assistant", content="hello")]
    messages = relay.build_messages("ideas?", history)
    assert messages[0]["role"] == "system"
    assert [m["role"] for m in messages[1:]] == ["user", "assistant", "user"]
    assert messages[-1]["content"] == "ideas?"


@pytest.mark.asyncio
async def test_stream_emits_deltas_then_done(relay) -> None:
    async def stream():
        yield _chunk("Thread")
        yield _chunk(None)
        yield _chunk(" ideas")

    create = AsyncMock(return_value=stream())
    with patch.object(relay, "_get_client", return_value=_client(create)):
        events = await relay.open_stream("give me thread ideas", [])
        collected = await _collect(events)
    assert collected == [{"delta": "Thread"}, {"delta": " ideas"}, {"done": True}]
    assert create.await_args.kwargs["stream"] is True


@pytest.mark.asyncio
async def test_upstream_rate_limit(relay) -> None:
    response = httpx.Response(429, request=httpx.Request("POST", OPENAI_URL))
    create = AsyncMock(side_effect=RateLimitError("slow down", response=response, body=None))
    with patch.object(relay, "_get_client", return_value=_client(create)):
        with pytest.raises(ChatRateLimited):
            await relay.open_stream("hi", [])


@pytest.mark.asyncio
async def test_failure_mid_stream_yields_error_event(relay) -> None:
    async def stream():
        yield _chunk("partial")
        raise APIConnectionError(request=httpx.Request("POST", OPENAI_URL))

    create = AsyncMock(return_value=stream())
    with patch.object(relay, "_get_client", return_value=_client(create)):
        collected = await _collect(await relay.open_stream("hi", []))
    assert collected == [{"delta": "partial"}, {"error": "Streaming failed"}]
