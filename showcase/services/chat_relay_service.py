"""
Streaming chat relay (OpenAI chat completions).
Emits server-sent events: data: {"delta": "..."} per chunk, then data: {"done": true}.
Counting the interaction is the caller's job (ChatUsageCounter), before the stream opens.
"""
import json
from typing import Any, AsyncIterator, Dict, List, Sequence

from openai import APIError, AsyncOpenAI, RateLimitError

from showcase.config import Settings
from showcase.errors import ShowcaseError
from showcase.logging_config import get_logger
from showcase.schemas.chat import ChatTurn

logger = get_logger(__name__)


class ChatRelayNotConfigured(ShowcaseError):
    """OPENAI_API_KEY missing."""


class ChatRateLimited(ShowcaseError):
    """Upstream answered 429."""


class ChatRelayError(ShowcaseError):
    """Upstream refused to open the stream."""


def sse_event(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


class ChatRelay:
    """Relay a user message (plus history) to the model and stream the answer back."""

    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.timeout_seconds = settings.openai_timeout_seconds
        self.max_retries = settings.openai_max_retries
        self.temperature = settings.openai_temperature
        self.system_prompt = settings.chat_system_prompt
        self._client: AsyncOpenAI | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        """Lazy init of the OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=float(self.timeout_seconds),
                max_retries=self.max_retries,
            )
        return self._client

    def build_messages(self, message: str, history: Sequence[ChatTurn]) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": self.system_prompt}]
        messages.extend({"role": turn.role, "content": turn.content} for turn in history)
        messages.append({"role": "user", "content": message})
        return messages

    async def open_stream(self, message: str, history: Sequence[ChatTurn]) -> AsyncIterator[str]:
        """
        Open the upstream stream and return an iterator of SSE strings.
        Errors before the first byte raise (ChatRelayNotConfigured, ChatRateLimited, ChatRelayError)
        so the router can still answer with a proper status code.
        """
        if not self.configured:
            raise ChatRelayNotConfigured("chat relay not configured")
        try:
            stream = await self._get_client().chat.completions.create(
                model=self.model,
                messages=self.build_messages(message, history),
                temperature=self.temperature,
                stream=True,
            )
        except RateLimitError as e:
            logger.warning("chat_relay.rate_limited", model=self.model)
            raise ChatRateLimited("Rate limit exceeded") from e
        except APIError as e:
            logger.warning("chat_relay.open_failed", model=self.model, error=str(e))
            raise ChatRelayError("Chat upstream failed") from e
        return self._events(stream)

    async def _events(self, stream: Any) -> AsyncIterator[str]:
        chunks = 0
        try:
            async for chunk in stream:
                delta = chunk.choices[0].delta.content if chunk.choices else None
                if delta:
                    chunks += 1
                    yield sse_event({"delta": delta})
            yield sse_event({"done": True})
        except APIError as e:
            logger.warning("chat_relay.stream_failed", model=self.model, chunks=chunks, error=str(e))
            yield sse_event({"error": "Streaming failed"})
        else:
            logger.info("chat_relay.completed", model=self.model, chunks=chunks)
