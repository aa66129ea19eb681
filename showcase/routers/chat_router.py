"""Streaming AI chat (server-sent events)."""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from showcase.container import Services
from showcase.dependencies import get_services
from showcase.schemas.chat import ChatRequest
from showcase.services.chat_relay_service import ChatRateLimited, ChatRelayError, ChatRelayNotConfigured

router = APIRouter(prefix="/api", tags=["chat"])

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


@router.post("/chat")
async def post_chat(payload: ChatRequest, services: Services = Depends(get_services)) -> StreamingResponse:
    """
    Count the interaction, then relay the message and stream the answer.
    400 empty message, 503 relay not configured, 429 upstream rate limit, 502 upstream error.
    """
    if not payload.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")
    if not services.chat_relay.configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Chat is not configured")
    await services.chat_counter.record_chat_interaction(payload.message)
    try:
        events = await services.chat_relay.open_stream(payload.message, payload.history)
    except ChatRateLimited:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Rate limit exceeded")
    except ChatRelayNotConfigured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Chat is not configured")
    except ChatRelayError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Chat upstream failed")
    return StreamingResponse(events, media_type="text/event-stream", headers=SSE_HEADERS)
