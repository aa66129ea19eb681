"""
Rate limit for the anonymous write endpoints (chat, content submission).
Redis sliding window keyed by client address, RATE_LIMIT_PER_MIN per minute.
Without REDIS_URL it does nothing; Redis errors let the request through.
"""
import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware

from showcase.config import get_settings
from showcase.logging_config import get_logger

logger = get_logger(__name__)

REDIS_KEY_PREFIX = "rl:"
WINDOW_SECONDS = 60
LIMITED_PATHS = ("/api/chat", "/api/content/submit")


def _rate_limit_key(request: Request) -> Optional[str]:
    """Key for POSTs to a limited path: the client address (first X-Forwarded-For hop if present)."""
    if request.method != "POST" or request.url.path not in LIMITED_PATHS:
        return None
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    client = forwarded or (request.client.host if request.client else "")
    if not client:
        return None
    return f"{request.url.path}:{client}"


async def _check_sliding_window(redis_url: str, key: str, limit: int) -> bool:
    """
    Sliding window: ZADD now, ZREMRANGEBYSCORE -inf (now-60), ZCARD.
    True if the request is allowed (at or under the limit).
    """
    now = time.time()
    rkey = REDIS_KEY_PREFIX + key
    try:
        client = Redis.from_url(redis_url, decode_responses=True)
        try:
            pipe = client.pipeline()
            pipe.zadd(rkey, {str(uuid.uuid4()): now})
            pipe.zremrangebyscore(rkey, "-inf", now - WINDOW_SECONDS)
            pipe.zcard(rkey)
            pipe.expire(rkey, WINDOW_SECONDS + 10)
            results = await pipe.execute()
            return results[2] <= limit
        finally:
            await client.aclose()
    except Exception as e:
        logger.warning("rate_limit.redis_error", key=key, error=str(e))
        return True


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        settings = get_settings()
        if not settings.redis_url:
            return await call_next(request)
        key = _rate_limit_key(request)
        if not key:
            return await call_next(request)
        limit = settings.rate_limit_per_min
        if not await _check_sliding_window(settings.redis_url, key, limit):
            logger.info("rate_limit.exceeded", key=key, limit=limit)
            return Response(
                content='{"detail":"Rate limit exceeded, try again in a minute."}',
                status_code=429,
                media_type="application/json",
            )
        return await call_next(request)
