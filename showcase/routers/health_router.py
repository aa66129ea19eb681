# Health: /api/health (legacy probe), /api/healthz (liveness), /api/readyz (durable store + Redis).
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

from showcase.container import Services
from showcase.dependencies import get_services
from showcase.errors import StoreUnavailable
from showcase.logging_config import get_logger

router = APIRouter(prefix="/api", tags=["health"])
logger = get_logger(__name__)


@router.get("/health")
def health() -> dict[str, str]:
    """Health check for load balancer / Docker."""
    return {"status": "ok", "message": "Server is running"}


@router.get("/healthz")
def healthz() -> dict[str, str]:
    """Liveness: process is up. Always 200."""
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(services: Services = Depends(get_services)):
    """
    Readiness: durable store and Redis (if configured). 503 when either fails.
    The local cache keeps serving during a store outage, so a failing store is reported, not fatal.
    """
    try:
        await services.store.ping()
    except StoreUnavailable as e:
        logger.warning("readyz.store_fail", reason=e.reason)
        return JSONResponse(status_code=503, content={"status": "unhealthy", "store": "fail"})

    redis_url = services.settings.redis_url
    if redis_url:
        client = Redis.from_url(redis_url, decode_responses=True)
        try:
            await client.ping()
        except Exception as e:
            logger.warning("readyz.redis_fail", error=str(e))
            return JSONResponse(status_code=503, content={"status": "unhealthy", "redis": "fail"})
        finally:
            await client.aclose()

    return {"status": "ok", "store": "ok", "redis": "ok" if redis_url else "disabled"}
