"""Usage statistics."""
from fastapi import APIRouter, Depends, HTTPException, status

from showcase.container import Services
from showcase.dependencies import get_services
from showcase.errors import StoreUnavailable
from showcase.schemas.statistics import Statistics

router = APIRouter(prefix="/api", tags=["statistics"])


@router.get("/chat-stats", response_model=Statistics)
async def get_chat_stats(services: Services = Depends(get_services)) -> Statistics:
    """Submission counters recomputed from the live collection, plus chat counters."""
    try:
        return await services.statistics.current_statistics()
    except StoreUnavailable:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Statistics unavailable")
