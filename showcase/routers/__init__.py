"""API routers."""
from showcase.routers.auth_router import router as auth_router
from showcase.routers.chat_router import router as chat_router
from showcase.routers.content_router import router as content_router
from showcase.routers.health_router import router as health_router
from showcase.routers.stats_router import router as stats_router

__all__ = [
    "auth_router",
    "chat_router",
    "content_router",
    "health_router",
    "stats_router",
]
