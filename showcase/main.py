"""FastAPI application entrypoint."""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from showcase import __version__
from showcase.config import get_settings
from showcase.container import build_services
from showcase.logging_config import configure_logging, get_logger
from showcase.middleware.correlation_id import CorrelationIdMiddleware
from showcase.middleware.rate_limit import RateLimitMiddleware
from showcase.routers import auth_router, chat_router, content_router, health_router, stats_router
from showcase.services.upload_service import UPLOADS_URL_PREFIX

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown: logging, cache load + services, bootstrap admin, teardown."""
    configure_logging()
    settings = get_settings()
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    app.state.services = await build_services(settings)
    logger.info("app_started", version=__version__, env=settings.app_env)
    yield
    await app.state.services.close()
    logger.info("app_shutdown")


app = FastAPI(
    title="Community Content Showcase",
    version=__version__,
    lifespan=lifespan,
)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(content_router)
app.include_router(stats_router)
app.include_router(chat_router)

app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=get_settings().upload_dir, check_dir=False), name="uploads")


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint: app name and version."""
    return {"name": "showcase", "version": __version__}
