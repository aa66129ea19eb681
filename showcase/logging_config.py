"""
Structured logging (structlog).
Application loggers and stdlib loggers (uvicorn, SQLAlchemy, httpx) share one
pipeline: same timestamp, level and correlation context, same renderer.
"""
import logging
import sys
from typing import List, Optional

import structlog
from structlog.typing import Processor

from showcase.config import Settings, get_settings

# Chatty at INFO; kept at WARNING unless LOG_LEVEL is stricter.
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "sqlalchemy.engine")


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(settings: Settings) -> Processor:
    if settings.app_env == "local":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog and route stdlib logging through the same renderer."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    renderer = _renderer(settings)

    structlog.configure(
        processors=_shared_processors()
        + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound logger for the given module name."""
    return structlog.get_logger(name)
