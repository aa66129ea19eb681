"""stdlib loggers (uvicorn, SQLAlchemy) are rendered by the structlog pipeline."""
import json
import logging

import structlog

from showcase.logging_config import NOISY_LOGGERS, configure_logging


def test_stdlib_records_render_as_json(settings, capsys) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(settings.model_copy(update={"app_env": "production", "log_level": "INFO"}))
        structlog.contextvars.bind_contextvars(correlation_id="cid-1")
        logging.getLogger("uvicorn.error").warning("port %d busy", 8000)
        line = capsys.readouterr().out.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "port 8000 busy"
        assert entry["level"] == "warning"
        assert entry["correlation_id"] == "cid-1"
        assert "timestamp" in entry
        assert logging.getLogger(NOISY_LOGGERS[0]).level == logging.WARNING
    finally:
        structlog.contextvars.clear_contextvars()
        structlog.reset_defaults()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
