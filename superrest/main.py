"""
SuperREST server entry point.

Applications build their models, store and controllers, then call
serve() with the app returned by create_app(). See
examples/tasks_app/main.py.

Configuration is entirely via environment variables.
See config.py for all available settings.
"""

from __future__ import annotations

import logging

import json_log_formatter
import uvicorn
from fastapi import FastAPI

from .config import Settings
from .store import ModelStore

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings.

    Args:
        settings: App settings
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Reduce noise from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def open_store(settings: Settings) -> ModelStore:
    """Create the model store described by settings."""
    store = ModelStore(
        settings.database_path,
        wal_mode=settings.wal_mode,
        busy_timeout_ms=settings.busy_timeout_ms,
    )
    logger.info(
        "Store opened",
        extra={"database_path": settings.database_path, "wal_mode": settings.wal_mode},
    )
    return store


def serve(app: FastAPI, settings: Settings | None = None) -> None:
    """Run app under uvicorn until interrupted."""
    settings = settings or Settings()
    setup_logging(settings)
    logger.info(f"SuperREST listening on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
