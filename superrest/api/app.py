"""
FastAPI application factory for SuperREST.

This module creates the app with:
- CORS configuration
- One set of REST routes per resource controller
- Error handlers mapping SuperREST errors to HTTP statuses
- /health and /schema endpoints
"""

import logging
import sqlite3
from collections.abc import Iterable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .._version import __version__
from ..config import Settings
from ..errors import (
    AccessDeniedError,
    DecodeError,
    NotFoundError,
    SuperRestError,
    ValidationError,
)
from ..schema.registry import ModelRegistry, get_registry
from .controller import ResourceController
from .routes import resource_router

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[SuperRestError], int] = {
    DecodeError: 400,
    AccessDeniedError: 401,
    NotFoundError: 404,
    ValidationError: 422,
}


def status_for(error: SuperRestError) -> int:
    """HTTP status for a SuperREST error (500 for internal faults)."""
    for cls in type(error).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return 500


async def handle_superrest_error(request: Request, exc: SuperRestError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            exc_info=exc,
        )
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code} {exc.message}")
    return JSONResponse(exc.to_dict(), status_code=status)


async def handle_integrity_error(request: Request, exc: sqlite3.IntegrityError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} conflict: {exc}")
    return JSONResponse(
        {"error": str(exc), "error_code": "CONFLICT", "details": {}},
        status_code=409,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"HTTP handler error: {exc}", exc_info=True)
    return JSONResponse(
        {"error": str(exc), "error_code": "INTERNAL", "details": {}},
        status_code=500,
    )


def create_app(
    resources: Iterable[ResourceController],
    settings: Settings | None = None,
    registry: ModelRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        resources: Controllers to expose, each under /<table name>
        settings: App settings (loaded from environment if omitted)
        registry: Registry reported by /schema (global registry if omitted)

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings()
    registry = registry or get_registry()

    app = FastAPI(
        title="SuperREST",
        description="Generic REST resources over declarative models.",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SuperRestError, handle_superrest_error)
    app.add_exception_handler(sqlite3.IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    for controller in resources:
        app.include_router(resource_router(controller))
        logger.info(
            f"Serving {controller.model.__name__} at /{controller.model.get_table_name()}"
        )

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "superrest", "version": __version__}

    @app.get("/schema")
    async def schema():
        return {"fingerprint": registry.fingerprint, **registry.to_dict()}

    app.state.settings = settings
    app.state.registry = registry
    return app
