"""
API module for SuperREST.

This module provides the REST surface:
- ResourceController and its ResourcePolicy hooks
- FastAPI routes per controller
- The application factory with error mapping

Invariants:
    - Controllers are synchronous; routes run them in the thread pool
    - Every SuperRestError maps to one HTTP status
"""

from .app import create_app, status_for
from .controller import BulkFilter, ResourceController, ResourcePolicy, ResourceRequest
from .routes import resource_router

__all__ = [
    "create_app",
    "status_for",
    "resource_router",
    "ResourceController",
    "ResourcePolicy",
    "ResourceRequest",
    "BulkFilter",
]
