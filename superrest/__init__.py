"""
SuperREST - generic REST resources over declarative models.

A model declares its fields once, as an ordered tuple of property
definitions. From that declaration SuperREST derives row conversion,
JSON conversion, partial updates, string rendering and the table schema.
A ResourceController then serves any such model over the standard REST
verbs, with overridable authorization, bulk filter and validation hooks.

    ┌──────────┐     ┌────────────────────┐     ┌─────────────┐
    │  FastAPI │────▶│ ResourceController │────▶│ SuperModel  │
    │  routes  │     │  (ResourcePolicy)  │     │ (props)     │
    └──────────┘     └─────────┬──────────┘     └──────┬──────┘
                               │                       │
                               ▼                       ▼
                        ┌─────────────┐          ┌──────────┐
                        │ ModelStore  │◀────────▶│   Row    │
                        │  (SQLite)   │          └──────────┘
                        └─────────────┘

Invariants:
    - Row reads are strict; JSON reads are lenient per field
    - Authorization runs before any entity-scoped operation
    - Validation runs after mutation and before persistence
"""

from ._version import __version__
from .api import (
    BulkFilter,
    ResourceController,
    ResourcePolicy,
    ResourceRequest,
    create_app,
    resource_router,
)
from .model import SuperModel, UpdateKey
from .schema import ForeignKey, ModelRegistry, PropertyDef, PropertyKind, foreign_key_prop, prop
from .store import Comparison, ModelStore

__all__ = [
    "__version__",
    "SuperModel",
    "UpdateKey",
    "PropertyKind",
    "PropertyDef",
    "ForeignKey",
    "prop",
    "foreign_key_prop",
    "ModelRegistry",
    "ModelStore",
    "Comparison",
    "ResourceController",
    "ResourcePolicy",
    "ResourceRequest",
    "BulkFilter",
    "create_app",
    "resource_router",
]
