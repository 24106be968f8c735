"""
Store module for SuperREST.

SQLite-backed persistence for SuperModel subclasses:
- Row: typed column access
- SchemaBuilder: table declarations
- ModelStore / Query: CRUD and filtered queries
"""

from .row import Row
from .schema_builder import ID_KEY, Column, SchemaBuilder
from .sqlite_store import Comparison, Filter, ModelStore, Query

__all__ = [
    "Row",
    "ID_KEY",
    "Column",
    "SchemaBuilder",
    "Comparison",
    "Filter",
    "ModelStore",
    "Query",
]
