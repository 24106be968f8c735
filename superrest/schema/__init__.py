"""
Schema module for SuperREST.

This module provides the static property system:
- Property kinds and definitions (PropertyKind, PropertyDef, ForeignKey)
- Value coercion for rows and JSON documents
- Model registry with startup binding checks

Invariants:
    - Property definitions are immutable once declared
    - All models must be registered before the app starts serving
"""

from .types import ForeignKey, PropertyDef, PropertyKind, foreign_key_prop, prop
from .coerce import coerce, default_value, encode
from .registry import (
    BindingMismatchError,
    DuplicateRegistrationError,
    ModelRegistry,
    RegistryFrozenError,
    freeze_registry,
    get_registry,
    reset_registry,
)

__all__ = [
    # Types
    "PropertyKind",
    "PropertyDef",
    "ForeignKey",
    "prop",
    "foreign_key_prop",
    # Coercion
    "coerce",
    "encode",
    "default_value",
    # Registry
    "ModelRegistry",
    "get_registry",
    "freeze_registry",
    "reset_registry",
    "RegistryFrozenError",
    "DuplicateRegistrationError",
    "BindingMismatchError",
]
