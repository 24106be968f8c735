"""
Model Registry for SuperREST.

The ModelRegistry is the central list of model classes served by an app.
It provides:
- Registration of SuperModel subclasses by table name
- Startup checks of each model's descriptor binding
- Update-key generation (cached on the model class)
- Schema fingerprinting for the /schema endpoint

Invariants:
    - Registry is mutable during startup, frozen before serving
    - Once frozen, no new models can be registered
    - Table names and model names are unique
    - A model whose descriptors do not match its definitions is rejected

How to change safely:
    - Register all models before calling freeze_registry()
    - Never change a registered model's prop_defs at runtime

Example:
    >>> registry = ModelRegistry()
    >>> registry.register(Task)
    >>> registry.freeze()
    'sha256:...'
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..model.descriptors import binding_errors

if TYPE_CHECKING:
    from ..model.base import SuperModel

logger = logging.getLogger(__name__)

# Global registry instance
_global_registry: ModelRegistry | None = None
_registry_lock = threading.Lock()


class RegistryFrozenError(Exception):
    """Raised when attempting to modify a frozen registry."""
    pass


class DuplicateRegistrationError(Exception):
    """Raised when a table or model name is already registered."""
    pass


class BindingMismatchError(Exception):
    """Raised when a model's descriptors do not match its property definitions."""

    def __init__(self, model: str, errors: list[str]) -> None:
        self.model = model
        self.errors = errors
        super().__init__(f"Model '{model}' has a broken property binding: {'; '.join(errors)}")


class ModelRegistry:
    """Central registry of SuperModel subclasses.

    Thread-safety:
        - Registration is thread-safe (uses internal lock)
        - Lookups after freeze are lock-free
        - Freeze is atomic and irreversible
    """

    def __init__(self) -> None:
        """Initialize an empty, mutable registry."""
        self._models: dict[str, type[SuperModel]] = {}
        self._models_by_name: dict[str, type[SuperModel]] = {}
        self._frozen = False
        self._fingerprint: str | None = None
        self._lock = threading.Lock()

    @property
    def frozen(self) -> bool:
        """Whether the registry is frozen."""
        return self._frozen

    @property
    def fingerprint(self) -> str | None:
        """Schema fingerprint (available after freeze)."""
        return self._fingerprint

    def register(self, model: type[SuperModel]) -> None:
        """Register a model class.

        Args:
            model: SuperModel subclass to register

        Raises:
            RegistryFrozenError: If registry is frozen
            DuplicateRegistrationError: If the table or model name is taken
            BindingMismatchError: If a fresh instance's descriptors do not
                match the model's property definitions
            ValueError: If the model declares a property name twice
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"Cannot register model '{model.__name__}': registry is frozen"
                )

            table = model.get_table_name()
            if table in self._models:
                existing = self._models[table]
                raise DuplicateRegistrationError(
                    f"Table '{table}' already registered for '{existing.__name__}'"
                )
            if model.__name__ in self._models_by_name:
                raise DuplicateRegistrationError(
                    f"Model name '{model.__name__}' already registered"
                )

            names = [d.name for d in model.prop_defs]
            if len(names) != len(set(names)):
                raise ValueError(f"Duplicate property name in model '{model.__name__}'")

            errors = binding_errors(model.prop_defs, model().props)
            if errors:
                raise BindingMismatchError(model.__name__, errors)

            model.updateable_keys()

            self._models[table] = model
            self._models_by_name[model.__name__] = model
            logger.debug(f"Registered model: {model.__name__} (table={table})")

    def get(self, table_or_name: str) -> type[SuperModel] | None:
        """Get a model by table name or class name."""
        return self._models.get(table_or_name) or self._models_by_name.get(table_or_name)

    def models(self) -> Iterator[type[SuperModel]]:
        """Iterate over all registered models."""
        yield from self._models.values()

    def freeze(self) -> str:
        """Freeze the registry and compute fingerprint.

        Returns:
            Schema fingerprint string

        Raises:
            RegistryFrozenError: If already frozen
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Registry is already frozen")

            self._fingerprint = self._compute_fingerprint()
            self._frozen = True
            logger.info(
                f"Model registry frozen with {len(self._models)} models, "
                f"fingerprint={self._fingerprint}"
            )
            return self._fingerprint

    def _compute_fingerprint(self) -> str:
        """Compute SHA-256 fingerprint of the canonical schema JSON."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(canonical.encode('utf-8')).hexdigest()
        return f"sha256:{hash_bytes}"

    def to_dict(self) -> dict:
        """Convert registry to dictionary representation, sorted by table."""
        return {
            "models": [
                {
                    "name": self._models[table].__name__,
                    "table": table,
                    "properties": [d.to_dict() for d in self._models[table].prop_defs],
                }
                for table in sorted(self._models)
            ],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    def validate_all(self) -> list[str]:
        """Check that every foreign key targets a registered table.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        for table, model in self._models.items():
            for prop_def in model.prop_defs:
                key = prop_def.foreign_key
                if key is not None and key.foreign_table not in self._models:
                    errors.append(
                        f"Property '{prop_def.name}' in '{table}' references "
                        f"unknown table '{key.foreign_table}'"
                    )
        return errors


def get_registry() -> ModelRegistry:
    """Get the global model registry, creating it if needed."""
    global _global_registry
    with _registry_lock:
        if _global_registry is None:
            _global_registry = ModelRegistry()
        return _global_registry


def freeze_registry() -> str:
    """Freeze the global registry.

    This should be called after all models are registered
    and before the server starts accepting requests.
    """
    return get_registry().freeze()


def reset_registry() -> None:
    """Reset the global registry (for testing only)."""
    global _global_registry
    with _registry_lock:
        _global_registry = None
