"""
Update keys for partial (PATCH) updates.

An UpdateKey is generated per property definition and remembers the
definition's position. Applying it to a model re-resolves the descriptor
at that position and calls its setter, after checking that the
descriptor is still of the expected kind.

Invariants:
    - Keys are generated once per model class and never mutated
    - A kind mismatch at dispatch raises PropertyKindMismatchError; the
      value is never stored under a different kind
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import CoercionError, PropertyKindMismatchError
from ..schema.coerce import coerce
from ..schema.types import PropertyDef, PropertyKind

if TYPE_CHECKING:
    from .base import SuperModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateKey:
    """Dispatcher from a field name to positional descriptor mutation.

    Attributes:
        name: JSON key this update key responds to
        kind: Expected property kind of the value
        index: Position of the matching descriptor in model.props
    """

    name: str
    kind: PropertyKind
    index: int

    def apply(self, model: SuperModel, value: Any) -> None:
        """Set the property at self.index on model.

        Args:
            model: Model instance to mutate
            value: Value already coerced to self.kind

        Raises:
            PropertyKindMismatchError: If the descriptor at self.index is
                missing or of a different kind
        """
        props = model.props
        if self.index >= len(props):
            raise PropertyKindMismatchError(type(model).__name__, self.index, self.kind.value, None)
        descriptor = props[self.index]
        if descriptor.kind != self.kind:
            raise PropertyKindMismatchError(
                type(model).__name__, self.index, self.kind.value, descriptor.kind.value
            )
        descriptor.set(value)

    __call__ = apply


def generate_update_keys(prop_defs: tuple[PropertyDef, ...] | list[PropertyDef]) -> tuple[UpdateKey, ...]:
    """Build the update-key table for a list of property definitions.

    Args:
        prop_defs: Definitions in declaration order

    Returns:
        One UpdateKey per definition, in the same order
    """
    return tuple(
        UpdateKey(name=prop_def.name, kind=prop_def.kind, index=index)
        for index, prop_def in enumerate(prop_defs)
    )


def apply_update_keys(
    model: SuperModel,
    keys: tuple[UpdateKey, ...],
    document: Mapping[str, Any],
) -> list[str]:
    """Merge a partial document into a model through its update keys.

    Keys absent from the document are left alone. Values that do not
    coerce to the key's kind are skipped. Kind mismatches propagate.

    Returns:
        Names of the properties that were updated
    """
    updated: list[str] = []
    for key in keys:
        if key.name not in document:
            continue
        try:
            value = coerce(key.kind, document[key.name])
        except CoercionError as e:
            logger.debug(f"Skipping '{key.name}' on {type(model).__name__}: {e.message}")
            continue
        key.apply(model, value)
        updated.append(key.name)
    return updated
