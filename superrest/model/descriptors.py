"""
Property descriptors: property definitions bound to one model instance.

A descriptor pairs a name and kind with a getter and setter closed over
a specific instance. Every field-level operation of SuperModel iterates
the descriptor list instead of touching attributes directly, so a model
can expose a property under a different attribute, or computed, by
overriding make_props().
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..schema.types import PropertyDef, PropertyKind


@dataclass(frozen=True)
class PropertyDescriptor:
    """Runtime binding of one property to one instance.

    Attributes:
        name: Field name (column name and JSON key)
        kind: Property kind
        getter: Zero-argument callable returning the current value
        setter: One-argument callable storing a new value
    """

    name: str
    kind: PropertyKind
    getter: Callable[[], Any]
    setter: Callable[[Any], None]

    def get(self) -> Any:
        return self.getter()

    def set(self, value: Any) -> None:
        self.setter(value)


def bind_attribute(prop_def: PropertyDef, instance: Any, attribute: str | None = None) -> PropertyDescriptor:
    """Bind a property definition to an attribute of an instance.

    Args:
        prop_def: Definition to bind
        instance: Object owning the attribute
        attribute: Attribute name (defaults to the property name)

    Returns:
        PropertyDescriptor reading and writing instance.<attribute>
    """
    attr = attribute or prop_def.name

    def getter() -> Any:
        return getattr(instance, attr)

    def setter(value: Any) -> None:
        setattr(instance, attr, value)

    return PropertyDescriptor(name=prop_def.name, kind=prop_def.kind, getter=getter, setter=setter)


def binding_errors(
    prop_defs: tuple[PropertyDef, ...] | list[PropertyDef],
    props: list[PropertyDescriptor],
) -> list[str]:
    """Compare an instance's descriptors with its class's definitions.

    Returns:
        List of mismatch descriptions (empty if the binding is sound)
    """
    errors: list[str] = []
    if len(prop_defs) != len(props):
        errors.append(f"{len(props)} descriptors for {len(prop_defs)} property definitions")
    for index, (prop_def, descriptor) in enumerate(zip(prop_defs, props)):
        if descriptor.kind != prop_def.kind:
            errors.append(
                f"Property {index} ('{prop_def.name}') is {descriptor.kind.value}, "
                f"expected {prop_def.kind.value}"
            )
        elif descriptor.name != prop_def.name:
            errors.append(
                f"Property {index} is named '{descriptor.name}', expected '{prop_def.name}'"
            )
    return errors
