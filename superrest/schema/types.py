"""
Core type definitions for the SuperREST property system.

This module defines the static side of a model's fields:
- PropertyKind: The five supported field kinds
- ForeignKey: Reference from a column to another table
- PropertyDef: One declared field (kind + name)

Invariants:
    - Property definitions are immutable and created once per model class
    - A foreign-key definition is named after its ForeignKey.field
    - Definition order is declaration order and is never rearranged

How to change safely:
    - Add a new kind here, then teach coerce.py, the schema builder and the
      row/wire encoders about it
    - Never rename an existing kind value; it appears in /schema output

Example:
    >>> from superrest.schema.types import prop, foreign_key_prop
    >>> defs = (
    ...     prop("title", "string"),
    ...     prop("priority", "int"),
    ...     foreign_key_prop("team_id", "teams"),
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class PropertyKind(Enum):
    """Supported property kinds.

    These map to column types in the store and value types on the wire.
    """

    INT = "int"
    STRING = "string"
    DOUBLE = "double"
    DATE = "date"  # datetime; ISO-8601 text in rows and JSON
    FOREIGN_KEY = "foreign_key"  # optional integer identifier

    @classmethod
    def from_str(cls, value: str) -> PropertyKind:
        """Convert string representation to PropertyKind.

        Args:
            value: String name of the property kind

        Returns:
            Corresponding PropertyKind enum value

        Raises:
            ValueError: If value is not a valid property kind
        """
        for kind in cls:
            if kind.value == value:
                return kind
        valid = [k.value for k in cls]
        raise ValueError(f"Invalid property kind '{value}'. Valid kinds: {valid}")


@dataclass(frozen=True)
class ForeignKey:
    """Foreign-key reference from a local column to another table.

    Attributes:
        field: Local column holding the referenced identifier
        foreign_table: Referenced table
        foreign_field: Referenced column (the target's identifier)
        name: Optional constraint name
    """

    field: str
    foreign_table: str
    foreign_field: str = "id"
    name: str | None = None

    def __post_init__(self) -> None:
        if not self.field:
            raise ValueError("ForeignKey field cannot be empty")
        if not self.foreign_table:
            raise ValueError(f"ForeignKey '{self.field}' needs a foreign_table")

    @property
    def constraint_name(self) -> str:
        return self.name or f"fk_{self.field}_{self.foreign_table}"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "field": self.field,
            "foreign_table": self.foreign_table,
            "foreign_field": self.foreign_field,
        }
        if self.name:
            result["name"] = self.name
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ForeignKey:
        return cls(
            field=data["field"],
            foreign_table=data["foreign_table"],
            foreign_field=data.get("foreign_field", "id"),
            name=data.get("name"),
        )


@dataclass(frozen=True)
class PropertyDef:
    """Declaration of one model property.

    Attributes:
        kind: The property kind
        name: Field name, used as column name and JSON key
        foreign_key: Reference target, required for FOREIGN_KEY kind

    Invariants:
        - name is non-empty
        - FOREIGN_KEY definitions carry a ForeignKey whose field equals name
        - other kinds never carry a ForeignKey

    Example:
        >>> title = PropertyDef(kind=PropertyKind.STRING, name="title")
    """

    kind: PropertyKind
    name: str
    foreign_key: ForeignKey | None = None

    def __post_init__(self) -> None:
        """Validate property definition."""
        if not self.name:
            raise ValueError("Property name cannot be empty")
        if self.kind == PropertyKind.FOREIGN_KEY:
            if self.foreign_key is None:
                raise ValueError(f"foreign_key required for FOREIGN_KEY property '{self.name}'")
            if self.foreign_key.field != self.name:
                raise ValueError(
                    f"Property '{self.name}' does not match foreign key field "
                    f"'{self.foreign_key.field}'"
                )
        elif self.foreign_key is not None:
            raise ValueError(f"Only FOREIGN_KEY properties take a foreign_key ('{self.name}')")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation for serialization."""
        result: dict[str, Any] = {"name": self.name, "kind": self.kind.value}
        if self.foreign_key is not None:
            result["foreign_key"] = self.foreign_key.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PropertyDef:
        """Create from dictionary representation."""
        foreign_key = data.get("foreign_key")
        return cls(
            kind=PropertyKind.from_str(data["kind"]),
            name=data["name"],
            foreign_key=ForeignKey.from_dict(foreign_key) if foreign_key else None,
        )


def prop(name: str, kind: str | PropertyKind) -> PropertyDef:
    """Convenience function to create a PropertyDef.

    This is the preferred way to declare plain properties on a model.

    Args:
        name: Field name
        kind: Property kind (string or PropertyKind enum)

    Returns:
        PropertyDef instance

    Example:
        >>> title = prop("title", "string")
        >>> due = prop("due", PropertyKind.DATE)
    """
    if isinstance(kind, str):
        kind = PropertyKind.from_str(kind)
    if kind == PropertyKind.FOREIGN_KEY:
        raise ValueError(f"Use foreign_key_prop() to declare '{name}'")
    return PropertyDef(kind=kind, name=name)


def foreign_key_prop(
    field: str,
    foreign_table: str,
    *,
    foreign_field: str = "id",
    name: str | None = None,
) -> PropertyDef:
    """Declare a foreign-key property.

    Args:
        field: Local column name
        foreign_table: Referenced table
        foreign_field: Referenced column
        name: Optional constraint name

    Returns:
        PropertyDef of kind FOREIGN_KEY
    """
    key = ForeignKey(field=field, foreign_table=foreign_table, foreign_field=foreign_field, name=name)
    return PropertyDef(kind=PropertyKind.FOREIGN_KEY, name=field, foreign_key=key)
