"""
Persisted row representation.

A Row is a name -> value mapping with typed accessors. Both directions are
strict: a missing column or a value that does not fit its kind raises, on
read and on a typed write alike.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator, Mapping
from typing import Any

from ..errors import CoercionError, ColumnTypeError, MissingColumnError
from ..schema.coerce import coerce, encode
from ..schema.types import PropertyKind


class Row:
    """Column values of one persisted entity.

    Example:
        >>> row = Row()
        >>> row.set("priority", 3, PropertyKind.INT)
        >>> row.get("priority", PropertyKind.INT)
        3
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    @classmethod
    def from_sqlite(cls, sqlite_row: sqlite3.Row) -> Row:
        return cls({key: sqlite_row[key] for key in sqlite_row.keys()})

    def get(self, name: str, kind: PropertyKind) -> Any:
        """Read a column as a property kind.

        Raises:
            MissingColumnError: If the row has no such column
            ColumnTypeError: If the value does not coerce to kind
        """
        if name not in self._values:
            raise MissingColumnError(name)
        value = self._values[name]
        try:
            return coerce(kind, value)
        except CoercionError:
            raise ColumnTypeError(name, kind.value, value) from None

    def set(self, name: str, value: Any, kind: PropertyKind | None = None) -> None:
        """Write a column, checking and encoding the value when kind is given.

        Raises:
            ColumnTypeError: If the value does not coerce to kind
        """
        if kind is None:
            self._values[name] = value
            return
        try:
            checked = coerce(kind, value)
        except CoercionError:
            raise ColumnTypeError(name, kind.value, value) from None
        self._values[name] = encode(kind, checked)

    def raw(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Row({self._values!r})"
