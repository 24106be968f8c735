"""
Value coercion between raw row/JSON values and property kinds.

Both the row path and the wire path go through coerce(). Callers decide
what a CoercionError means: the row path turns it into a ColumnTypeError,
the lenient wire path skips the field.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from ..errors import CoercionError
from .types import PropertyKind


# SQLite INTEGER is a signed 64-bit value
INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        raise CoercionError(PropertyKind.INT.value, value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and INT_MIN <= value <= INT_MAX:
        return value
    raise CoercionError(PropertyKind.INT.value, value)


def _coerce_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise CoercionError(PropertyKind.STRING.value, value)


def _coerce_double(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            result = float(value)
        except OverflowError:
            raise CoercionError(PropertyKind.DOUBLE.value, value) from None
        # NaN and infinities are not valid JSON and not storable as REAL
        if math.isfinite(result):
            return result
    raise CoercionError(PropertyKind.DOUBLE.value, value)


def _coerce_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            raise CoercionError(PropertyKind.DATE.value, value) from None
    raise CoercionError(PropertyKind.DATE.value, value)


def _coerce_foreign_key(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return _coerce_int(value)
    except CoercionError:
        raise CoercionError(PropertyKind.FOREIGN_KEY.value, value) from None


_COERCERS = {
    PropertyKind.INT: _coerce_int,
    PropertyKind.STRING: _coerce_string,
    PropertyKind.DOUBLE: _coerce_double,
    PropertyKind.DATE: _coerce_date,
    PropertyKind.FOREIGN_KEY: _coerce_foreign_key,
}


def coerce(kind: PropertyKind, value: Any) -> Any:
    """Coerce a raw value to the Python type of a property kind.

    Args:
        kind: Target property kind
        value: Raw value from a row or a JSON document

    Returns:
        The value as int, str, float, datetime or int | None

    Raises:
        CoercionError: If the value does not fit the kind
    """
    return _COERCERS[kind](value)


def encode(kind: PropertyKind, value: Any) -> Any:
    """Encode a property value for a row or a JSON document.

    Dates become ISO-8601 strings; every other kind is already
    JSON and SQLite friendly.
    """
    if kind == PropertyKind.DATE and isinstance(value, datetime):
        return value.isoformat()
    return value


def default_value(kind: PropertyKind) -> Any:
    """Initial value of a property on a freshly constructed model."""
    if kind == PropertyKind.INT:
        return 0
    if kind == PropertyKind.STRING:
        return ""
    if kind == PropertyKind.DOUBLE:
        return 0.0
    if kind == PropertyKind.DATE:
        return datetime.now(timezone.utc)
    return None
