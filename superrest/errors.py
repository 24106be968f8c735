"""
Error types for SuperREST.

This module defines every exception the resource layer raises:
- SuperRestError: Base exception
- DecodeError: Request body missing or not shaped as an entity
- AccessDeniedError: Authorization hook rejected an entity-scoped call
- ValidationError: Validation hook rejected an entity
- NotFoundError: Path identifier did not resolve to an entity
- CoercionError: A raw value does not fit a property kind
- RowError: Persisted row is missing a column or holds a mistyped value
- PropertyKindMismatchError: Descriptor/definition binding is broken

Invariants:
    - All errors inherit from SuperRestError
    - DecodeError, AccessDeniedError and ValidationError stay distinct
    - PropertyKindMismatchError is a programming fault and is never swallowed
"""

from __future__ import annotations

from typing import Any


class SuperRestError(Exception):
    """Base exception for all SuperREST errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "SUPERREST_ERROR"
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON error body returned by the HTTP layer."""
        return {"error": self.message, "error_code": self.code, "details": self.details}


class DecodeError(SuperRestError):
    """Request body could not be decoded into an entity.

    Raised when:
    - The body is missing or empty
    - The body is not valid JSON
    - The body is JSON but not an object
    """

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message, code="DECODE_ERROR", details={"reason": reason})
        self.reason = reason


class AccessDeniedError(SuperRestError):
    """Authorization hook denied access to an entity."""

    def __init__(
        self,
        model: str,
        entity_id: Any,
        actor: str | None = None,
        message: str | None = None,
    ) -> None:
        msg = message or f"Access denied: {actor or 'anonymous'} on {model} {entity_id}"
        super().__init__(
            msg,
            code="ACCESS_DENIED",
            details={"model": model, "id": entity_id, "actor": actor},
        )
        self.model = model
        self.entity_id = entity_id
        self.actor = actor


class ValidationError(SuperRestError):
    """Entity failed validation before persistence.

    Raised by validation hooks. The entity is not saved.
    """

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"field": field_name, "errors": errors or []},
        )
        self.field_name = field_name
        self.errors = errors or []


class NotFoundError(SuperRestError):
    """No entity exists for the requested identifier."""

    def __init__(self, model: str, entity_id: Any) -> None:
        super().__init__(
            f"{model} {entity_id} not found",
            code="NOT_FOUND",
            details={"model": model, "id": entity_id},
        )
        self.model = model
        self.entity_id = entity_id


class CoercionError(SuperRestError):
    """Raw value cannot be coerced to a property kind."""

    def __init__(self, kind: str, value: Any) -> None:
        super().__init__(
            f"Cannot coerce {type(value).__name__} value {value!r} to {kind}",
            code="COERCION_ERROR",
            details={"kind": kind, "value_type": type(value).__name__},
        )
        self.kind = kind
        self.value = value


class RowError(SuperRestError):
    """Persisted row does not match the model's properties."""

    def __init__(self, message: str, column: str) -> None:
        super().__init__(message, code="ROW_ERROR", details={"column": column})
        self.column = column


class MissingColumnError(RowError):
    """Row has no value for a declared column."""

    def __init__(self, column: str) -> None:
        super().__init__(f"Row is missing column '{column}'", column)


class ColumnTypeError(RowError):
    """Row value does not fit the declared property kind."""

    def __init__(self, column: str, kind: str, value: Any) -> None:
        super().__init__(
            f"Column '{column}' holds {type(value).__name__} value {value!r}, expected {kind}",
            column,
        )
        self.kind = kind
        self.value = value


class PropertyKindMismatchError(SuperRestError):
    """Update key dispatched against a descriptor of a different kind.

    This means a model's descriptor list does not match its property
    definitions. It is a programming error, not a client error.
    """

    def __init__(
        self,
        model: str,
        index: int,
        expected: str,
        actual: str | None,
    ) -> None:
        super().__init__(
            f"{model} property {index} is {actual or 'missing'}, expected {expected}",
            code="KIND_MISMATCH",
            details={"model": model, "index": index, "expected": expected, "actual": actual},
        )
        self.model = model
        self.index = index
        self.expected = expected
        self.actual = actual
