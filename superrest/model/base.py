"""
SuperModel: declarative base class for REST resources.

A model declares its fields once, as an ordered tuple of property
definitions, and gets from that single declaration:
- Row conversion for the store (strict)
- JSON conversion for the wire (strict out, lenient in)
- Partial updates through generated update keys
- A human-readable string rendering
- Its storage schema

Invariants:
    - Every instance's descriptor list matches the class's prop_defs in
      cardinality, order and kind
    - Reading a row fails on the first missing or mistyped column
    - Reading a JSON document skips missing or mistyped fields one by one
    - Every declared field is always written to rows and JSON documents

How to change safely:
    - Append new properties to prop_defs; order drives string rendering
      and update-key positions
    - Override make_props() only with descriptors of the same kinds, and
      register the model so the binding is checked at startup

Example:
    >>> class Task(SuperModel):
    ...     table_name = "tasks"
    ...     prop_defs = (
    ...         prop("title", "string"),
    ...         prop("priority", "int"),
    ...         foreign_key_prop("team_id", "teams"),
    ...     )
    >>> task = Task(title="Write docs", priority=2)
    >>> str(task)
    'title: Write docs priority: 2 team_id: None '
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, TypeVar

from ..errors import CoercionError
from ..schema.coerce import coerce, default_value, encode
from ..schema.types import PropertyDef, PropertyKind
from ..store.row import Row
from ..store.schema_builder import ID_KEY, SchemaBuilder
from .descriptors import PropertyDescriptor, bind_attribute
from .update_keys import UpdateKey, apply_update_keys, generate_update_keys

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="SuperModel")


class SuperModel:
    """Base class for entities served by a ResourceController.

    Subclasses set ``prop_defs`` (and usually ``table_name``). Each
    declared property becomes an instance attribute of the same name,
    initialised from keyword arguments or the kind's default value.

    Attributes:
        id: Store identifier, None until the first save
        props: Property descriptors bound to this instance
    """

    table_name: ClassVar[str] = ""
    prop_defs: ClassVar[tuple[PropertyDef, ...]] = ()

    def __init__(self, **values: Any) -> None:
        known = {d.name for d in self.prop_defs}
        unknown = set(values) - known - {ID_KEY}
        if unknown:
            raise TypeError(f"{type(self).__name__} got unknown properties: {sorted(unknown)}")

        self.id: int | None = values.get(ID_KEY)
        self.props: list[PropertyDescriptor] = self.make_props()

        for descriptor in self.props:
            if descriptor.name in values:
                descriptor.set(values[descriptor.name])
            elif not _is_set(descriptor):
                descriptor.set(default_value(descriptor.kind))

    def make_props(self) -> list[PropertyDescriptor]:
        """Bind this instance's descriptors.

        The default binds each definition to the attribute of the same
        name. Override to map properties onto other attributes.
        """
        return [bind_attribute(prop_def, self) for prop_def in self.prop_defs]

    @classmethod
    def get_table_name(cls) -> str:
        return cls.table_name or f"{cls.__name__.lower()}s"

    # Row conversion

    def set_row(self, row: Row) -> None:
        """Populate every property from a persisted row.

        Raises:
            MissingColumnError: If a declared column is absent
            ColumnTypeError: If a column value does not fit its kind
        """
        for descriptor in self.props:
            descriptor.set(row.get(descriptor.name, descriptor.kind))

    def make_row(self) -> Row:
        """Produce the persisted row (identifier excluded).

        Raises:
            ColumnTypeError: If a property holds a value that does not fit
                its kind
        """
        row = Row()
        for descriptor in self.props:
            row.set(descriptor.name, descriptor.get(), descriptor.kind)
        return row

    @classmethod
    def from_row(cls: type[M], row: Row) -> M:
        """Build an instance from a persisted row, including its identifier."""
        model = cls()
        model.set_row(row)
        if ID_KEY in row:
            model.id = row.get(ID_KEY, PropertyKind.FOREIGN_KEY)
        return model

    # JSON conversion

    def set_json(self, document: Mapping[str, Any]) -> None:
        """Populate properties from a JSON object, leniently.

        Fields missing from the document, or holding values that do not
        fit the property kind, are skipped; the rest are still applied.
        """
        for descriptor in self.props:
            if descriptor.name not in document:
                continue
            try:
                value = coerce(descriptor.kind, document[descriptor.name])
            except CoercionError as e:
                logger.debug(f"Ignoring '{descriptor.name}' for {type(self).__name__}: {e.message}")
                continue
            descriptor.set(value)

    def to_json(self) -> dict[str, Any]:
        """Produce the JSON object for this instance (every property plus id)."""
        document: dict[str, Any] = {ID_KEY: self.id}
        for descriptor in self.props:
            document[descriptor.name] = encode(descriptor.kind, descriptor.get())
        return document

    @classmethod
    def from_json(cls: type[M], document: Mapping[str, Any]) -> M:
        """Build a fresh instance from a JSON object (lenient)."""
        model = cls()
        model.set_json(document)
        return model

    # Partial updates

    @classmethod
    def updateable_keys(cls) -> tuple[UpdateKey, ...]:
        """Update keys for this class, generated on first use."""
        keys = cls.__dict__.get("_update_keys")
        if keys is None:
            keys = generate_update_keys(cls.prop_defs)
            cls._update_keys = keys
        return keys

    def update_from(self, document: Mapping[str, Any]) -> list[str]:
        """Apply a partial JSON document through the update keys.

        Returns:
            Names of the properties that changed

        Raises:
            PropertyKindMismatchError: If a descriptor no longer matches
                its definition
        """
        return apply_update_keys(self, self.updateable_keys(), document)

    # Schema

    @staticmethod
    def prepare_schema(builder: SchemaBuilder, prop_defs: Iterable[PropertyDef]) -> None:
        """Declare the storage schema for a list of property definitions."""
        builder.id()

        for prop_def in prop_defs:
            if prop_def.kind == PropertyKind.INT:
                builder.int(prop_def.name)
            elif prop_def.kind == PropertyKind.STRING:
                builder.string(prop_def.name)
            elif prop_def.kind == PropertyKind.DOUBLE:
                builder.double(prop_def.name)
            elif prop_def.kind == PropertyKind.DATE:
                builder.date(prop_def.name)
            elif prop_def.kind == PropertyKind.FOREIGN_KEY:
                builder.int(prop_def.foreign_key.field, optional=True)
                builder.foreign_key(prop_def.foreign_key)

    @classmethod
    def schema_builder(cls) -> SchemaBuilder:
        builder = SchemaBuilder(cls.get_table_name())
        cls.prepare_schema(builder, cls.prop_defs)
        return builder

    # Rendering

    def description(self) -> str:
        rendered = ""
        for descriptor in self.props:
            value = descriptor.get()
            if descriptor.kind == PropertyKind.FOREIGN_KEY:
                value = "None" if value is None else f"Some({value})"
            rendered += f"{descriptor.name}: {value} "
        return rendered

    def __str__(self) -> str:
        return self.description()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} {self.description().strip()}>"


def _is_set(descriptor: PropertyDescriptor) -> bool:
    try:
        descriptor.get()
    except AttributeError:
        return False
    return True


def encode_collection(models: Iterable[SuperModel]) -> list[dict[str, Any]]:
    """Encode a collection of models as a JSON array."""
    return [model.to_json() for model in models]
