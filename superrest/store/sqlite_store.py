"""
SQLite model store for SuperREST.

This module is the persistence collaborator of the resource layer:
- Table preparation from a model's declared schema
- Save (insert or update), delete, find by id, list all
- Filtered queries and filtered bulk deletes

One table per model class; the identifier column is "id".

Invariants:
    - Rows are written from SuperModel.make_row() and read back through
      SuperModel.from_row(), so both directions use the same property list
    - Filters only reference "id" or a declared property
    - Each operation runs in its own connection (or the shared in-memory
      connection) and commits before returning

How to change safely:
    - Add new comparisons to Comparison and _COMPARISON_SQL together
    - Keep every statement parameterised; identifiers go through quote()
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .row import Row
from .schema_builder import ID_KEY, quote

if TYPE_CHECKING:
    from ..model.base import SuperModel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="SuperModel")

MEMORY = ":memory:"


class Comparison(Enum):
    """Comparisons supported by Query.filter."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUALS = "greater_than_or_equals"
    LESS_THAN_OR_EQUALS = "less_than_or_equals"
    HAS_PREFIX = "has_prefix"
    HAS_SUFFIX = "has_suffix"
    CONTAINS = "contains"


_COMPARISON_SQL = {
    Comparison.EQUALS: "=",
    Comparison.NOT_EQUALS: "!=",
    Comparison.GREATER_THAN: ">",
    Comparison.LESS_THAN: "<",
    Comparison.GREATER_THAN_OR_EQUALS: ">=",
    Comparison.LESS_THAN_OR_EQUALS: "<=",
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class Filter:
    """One field/comparison/value condition."""

    field: str
    comparison: Comparison
    value: Any

    def to_sql(self) -> tuple[str, list[Any]]:
        column = quote(self.field)
        value = self.value.isoformat() if isinstance(self.value, datetime) else self.value

        if value is None:
            if self.comparison == Comparison.EQUALS:
                return f"{column} IS NULL", []
            if self.comparison == Comparison.NOT_EQUALS:
                return f"{column} IS NOT NULL", []
            raise ValueError(f"Cannot compare '{self.field}' with None using {self.comparison.value}")

        if self.comparison == Comparison.HAS_PREFIX:
            return f"{column} LIKE ? ESCAPE '\\'", [f"{_escape_like(str(value))}%"]
        if self.comparison == Comparison.HAS_SUFFIX:
            return f"{column} LIKE ? ESCAPE '\\'", [f"%{_escape_like(str(value))}"]
        if self.comparison == Comparison.CONTAINS:
            return f"{column} LIKE ? ESCAPE '\\'", [f"%{_escape_like(str(value))}%"]
        return f"{column} {_COMPARISON_SQL[self.comparison]} ?", [value]


class ModelStore:
    """SQLite store for SuperModel subclasses.

    Thread safety:
        File databases open a connection per operation; SQLite handles
        concurrent access. An in-memory database keeps one connection
        shared behind a lock.

    Example:
        >>> store = ModelStore("/var/lib/superrest/app.db")
        >>> store.prepare(Task)
        >>> task = Task(title="Ship it")
        >>> store.save(task)
        >>> store.find(Task, task.id).title
        'Ship it'
    """

    def __init__(
        self,
        database_path: str,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
    ) -> None:
        """Initialize the store.

        Args:
            database_path: SQLite file path, or ":memory:"
            wal_mode: Enable SQLite WAL journal mode (file databases only)
            busy_timeout_ms: SQLite busy timeout
        """
        self.database_path = database_path
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        self._lock = threading.Lock()
        self._shared: sqlite3.Connection | None = None
        if database_path == MEMORY:
            self._shared = self._open(MEMORY, check_same_thread=False)

    def _open(self, path: str, check_same_thread: bool = True) -> sqlite3.Connection:
        conn = sqlite3.connect(
            path,
            timeout=self.busy_timeout_ms / 1000.0,
            isolation_level=None,  # Autocommit; explicit transactions where needed
            check_same_thread=check_same_thread,
        )
        conn.row_factory = sqlite3.Row
        conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")
        if self.wal_mode and path != MEMORY:
            conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection.

        Yields:
            SQLite connection
        """
        if self._shared is not None:
            with self._lock:
                yield self._shared
            return

        Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)
        conn = self._open(self.database_path)
        try:
            yield conn
        finally:
            conn.close()

    def close(self) -> None:
        if self._shared is not None:
            self._shared.close()
            self._shared = None

    # Schema

    def prepare(self, model: type[SuperModel]) -> None:
        """Create the model's table if it does not exist."""
        builder = model.schema_builder()
        with self._connection() as conn:
            conn.execute(builder.create_sql())
        logger.info(f"Prepared table '{builder.table}' for {model.__name__}")

    def revert(self, model: type[SuperModel]) -> None:
        """Drop the model's table."""
        builder = model.schema_builder()
        with self._connection() as conn:
            conn.execute(builder.drop_sql())
        logger.info(f"Dropped table '{builder.table}' for {model.__name__}")

    # Entity operations

    def save(self, entity: SuperModel) -> None:
        """Insert the entity (assigning its id) or update it in place."""
        table = quote(entity.get_table_name())
        values = entity.make_row().to_dict()
        columns = list(values)

        with self._connection() as conn:
            if entity.id is None:
                placeholders = ", ".join("?" for _ in columns)
                cursor = conn.execute(
                    f"INSERT INTO {table} ({', '.join(quote(c) for c in columns)}) "
                    f"VALUES ({placeholders})",
                    [values[c] for c in columns],
                )
                entity.id = cursor.lastrowid
                logger.debug(f"Inserted {type(entity).__name__} id={entity.id}")
            else:
                assignments = ", ".join(f"{quote(c)} = ?" for c in columns)
                cursor = conn.execute(
                    f"UPDATE {table} SET {assignments} WHERE {quote(ID_KEY)} = ?",
                    [values[c] for c in columns] + [entity.id],
                )
                if cursor.rowcount == 0:
                    conn.execute(
                        f"INSERT INTO {table} ({quote(ID_KEY)}, "
                        f"{', '.join(quote(c) for c in columns)}) "
                        f"VALUES (?, {', '.join('?' for _ in columns)})",
                        [entity.id] + [values[c] for c in columns],
                    )
                logger.debug(f"Saved {type(entity).__name__} id={entity.id}")

    def delete(self, entity: SuperModel) -> bool:
        """Delete the entity's row.

        Returns:
            True if a row was removed
        """
        if entity.id is None:
            return False
        with self._connection() as conn:
            cursor = conn.execute(
                f"DELETE FROM {quote(entity.get_table_name())} WHERE {quote(ID_KEY)} = ?",
                (entity.id,),
            )
            deleted = cursor.rowcount > 0
        logger.debug(f"Deleted {type(entity).__name__} id={entity.id}: {deleted}")
        return deleted

    def find(self, model: type[M], entity_id: int) -> M | None:
        """Load one entity by identifier, or None."""
        return self.query(model).filter(ID_KEY, Comparison.EQUALS, entity_id).first()

    def all(self, model: type[M]) -> list[M]:
        return self.query(model).all()

    def query(self, model: type[M]) -> Query[M]:
        return Query(self, model)

    def _fetch(self, sql: str, params: list[Any]) -> list[sqlite3.Row]:
        with self._connection() as conn:
            return conn.execute(sql, params).fetchall()

    def _execute(self, sql: str, params: list[Any]) -> int:
        with self._connection() as conn:
            return conn.execute(sql, params).rowcount


class Query(Generic[M]):
    """Filtered query over one model's table.

    Filters are combined with AND.

    Example:
        >>> store.query(Task).filter("status", Comparison.EQUALS, "active").all()
    """

    def __init__(self, store: ModelStore, model: type[M]) -> None:
        self.store = store
        self.model = model
        self.filters: list[Filter] = []
        self._columns = {ID_KEY} | {d.name for d in model.prop_defs}

    def filter(self, field: str, comparison: Comparison, value: Any) -> Query[M]:
        """Add a condition.

        Raises:
            ValueError: If field is not "id" or a declared property
        """
        if field not in self._columns:
            raise ValueError(f"{self.model.__name__} has no property '{field}'")
        self.filters.append(Filter(field, comparison, value))
        return self

    def _where(self) -> tuple[str, list[Any]]:
        if not self.filters:
            return "", []
        clauses: list[str] = []
        params: list[Any] = []
        for condition in self.filters:
            clause, values = condition.to_sql()
            clauses.append(clause)
            params.extend(values)
        return " WHERE " + " AND ".join(clauses), params

    def all(self) -> list[M]:
        where, params = self._where()
        rows = self.store._fetch(
            f"SELECT * FROM {quote(self.model.get_table_name())}{where} ORDER BY {quote(ID_KEY)}",
            params,
        )
        return [self.model.from_row(Row.from_sqlite(r)) for r in rows]

    def first(self) -> M | None:
        where, params = self._where()
        rows = self.store._fetch(
            f"SELECT * FROM {quote(self.model.get_table_name())}{where} "
            f"ORDER BY {quote(ID_KEY)} LIMIT 1",
            params,
        )
        return self.model.from_row(Row.from_sqlite(rows[0])) if rows else None

    def count(self) -> int:
        where, params = self._where()
        rows = self.store._fetch(
            f"SELECT COUNT(*) AS n FROM {quote(self.model.get_table_name())}{where}", params
        )
        return rows[0]["n"]

    def delete(self) -> int:
        """Delete every matching row.

        Returns:
            Number of rows removed
        """
        where, params = self._where()
        removed = self.store._execute(
            f"DELETE FROM {quote(self.model.get_table_name())}{where}", params
        )
        logger.info(f"Deleted {removed} {self.model.__name__} rows")
        return removed
