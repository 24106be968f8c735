"""
Table schema builder for the SQLite model store.

Models declare their storage schema by calling builder methods in order
(see SuperModel.prepare_schema); the builder renders CREATE/DROP TABLE
statements.

Column types:
    id          INTEGER PRIMARY KEY AUTOINCREMENT
    int         INTEGER
    string      VARCHAR(length)
    double      REAL
    date        TIMESTAMP (ISO-8601 text)
"""

from __future__ import annotations

from dataclasses import dataclass

from ..schema.types import ForeignKey

ID_KEY = "id"


def quote(identifier: str) -> str:
    """Quote an SQL identifier."""
    return '"' + identifier.replace('"', '""') + '"'


@dataclass(frozen=True)
class Column:
    """One column declaration.

    Attributes:
        name: Column name
        sql_type: SQLite type name
        optional: Whether NULL is allowed
        primary_key: Whether this is the autoincrement identifier
    """

    name: str
    sql_type: str
    optional: bool = False
    primary_key: bool = False

    def to_sql(self) -> str:
        if self.primary_key:
            return f"{quote(self.name)} {self.sql_type} PRIMARY KEY AUTOINCREMENT"
        null = "NULL" if self.optional else "NOT NULL"
        return f"{quote(self.name)} {self.sql_type} {null}"


class SchemaBuilder:
    """Collects column and foreign-key declarations for one table.

    Example:
        >>> builder = SchemaBuilder("tasks")
        >>> builder.id()
        >>> builder.string("title")
        >>> builder.create_sql()
        'CREATE TABLE IF NOT EXISTS "tasks" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, ...)'
    """

    def __init__(self, table: str) -> None:
        if not table:
            raise ValueError("Table name cannot be empty")
        self.table = table
        self.columns: list[Column] = []
        self.foreign_keys: list[ForeignKey] = []

    def _add(self, column: Column) -> None:
        if any(c.name == column.name for c in self.columns):
            raise ValueError(f"Duplicate column '{column.name}' in table '{self.table}'")
        self.columns.append(column)

    def id(self) -> None:
        self._add(Column(ID_KEY, "INTEGER", primary_key=True))

    def int(self, name: str, optional: bool = False) -> None:
        self._add(Column(name, "INTEGER", optional=optional))

    def string(self, name: str, optional: bool = False, length: int = 255) -> None:
        self._add(Column(name, f"VARCHAR({length})", optional=optional))

    def double(self, name: str, optional: bool = False) -> None:
        self._add(Column(name, "REAL", optional=optional))

    def date(self, name: str, optional: bool = False) -> None:
        self._add(Column(name, "TIMESTAMP", optional=optional))

    def foreign_key(self, key: ForeignKey) -> None:
        """Declare a foreign-key constraint on an already declared column."""
        if not any(c.name == key.field for c in self.columns):
            raise ValueError(
                f"Foreign key '{key.constraint_name}' references undeclared column '{key.field}'"
            )
        self.foreign_keys.append(key)

    def create_sql(self) -> str:
        """Render the CREATE TABLE statement."""
        parts = [c.to_sql() for c in self.columns]
        for key in self.foreign_keys:
            parts.append(
                f"CONSTRAINT {quote(key.constraint_name)} FOREIGN KEY ({quote(key.field)}) "
                f"REFERENCES {quote(key.foreign_table)} ({quote(key.foreign_field)})"
            )
        return f"CREATE TABLE IF NOT EXISTS {quote(self.table)} ({', '.join(parts)})"

    def drop_sql(self) -> str:
        return f"DROP TABLE IF EXISTS {quote(self.table)}"
