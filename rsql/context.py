"""
rsql/context.py

In-memory storage context for rsql.

Responsibilities:
- Hold databases, their tables, and each table's columns and rows
- Provide create/drop operations keyed by name, with fixed capacities
- Track the database that table statements apply to (the current database)

Design notes:
- Nothing is persisted and nothing is indexed; this is a flat CRUD layer.
- A Context is an explicit value handed to the evaluator/session; there is no
  process-wide instance.
- Names longer than MAX_NAME_LENGTH characters are truncated.
- Cell values are stored as text (or None); no type checking is performed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ExecutionError

MAX_NAME_LENGTH = 63
MAX_DATABASES = 32
MAX_TABLES = 64
MAX_COLUMNS = 64
MAX_ROWS = 2048


def _name(name: str) -> str:
    if not name:
        raise ExecutionError("Name must not be empty")
    return name[:MAX_NAME_LENGTH]


@dataclass
class Column:
    """
    Column metadata.

    Attributes:
        name: Column name.
        type: Declared type name as written (e.g. "INT"), or None if omitted.
    """
    name: str
    type: str | None = None


@dataclass
class Table:
    """
    A table: ordered columns plus rows.

    Rows are dicts keyed by column name so that dropping a column does not
    shift the other cells.
    """
    name: str
    columns: list[Column] = field(default_factory=list)
    rows: list[dict[str, str | None]] = field(default_factory=list)

    def column_names(self) -> list[str]:
        """Return column names in declaration order."""
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Column | None:
        """Return Column by name, or None if not found."""
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def add_column(self, name: str, type_name: str | None = None) -> Column:
        name = _name(name)
        if self.get_column(name) is not None:
            raise ExecutionError(f"Duplicate column: {name}")
        if len(self.columns) >= MAX_COLUMNS:
            raise ExecutionError(f"Table {self.name} already has {MAX_COLUMNS} columns")
        col = Column(name=name, type=type_name)
        self.columns.append(col)
        for row in self.rows:
            row[name] = None
        return col

    def drop_column(self, name: str) -> None:
        col = self.get_column(name)
        if col is None:
            raise ExecutionError(f"Unknown column: {name}")
        self.columns.remove(col)
        for row in self.rows:
            row.pop(col.name, None)

    def insert_row(self, values: dict[str, str | None]) -> dict[str, str | None]:
        """
        Append a row.

        Args:
            values: Mapping of column name -> value. Columns not mentioned are None.

        Returns:
            The stored row.
        """
        unknown = [k for k in values if self.get_column(k) is None]
        if unknown:
            raise ExecutionError(f"Unknown column: {unknown[0]}")
        if len(self.rows) >= MAX_ROWS:
            raise ExecutionError(f"Table {self.name} is full ({MAX_ROWS} rows)")
        row = {c.name: values.get(c.name) for c in self.columns}
        self.rows.append(row)
        return row

    def delete_row(self, row: dict[str, str | None]) -> None:
        for i, r in enumerate(self.rows):
            if r is row:
                del self.rows[i]
                return
        raise ExecutionError(f"Row not found in table {self.name}")


@dataclass
class Database:
    """A named collection of tables."""
    name: str
    tables: dict[str, Table] = field(default_factory=dict)

    def get_table(self, name: str) -> Table:
        t = self.tables.get(name)
        if t is None:
            raise ExecutionError(f"Unknown table: {name}")
        return t

    def create_table(self, name: str) -> Table:
        name = _name(name)
        if name in self.tables:
            raise ExecutionError(f"Table already exists: {name}")
        if len(self.tables) >= MAX_TABLES:
            raise ExecutionError(f"Database {self.name} already has {MAX_TABLES} tables")
        t = Table(name=name)
        self.tables[name] = t
        return t

    def drop_table(self, name: str) -> Table:
        t = self.get_table(name)
        del self.tables[t.name]
        return t


@dataclass
class Context:
    """
    Root of the storage model.

    Attributes:
        databases: Mapping of database name -> Database, in creation order.
        current: Name of the database table statements apply to. Creating a
                 database makes it current.
    """
    databases: dict[str, Database] = field(default_factory=dict)
    current: str | None = None

    def get_database(self, name: str) -> Database:
        db = self.databases.get(name)
        if db is None:
            raise ExecutionError(f"Unknown database: {name}")
        return db

    def create_database(self, name: str) -> Database:
        name = _name(name)
        if name in self.databases:
            raise ExecutionError(f"Database already exists: {name}")
        if len(self.databases) >= MAX_DATABASES:
            raise ExecutionError(f"Cannot create more than {MAX_DATABASES} databases")
        db = Database(name=name)
        self.databases[name] = db
        self.current = name
        return db

    def drop_database(self, name: str) -> Database:
        db = self.get_database(name)
        del self.databases[db.name]
        if self.current == db.name:
            self.current = None
        return db

    def use(self, name: str) -> Database:
        """Make an existing database current."""
        db = self.get_database(name)
        self.current = db.name
        return db

    def current_database(self) -> Database:
        if self.current is None:
            raise ExecutionError("No database selected; run CREATE DATABASE first")
        return self.databases[self.current]
