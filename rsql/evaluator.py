"""
rsql/evaluator.py

Maps syntax trees onto the in-memory storage context.

Responsibilities:
- Execute statement trees produced by the parser:
    - DDL: CREATE DATABASE, CREATE TABLE, DROP TABLE
    - DML: INSERT (one row per VALUES list), SELECT (full scan)
- Validate the parts of the tree the grammar cannot (column counts, literal
  values, known tables/columns)

Core design:
- The storage context is passed in explicitly; the evaluator keeps no state
  of its own.
- WHERE supports a single comparison `column <op> literal`. Values compare as
  numbers when both sides parse as numbers, otherwise as text; NULL cells never
  match.
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import Any, Callable

from .ast import Node, NodeKind
from .context import MAX_ROWS, Context, Table
from .errors import ExecutionError
from .lexer import DIGITS
from .results import CommandOk, QueryResult

logger = logging.getLogger(__name__)

COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}


def _number(text: str) -> float | None:
    """Parse `text` as a number only if it follows the numeric literal grammar."""
    if not text or text[0] not in DIGITS or text.count(".") > 1:
        return None
    if any(c not in DIGITS and c != "." for c in text):
        return None
    return float(text)


def compare(cell: str | None, op: str, literal: str) -> bool:
    """Apply comparison `op` between a stored cell and a literal."""
    if cell is None:
        return False
    fn = COMPARATORS[op]
    left, right = _number(cell), _number(literal)
    if left is not None and right is not None:
        return fn(left, right)
    return fn(cell, literal)


@dataclass
class Evaluator:
    """
    Executes statement trees against a Context.

    Args:
        context: Storage context the statements operate on.
    """
    context: Context

    # --------------------------
    # public entry point
    # --------------------------

    def evaluate(self, node: Node) -> CommandOk | QueryResult:
        """
        Execute a single statement tree.

        Returns:
            CommandOk for non-SELECT or QueryResult for SELECT.

        Raises:
            ExecutionError on failure.
        """
        handlers = {
            NodeKind.CREATE_DATABASE: self._create_database,
            NodeKind.CREATE_TABLE: self._create_table,
            NodeKind.DROP_TABLE: self._drop_table,
            NodeKind.INSERT: self._insert,
            NodeKind.SELECT: self._select,
        }
        handler = handlers.get(node.kind)
        if handler is None:
            raise ExecutionError(f"Unsupported statement: {node.kind.value}")
        return handler(node)

    # --------------------------
    # DDL
    # --------------------------

    def _create_database(self, node: Node) -> CommandOk:
        name = self._identifier(node[0])
        db = self.context.create_database(name)
        logger.info("database %s created", db.name)
        return CommandOk(message=f"Database {db.name} created")

    def _create_table(self, node: Node) -> CommandOk:
        db = self.context.current_database()
        name = self._identifier(node[0])
        table = db.create_table(name)
        try:
            for col_def in node[1].children:
                col_type = self._identifier(col_def[1]) if len(col_def) > 1 else None
                table.add_column(self._identifier(col_def[0]), col_type)
        except ExecutionError:
            db.drop_table(table.name)
            raise
        logger.info("table %s.%s created with %d column(s)", db.name, table.name, len(table.columns))
        return CommandOk(message=f"Table {table.name} created")

    def _drop_table(self, node: Node) -> CommandOk:
        db = self.context.current_database()
        table = db.drop_table(self._identifier(node[0]))
        logger.info("table %s.%s dropped", db.name, table.name)
        return CommandOk(message=f"Table {table.name} dropped")

    # --------------------------
    # DML
    # --------------------------

    def _insert(self, node: Node) -> CommandOk:
        table = self._table(node[0])
        columns = [self._identifier(col_def[0]) for col_def in node[1].children]
        seen: set[str] = set()
        for c in columns:
            if table.get_column(c) is None:
                raise ExecutionError(f"Unknown column: {c}")
            if c in seen:
                raise ExecutionError(f"Duplicate column: {c}")
            seen.add(c)

        rows: list[dict[str, str | None]] = []
        for value_list in node.children[2:]:
            if len(value_list) != len(columns):
                raise ExecutionError(
                    f"Number of values ({len(value_list)}) does not match number of columns ({len(columns)})"
                )
            rows.append(dict(zip(columns, (self._literal(v) for v in value_list.children))))

        if len(table.rows) + len(rows) > MAX_ROWS:
            raise ExecutionError(f"Table {table.name} is full ({MAX_ROWS} rows)")
        for r in rows:
            table.insert_row(r)
        logger.info("%d row(s) inserted into %s", len(rows), table.name)
        return CommandOk(rows_affected=len(rows), message="INSERT OK")

    def _select(self, node: Node) -> QueryResult:
        cols_node = node[0]
        table = self._table(node[1])

        if cols_node.kind is NodeKind.LITERAL:
            columns = table.column_names()
        else:
            columns = [self._identifier(c) for c in cols_node.children]
            for c in columns:
                if table.get_column(c) is None:
                    raise ExecutionError(f"Unknown column: {c}")

        where = node.child_of_kind(NodeKind.WHERE_CLAUSE)
        predicate = self._predicate(table, where[0]) if where is not None else None

        out = [[row.get(c) for c in columns] for row in table.rows if predicate is None or predicate(row)]
        logger.debug("select from %s returned %d row(s)", table.name, len(out))
        return QueryResult(columns=columns, rows=out)

    def _predicate(self, table: Table, expr: Node) -> Callable[[dict[str, str | None]], bool]:
        if expr.kind is not NodeKind.OPERATOR:
            raise ExecutionError("WHERE must be a comparison: <column> <op> <literal>")
        left, right = expr.children
        if right.kind is NodeKind.OPERATOR:
            raise ExecutionError("Chained comparisons are not supported in WHERE")
        if left.kind is not NodeKind.IDENTIFIER or right.kind is not NodeKind.LITERAL:
            raise ExecutionError("WHERE must be a comparison: <column> <op> <literal>")

        column = str(left.text)
        if table.get_column(column) is None:
            raise ExecutionError(f"Unknown column: {column}")
        op, literal = str(expr.text), str(right.text)
        return lambda row: compare(row.get(column), op, literal)

    # --------------------------
    # tree helpers
    # --------------------------

    def _table(self, ident: Node) -> Table:
        return self.context.current_database().get_table(self._identifier(ident))

    @staticmethod
    def _identifier(node: Node) -> str:
        if node.kind is not NodeKind.IDENTIFIER or node.text is None:
            raise ExecutionError(f"Expected identifier, got {node.kind.value}")
        return node.text

    @staticmethod
    def _literal(node: Node) -> str:
        if node.kind is not NodeKind.LITERAL or node.text is None:
            raise ExecutionError("VALUES may only contain literals")
        return node.text
