"""
rsql/session.py

Public API for running statements against an in-memory Context.

Responsibilities:
- Provide a simple library interface:
    - Session().execute(sql) -> CommandOk | QueryResult
    - Session().execute_script(sql) -> list[CommandOk | QueryResult]
- Give every statement its own Tokenizer/Parser pair and release its syntax
  tree once it has been evaluated
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .ast import Node, NodeAllocator
from .context import Context
from .errors import ExecutionError
from .evaluator import Evaluator
from .parser import parse_sql
from .results import CommandOk, QueryResult


def split_statements(script: str) -> list[str]:
    """
    Split a script into statements at ';' outside single-quoted literals.

    Each returned statement keeps its terminating ';'. Blank fragments are
    dropped; a trailing statement without ';' is kept as-is.
    """
    out: list[str] = []
    buf: list[str] = []
    in_str = False
    for ch in script:
        buf.append(ch)
        if ch == "'":
            in_str = not in_str
        elif ch == ";" and not in_str:
            out.append("".join(buf))
            buf = []
    out.append("".join(buf))
    return [s.strip() for s in out if s.strip() and s.strip() != ";"]


@dataclass
class Session:
    """
    Statement execution session.

    Attributes:
        context: Storage context the session's statements act on.
    """
    context: Context = field(default_factory=Context)

    def execute(self, sql: str) -> CommandOk | QueryResult:
        """
        Parse and execute a single statement.

        Args:
            sql: Statement text (trailing semicolon optional).

        Returns:
            CommandOk for non-SELECT statements, or QueryResult for SELECT.

        Raises:
            SqlSyntaxError: on parse errors.
            ExecutionError: on execution failure, or if `sql` holds more than
                            one statement (use execute_script() for those).
        """
        if len(split_statements(sql)) > 1:
            raise ExecutionError("execute() runs a single statement; use execute_script() for several")
        nodes = NodeAllocator()
        tree = parse_sql(sql, nodes)
        try:
            return self.evaluate(tree)
        finally:
            nodes.release(tree)

    def evaluate(self, tree: Node) -> CommandOk | QueryResult:
        """Execute an already parsed statement tree. The caller keeps ownership of it."""
        return Evaluator(self.context).evaluate(tree)

    def execute_script(self, sql: str) -> list[CommandOk | QueryResult]:
        """
        Execute statements separated by semicolons, stopping at the first error.

        Returns:
            List of results in statement order.
        """
        stmts = split_statements(sql)
        if not stmts:
            raise ExecutionError("Empty input")
        return [self.execute(s) for s in stmts]
