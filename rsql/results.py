"""
rsql/results.py

Result objects returned by Session.execute()/execute_script().

The evaluator returns one of:
- CommandOk: for statements that do not return rows (DDL, INSERT)
- QueryResult: for SELECT statements
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandOk:
    """
    Represents successful execution of a non-SELECT statement.

    Attributes:
        rows_affected: Number of rows inserted.
        message: Human-readable status message.
    """
    rows_affected: int = 0
    message: str = "OK"


@dataclass(frozen=True)
class QueryResult:
    """
    Represents the output of a SELECT query.

    Attributes:
        columns: Output column names in order.
        rows: A list of rows; each row is a list of cell values aligned with `columns`.
    """
    columns: list[str]
    rows: list[list[str | None]]
