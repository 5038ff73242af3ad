"""
rsql/errors.py

Centralized exception types for rsql.

This module defines:
- A common base exception for all rsql errors
- The syntax error family raised by the parser, carrying the offending token text
- The execution error raised by the evaluator and the storage context
"""

from __future__ import annotations

# Bounded size of a parser diagnostic, in visible characters.
MAX_ERROR_LENGTH = 255


class RsqlError(Exception):
    """
    Base class for all rsql errors.

    Catching this exception allows callers (REPL, embedding code) to handle all
    rsql errors without accidentally swallowing unrelated system exceptions.
    """


class SqlSyntaxError(RsqlError):
    """
    Raised when a statement does not match the grammar.

    Args:
        reason: Short explanation, e.g. "Expected IDENTIFIER".
        token_text: Text of the token the parser was looking at.

    The string form is the user-visible diagnostic:
        Parse error: <reason> at token '<token_text>'
    """

    def __init__(self, reason: str, token_text: str):
        self.reason = reason
        self.token_text = token_text
        super().__init__(self.__str__())

    def __str__(self) -> str:
        msg = f"Parse error: {self.reason} at token '{self.token_text}'"
        return msg[:MAX_ERROR_LENGTH]


class UnexpectedTokenError(SqlSyntaxError):
    """The token cannot start (or continue) any statement the grammar knows."""

    def __init__(self, token_text: str):
        super().__init__("Unexpected token", token_text)


class MissingTokenError(SqlSyntaxError):
    """
    A rule required a specific token kind and found something else.

    Attributes:
        expected: Name of the token kind the rule required (e.g. "SEMICOLON").
    """

    def __init__(self, expected: str, token_text: str):
        self.expected = expected
        super().__init__(f"Expected {expected}", token_text)


class MalformedExpressionError(SqlSyntaxError):
    """An expression operand is missing or is not an identifier/literal."""


class ExecutionError(RsqlError):
    """
    Raised when a statement is syntactically valid but cannot be executed.

    Examples:
      - No database selected
      - Missing or duplicate database/table/column
      - Storage capacity exhausted
      - Tree shape the evaluator does not support
    """
