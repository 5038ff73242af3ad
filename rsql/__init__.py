"""
rsql: a small SQL-like statement parser with an in-memory evaluator.

    from rsql import Parser, Tokenizer, format_tree

    parser = Parser(Tokenizer("SELECT * FROM users;"))
    tree = parser.parse()
    if tree is None:
        print(parser.error_message)
    else:
        print(format_tree(tree))
"""

from .ast import Node, NodeAllocator, NodeKind, format_tree
from .context import Context
from .errors import ExecutionError, RsqlError, SqlSyntaxError
from .evaluator import Evaluator
from .lexer import Token, Tokenizer, TokenType, tokenize
from .parser import Parser, parse_sql
from .results import CommandOk, QueryResult
from .session import Session

__all__ = [
    "CommandOk",
    "Context",
    "Evaluator",
    "ExecutionError",
    "Node",
    "NodeAllocator",
    "NodeKind",
    "Parser",
    "QueryResult",
    "RsqlError",
    "Session",
    "SqlSyntaxError",
    "Token",
    "TokenType",
    "Tokenizer",
    "format_tree",
    "parse_sql",
    "tokenize",
]
