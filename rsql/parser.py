"""
rsql/parser.py

Recursive-descent parser for the rsql statement grammar.

Responsibilities:
- Pull tokens from a Tokenizer (one token of lookahead) and build a syntax tree
  (see rsql/ast.py), one method per grammar production
- Stop at the first error: record it in the parser's error slot and return no
  tree at all, never a partial one
- Supported statements:
    - CREATE DATABASE <name>
    - CREATE TABLE <name> ( <col> [<type>], ... )
    - DROP TABLE <name>
    - SELECT * | <col>, ... FROM <name> [WHERE <expr>]
    - INSERT INTO <name> ( <col>, ... ) VALUES ( <expr>, ... ) [, ( ... )]*

Notes:
- Comparison expressions are right-associative: a = b = 1 parses as a = (b = 1).
- A statement may omit its trailing ';' only when it is the last thing in the
  input.
- Grammar rules raise SqlSyntaxError. A rule that has already created a node
  releases it before the error leaves the rule; parse() is the only place that
  catches it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .ast import Node, NodeAllocator, NodeKind
from .errors import (
    MalformedExpressionError,
    MissingTokenError,
    SqlSyntaxError,
    UnexpectedTokenError,
)
from .lexer import Token, Tokenizer, TokenType

logger = logging.getLogger(__name__)

# Tokens that can begin an expression operand.
OPERAND_TYPES = frozenset({
    TokenType.IDENTIFIER,
    TokenType.STRING_LITERAL,
    TokenType.NUMERIC_LITERAL,
})


class Parser:
    """
    Single-use parser over one Tokenizer.

    Attributes:
        tokenizer: Source of tokens; advanced by the parser.
        nodes: Allocator used for every node the parser creates.
        has_error: Set once a grammar rule fails.
        error: The SqlSyntaxError that stopped the parse, if any.
    """

    def __init__(self, tokenizer: Tokenizer, nodes: NodeAllocator | None = None):
        self.tokenizer = tokenizer
        self.nodes = nodes if nodes is not None else NodeAllocator()
        self.has_error = False
        self.error: SqlSyntaxError | None = None
        self._used = False

    @property
    def error_message(self) -> str:
        """Diagnostic of the failed parse, or "" if there was no error."""
        return str(self.error) if self.error is not None else ""

    # ---------------- token helpers ----------------

    def peek(self) -> Token:
        """Return the current token without consuming it."""
        return self.tokenizer.current

    def at(self, kind: TokenType) -> bool:
        return self.tokenizer.current.kind is kind

    def advance(self) -> Token:
        """Consume the current token and return it."""
        tok = self.tokenizer.current
        self.tokenizer.advance()
        return tok

    def match(self, kind: TokenType) -> bool:
        """If the current token is of `kind`, consume it and return True."""
        if self.at(kind):
            self.advance()
            return True
        return False

    def expect(self, kind: TokenType) -> Token:
        """Return the current token if it is of `kind`, else fail. Does not consume."""
        if not self.at(kind):
            raise self._fail(MissingTokenError(kind.name, self.peek().text))
        return self.peek()

    def consume(self, kind: TokenType) -> Token:
        """Consume a token of `kind`, else fail."""
        self.expect(kind)
        return self.advance()

    def _fail(self, err: SqlSyntaxError) -> SqlSyntaxError:
        """Record `err` in the error slot and return it for raising."""
        self.has_error = True
        self.error = err
        return err

    @contextmanager
    def _building(self, kind: NodeKind, text: str | None = None) -> Iterator[Node]:
        """Create a node that is released if the enclosed rule body fails."""
        node = self.nodes.create(kind, text)
        try:
            yield node
        except SqlSyntaxError:
            self.nodes.release(node)
            raise

    # ---------------- entry point ----------------

    def parse(self) -> Node | None:
        """
        Parse one statement.

        Returns:
            The root of the syntax tree, owned by the caller, or None on error
            (see `error` / `error_message`).

        Raises:
            RuntimeError: if this parser has already been used.
        """
        if self._used:
            raise RuntimeError("a Parser parses exactly one statement; create a new one")
        self._used = True

        self.tokenizer.advance()
        try:
            tree = self.parse_statement()
            if not self.tokenizer.at_eof:
                try:
                    self.consume(TokenType.SEMICOLON)
                except SqlSyntaxError:
                    self.nodes.release(tree)
                    raise
        except SqlSyntaxError as e:
            logger.debug("%s (input=%r)", e, self.tokenizer.text)
            return None
        return tree

    # ---------------- statement dispatch ----------------

    def parse_statement(self) -> Node:
        """Dispatch on the first token of the statement."""
        t = self.peek()
        if t.kind is TokenType.CREATE:
            self.advance()
            if self.match(TokenType.DATABASE):
                return self.parse_create_database()
            if self.match(TokenType.TABLE):
                return self.parse_create_table()
            raise self._fail(UnexpectedTokenError(self.peek().text))
        if t.kind is TokenType.DROP:
            self.advance()
            self.consume(TokenType.TABLE)
            return self.parse_drop_table()
        if t.kind is TokenType.SELECT:
            return self.parse_select()
        if t.kind is TokenType.INSERT:
            return self.parse_insert()
        raise self._fail(UnexpectedTokenError(t.text))

    # ---------------- DDL ----------------

    def parse_create_database(self) -> Node:
        """CREATE DATABASE <name>  (keywords already consumed)"""
        with self._building(NodeKind.CREATE_DATABASE) as node:
            node.add_child(self.parse_identifier())
        return node

    def parse_create_table(self) -> Node:
        """CREATE TABLE <name> <column_list>  (keywords already consumed)"""
        with self._building(NodeKind.CREATE_TABLE) as node:
            node.add_child(self.parse_identifier())
            node.add_child(self.parse_column_list())
        return node

    def parse_drop_table(self) -> Node:
        """DROP TABLE <name>  (keywords already consumed)"""
        with self._building(NodeKind.DROP_TABLE) as node:
            node.add_child(self.parse_identifier())
        return node

    def parse_column_list(self) -> Node:
        """
        Parse:
          '(' column_def (',' column_def)* ')'
        """
        self.consume(TokenType.LPAREN)
        with self._building(NodeKind.COLUMN_LIST) as node:
            node.add_child(self.parse_column_def())
            while self.match(TokenType.COMMA):
                node.add_child(self.parse_column_def())
            self.consume(TokenType.RPAREN)
        return node

    def parse_column_def(self) -> Node:
        """
        Parse:
          IDENTIFIER [IDENTIFIER]
        The second identifier, when present, is the column type.
        """
        with self._building(NodeKind.COLUMN_DEF) as node:
            node.add_child(self.parse_identifier())
            if self.at(TokenType.IDENTIFIER):
                node.add_child(self.parse_identifier())
        return node

    # ---------------- SELECT ----------------

    def parse_select(self) -> Node:
        """
        Parse:
          SELECT ('*' | IDENTIFIER (',' IDENTIFIER)*) FROM IDENTIFIER [where_clause]
        """
        self.consume(TokenType.SELECT)
        with self._building(NodeKind.SELECT) as node:
            if self.at(TokenType.MULTIPLY):
                node.add_child(self.nodes.create(NodeKind.LITERAL, self.advance().text))
            else:
                node.add_child(self.parse_select_columns())
            self.consume(TokenType.FROM)
            node.add_child(self.parse_identifier())
            where = self.parse_where_clause()
            if where is not None:
                node.add_child(where)
        return node

    def parse_select_columns(self) -> Node:
        with self._building(NodeKind.COLUMN_LIST) as node:
            node.add_child(self.parse_identifier())
            while self.match(TokenType.COMMA):
                node.add_child(self.parse_identifier())
        return node

    def parse_where_clause(self) -> Node | None:
        """
        Parse:
          [WHERE expression]
        Returns None when the current token is not WHERE.
        """
        if not self.match(TokenType.WHERE):
            return None
        if self.peek().kind not in OPERAND_TYPES:
            raise self._fail(MalformedExpressionError("Expected expression", self.peek().text))
        with self._building(NodeKind.WHERE_CLAUSE) as node:
            node.add_child(self.parse_expression())
        return node

    # ---------------- INSERT ----------------

    def parse_insert(self) -> Node:
        """
        Parse:
          INSERT INTO IDENTIFIER column_list VALUES value_list (',' value_list)*
        """
        self.consume(TokenType.INSERT)
        self.consume(TokenType.INTO)
        with self._building(NodeKind.INSERT) as node:
            node.add_child(self.parse_identifier())
            node.add_child(self.parse_column_list())
            self.consume(TokenType.VALUES)
            node.add_child(self.parse_value_list())
            while self.match(TokenType.COMMA):
                node.add_child(self.parse_value_list())
        return node

    def parse_value_list(self) -> Node:
        """
        Parse:
          '(' expression (',' expression)* ')'
        """
        self.consume(TokenType.LPAREN)
        with self._building(NodeKind.VALUE_LIST) as node:
            node.add_child(self.parse_expression())
            while self.match(TokenType.COMMA):
                node.add_child(self.parse_expression())
            self.consume(TokenType.RPAREN)
        return node

    # ---------------- expressions / atoms ----------------

    def parse_expression(self) -> Node:
        """
        Parse:
          operand [comparison_op expression]
        The right-hand side recurses, so chains bind to the right.
        """
        left = self.parse_operand()
        if not self.peek().kind.is_comparison:
            return left
        op = self.peek()
        with self._building(NodeKind.OPERATOR, op.text) as node:
            node.add_child(left)
            self.advance()
            node.add_child(self.parse_expression())
        return node

    def parse_operand(self) -> Node:
        """IDENTIFIER | STRING_LITERAL | NUMERIC_LITERAL"""
        t = self.peek()
        if t.kind is TokenType.IDENTIFIER:
            return self.parse_identifier()
        if t.kind.is_literal:
            self.advance()
            return self.nodes.create(NodeKind.LITERAL, t.text)
        raise self._fail(MalformedExpressionError("Expected identifier or literal", t.text))

    def parse_identifier(self) -> Node:
        """IDENTIFIER"""
        t = self.consume(TokenType.IDENTIFIER)
        return self.nodes.create(NodeKind.IDENTIFIER, t.text)


# ---------- public helpers ----------

def parse_sql(sql: str, nodes: NodeAllocator | None = None) -> Node:
    """
    Parse exactly one statement with a fresh Tokenizer/Parser pair.

    Args:
        sql: Statement text.
        nodes: Optional allocator to create nodes with (allocation tracking).

    Returns:
        Syntax tree root, owned by the caller.

    Raises:
        SqlSyntaxError: if the statement does not parse.
    """
    parser = Parser(Tokenizer(sql), nodes)
    tree = parser.parse()
    if tree is None:
        if parser.error is None:
            raise RuntimeError("parse failed without recording an error")
        raise parser.error
    return tree
