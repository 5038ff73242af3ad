"""
rsql/lexer.py

Pull-model tokenizer for the rsql statement grammar.

Responsibilities:
- Scan a borrowed input string one token at a time, on demand (advance())
- Classify keywords, identifiers, literals, operators and punctuation
- Never fail: characters no rule accepts become UNKNOWN tokens and the
  parser decides what to do with them

Notes:
- String literals use single quotes and have no escape mechanism: 'hello'
- A string literal missing its closing quote ends at end of input
- Numeric literals are digits with at most one '.'; a second '.' ends the number
- Token text is bounded to MAX_TOKEN_LENGTH characters, the rest is dropped
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

MAX_TOKEN_LENGTH = 63

WHITESPACE = frozenset(" \t\n\v\f\r")
DIGITS = frozenset("0123456789")
IDENT_START = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_")
IDENT_CHARS = IDENT_START | DIGITS


class TokenType(Enum):
    """
    Token categories recognized by the tokenizer.

    The member name doubles as the human-readable kind name used in
    diagnostics ("Expected IDENTIFIER").
    """
    EOF = auto()
    UNKNOWN = auto()

    # Punctuation
    COMMA = auto()       # ,
    SEMICOLON = auto()   # ;
    LPAREN = auto()      # (
    RPAREN = auto()      # )

    IDENTIFIER = auto()
    STRING_LITERAL = auto()
    NUMERIC_LITERAL = auto()

    # Comparison operators
    EQUAL = auto()          # =
    NOT_EQUAL = auto()      # !=
    GREATER = auto()        # >
    GREATER_EQUAL = auto()  # >=
    LESS = auto()           # <
    LESS_EQUAL = auto()     # <=

    # Arithmetic operators
    PLUS = auto()      # +
    MINUS = auto()     # -
    MULTIPLY = auto()  # *
    DIVIDE = auto()    # /

    # Keywords
    CREATE = auto()
    DROP = auto()
    DELETE = auto()
    TRUNCATE = auto()
    UPDATE = auto()
    ALTER = auto()
    SELECT = auto()
    INSERT = auto()
    DATABASE = auto()
    TABLE = auto()
    FROM = auto()
    WHERE = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    BETWEEN = auto()
    LIKE = auto()
    IN = auto()
    IS = auto()
    NULL = auto()
    INTO = auto()
    VALUES = auto()

    @property
    def is_keyword(self) -> bool:
        return self in KEYWORD_TYPES

    @property
    def is_comparison(self) -> bool:
        return self in COMPARISON_OPERATORS

    @property
    def is_operator(self) -> bool:
        return self in COMPARISON_OPERATORS or self in ARITHMETIC_OPERATORS

    @property
    def is_punctuation(self) -> bool:
        return self in PUNCTUATION

    @property
    def is_literal(self) -> bool:
        return self in (TokenType.STRING_LITERAL, TokenType.NUMERIC_LITERAL)


KEYWORDS: dict[str, TokenType] = {
    "CREATE": TokenType.CREATE,
    "DROP": TokenType.DROP,
    "DELETE": TokenType.DELETE,
    "TRUNCATE": TokenType.TRUNCATE,
    "UPDATE": TokenType.UPDATE,
    "ALTER": TokenType.ALTER,
    "SELECT": TokenType.SELECT,
    "INSERT": TokenType.INSERT,
    "DATABASE": TokenType.DATABASE,
    "TABLE": TokenType.TABLE,
    "FROM": TokenType.FROM,
    "WHERE": TokenType.WHERE,
    "AND": TokenType.AND,
    "OR": TokenType.OR,
    "NOT": TokenType.NOT,
    "BETWEEN": TokenType.BETWEEN,
    "LIKE": TokenType.LIKE,
    "IN": TokenType.IN,
    "IS": TokenType.IS,
    "NULL": TokenType.NULL,
    "INTO": TokenType.INTO,
    "VALUES": TokenType.VALUES,
}

KEYWORD_TYPES = frozenset(KEYWORDS.values())

COMPARISON_OPERATORS = frozenset({
    TokenType.EQUAL,
    TokenType.NOT_EQUAL,
    TokenType.GREATER,
    TokenType.GREATER_EQUAL,
    TokenType.LESS,
    TokenType.LESS_EQUAL,
})

ARITHMETIC_OPERATORS = frozenset({
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.MULTIPLY,
    TokenType.DIVIDE,
})

PUNCTUATION = frozenset({
    TokenType.COMMA,
    TokenType.SEMICOLON,
    TokenType.LPAREN,
    TokenType.RPAREN,
})

# Order matters: two-character operators must be tried before their prefixes.
MULTI_CHAR_OPERATORS: tuple[tuple[str, TokenType], ...] = (
    (">=", TokenType.GREATER_EQUAL),
    ("<=", TokenType.LESS_EQUAL),
    ("!=", TokenType.NOT_EQUAL),
    ("=", TokenType.EQUAL),
    (">", TokenType.GREATER),
    ("<", TokenType.LESS),
)

SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
}


@dataclass(frozen=True)
class Token:
    """
    A lexical token.

    Attributes:
        kind: TokenType
        text: Source text of the token, at most MAX_TOKEN_LENGTH characters.
              String literals are stored without their quotes; EOF uses "EOF".
    """
    kind: TokenType
    text: str

    def __post_init__(self) -> None:
        if len(self.text) > MAX_TOKEN_LENGTH:
            object.__setattr__(self, "text", self.text[:MAX_TOKEN_LENGTH])


EOF_TOKEN = Token(TokenType.EOF, "EOF")


def lookup_keyword(word: str) -> TokenType:
    """Return the keyword kind for `word` (case-insensitive), else IDENTIFIER."""
    return KEYWORDS.get(word.upper(), TokenType.IDENTIFIER)


class Tokenizer:
    """
    Scanner over a borrowed input string.

    Only the current token is retained. Reading `current` has no side effect;
    advance() moves the cursor and replaces the current token. Before the first
    advance() the current token is an empty UNKNOWN token.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.current = Token(TokenType.UNKNOWN, "")

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens until (and including) EOF."""
        while True:
            tok = self.advance()
            yield tok
            if tok.kind is TokenType.EOF:
                return

    @property
    def at_eof(self) -> bool:
        return self.current.kind is TokenType.EOF

    def advance(self) -> Token:
        """Scan the next token, make it current and return it."""
        self.current = self._scan()
        return self.current

    # ---------------- scanning ----------------

    def _scan(self) -> Token:
        text = self.text
        n = len(text)

        while self.pos < n and text[self.pos] in WHITESPACE:
            self.pos += 1

        if self.pos >= n:
            return EOF_TOKEN

        for op, kind in MULTI_CHAR_OPERATORS:
            if text.startswith(op, self.pos):
                self.pos += len(op)
                return Token(kind, op)

        ch = text[self.pos]

        kind = SINGLE_CHAR_TOKENS.get(ch)
        if kind is not None:
            self.pos += 1
            return Token(kind, ch)

        if ch == "'":
            return self._scan_string()
        if ch in DIGITS:
            return self._scan_number()
        if ch in IDENT_START:
            return self._scan_word()

        self.pos += 1
        return Token(TokenType.UNKNOWN, ch)

    def _scan_string(self) -> Token:
        self.pos += 1  # opening quote
        start = self.pos
        end = self.text.find("'", start)
        if end == -1:
            # unterminated: end of input closes the literal
            self.pos = len(self.text)
            return Token(TokenType.STRING_LITERAL, self.text[start:])
        self.pos = end + 1
        return Token(TokenType.STRING_LITERAL, self.text[start:end])

    def _scan_number(self) -> Token:
        text = self.text
        start = self.pos
        dot_seen = False
        while self.pos < len(text):
            c = text[self.pos]
            if c == "." and not dot_seen:
                dot_seen = True
            elif c not in DIGITS:
                break
            self.pos += 1
        return Token(TokenType.NUMERIC_LITERAL, text[start:self.pos])

    def _scan_word(self) -> Token:
        text = self.text
        start = self.pos
        while self.pos < len(text) and text[self.pos] in IDENT_CHARS:
            self.pos += 1
        word = text[start:self.pos]
        return Token(lookup_keyword(word), word)


def tokenize(text: str) -> list[Token]:
    """
    Tokenize a whole string.

    Args:
        text: Raw statement text.

    Returns:
        List of Token, always terminated with an EOF token.
    """
    return list(Tokenizer(text))
