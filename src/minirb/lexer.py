"""
minirb Lexer (Tokenizer)
========================

This module implements the lexer for the minirb language.
It converts source text into a list of tokens for the parser.

Token Categories
----------------
- Integers: runs of decimal digits (kept as text)
- Identifiers: a lowercase letter followed by letters, digits or '_'
- Operators: = + - * / %
- Bad: any other single character

Whitespace is a run of spaces, newlines or tabs. There are no comments
and no statement separators.

A character that does not start a valid token is not fatal: the lexer
records a warning, emits a BAD token and carries on. The parser rejects
the BAD token when it reaches it.

Example Usage
-------------
>>> from minirb.lexer import Lexer
>>> for token in Lexer("x = 40 + 2").tokenize():
...     print(token)
Token(IDENTIFIER, 'x', 1:1)
Token(SINGLE_EQUALS, '=', 1:3)
Token(INTEGER, '40', 1:5)
Token(PLUS, '+', 1:8)
Token(INTEGER, '2', 1:10)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional
import logging
import string

from minirb.errors import ErrorCollector, SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(IntEnum):
    """
    Token types for the minirb language.

    The numbering is part of the token dump format and stays stable.
    """

    INTEGER = 0
    BAD = 1             # Lexer error marker

    SINGLE_EQUALS = 2   # =
    IDENTIFIER = 3

    PLUS = 4            # +
    MINUS = 5           # -
    STAR = 6            # *
    SLASH = 7           # /
    MOD = 8             # %


# Single-character operator table
OPERATORS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.MOD,
    "=": TokenType.SINGLE_EQUALS,
}

BINARY_OPERATORS = frozenset({
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.STAR,
    TokenType.SLASH,
    TokenType.MOD,
})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from minirb source code.

    Attributes:
        type: The TokenType classification
        value: The exact matched source text
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str
    line: int = 1
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        """Short form used in diagnostics, e.g. "PLUS '+'"."""
        return f"{self.type.name} {self.value!r}"

    def is_binary_operator(self) -> bool:
        return self.type in BINARY_OPERATORS


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes minirb source code.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = lexer.tokenize()
        for warning in lexer.warnings:
            print(warning)

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for diagnostics)
        tokens: Tokens produced by the last tokenize() call
    """

    WHITESPACE = " \n\t"

    # Identifiers must start lowercase
    IDENT_START = string.ascii_lowercase

    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self.tokens: list[Token] = []

        self._pos = 0
        self._line = 1
        self._column = 1

        self._diagnostics = ErrorCollector()

    @property
    def warnings(self) -> list[str]:
        """Warnings recorded for bad characters."""
        return self._diagnostics.warnings

    def tokenize(self) -> list[Token]:
        """
        Convert the whole source into tokens.

        Never raises: unknown characters become BAD tokens.

        Returns:
            The list of tokens in source order (empty for empty input)
        """
        self.tokens = []
        self._pos = 0
        self._line = 1
        self._column = 1
        self._diagnostics.clear()

        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            self.tokens.append(self._scan_token())

        logger.debug(f"Lexed {len(self.tokens)} tokens from {self.filename}")
        return self.tokens

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or empty string at end of source."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek() in self.WHITESPACE:
            self._advance()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        char = self._peek()

        if char in string.digits:
            return self._scan_run(TokenType.INTEGER, string.digits)

        if char in self.IDENT_START:
            return self._scan_run(TokenType.IDENTIFIER, self.IDENT_CHARS)

        return self._scan_symbol()

    def _scan_run(self, token_type: TokenType, allowed: str) -> Token:
        """Consume a maximal run of characters from `allowed`."""
        line, column = self._line, self._column
        start = self._pos

        while not self._at_end() and self._peek() in allowed:
            self._advance()

        return self._make_token(token_type, self.source[start:self._pos], line, column)

    def _scan_symbol(self) -> Token:
        """Consume exactly one character and map it through the operator table."""
        line, column = self._line, self._column
        char = self._advance()

        token_type = OPERATORS.get(char)
        if token_type is None:
            location = SourceLocation(self.filename, line, column)
            message = f"bad token symbol {char!r}"
            logger.debug(f"{location}: {message}")
            self._diagnostics.add_warning(message, location)
            token_type = TokenType.BAD

        return self._make_token(token_type, char, line, column)

    def _make_token(
        self,
        token_type: TokenType,
        value: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=line or self._line,
            column=column or self._column,
            filename=self.filename,
        )


def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Convenience wrapper: tokenize a source string."""
    return Lexer(source, filename).tokenize()
