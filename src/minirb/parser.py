"""
minirb Recursive Descent Parser
===============================

This module implements a recursive descent parser for the minirb
language. It takes the token list from the lexer and builds a list of
AST statements.

Grammar (EBNF)
--------------
program         ::= statement*
statement       ::= assignment | method_call | expression
assignment      ::= IDENTIFIER '=' expression
method_call     ::= IDENTIFIER expression      (IDENTIFIER then IDENTIFIER or INTEGER)
expression      ::= additive
additive        ::= multiplicative (('+' | '-') multiplicative)*
multiplicative  ::= primary (('*' | '/' | '%') primary)*
primary         ::= INTEGER | IDENTIFIER

There are no statement separators: a statement ends where the
expression grammar can no longer continue, so `x = 1 puts x` is two
statements.

Operator Precedence (lowest to highest)
---------------------------------------
1. additive        + -
2. multiplicative  * / %
3. primary         INTEGER, IDENTIFIER

All binary operators are left-associative: `10 - 3 - 2` is
`(10 - 3) - 2`.

Statement Dispatch
------------------
A statement starting with an identifier is classified by the token
that follows it:

| Next token            | Statement                    |
|-----------------------|------------------------------|
| '='                   | assignment                   |
| IDENTIFIER / INTEGER  | method call                  |
| + - * / %             | expression statement         |
| end of input          | bare identifier expression   |
| anything else         | syntax error                 |

Error Recovery
--------------
Syntax errors are collected rather than raised immediately. After an
error the parser skips ahead to the next token that can start a
statement and carries on, then raises a single ParseError listing
every error found.

Example Usage
-------------
>>> from minirb.parser import parse_source
>>> parse_source("x = 1 + 2")
[AssignmentStatement(identifier='x', expression=BinaryExpression(...))]
"""

from typing import Callable, Optional
import logging

from minirb.lexer import Lexer, Token, TokenType
from minirb.ast import (
    ASTNode,
    AssignmentStatement,
    BinaryExpression,
    IdentifierLiteral,
    IntegerLiteral,
    MethodCall,
)
from minirb.errors import (
    ErrorCollector,
    MinirbSyntaxError,
    MissingTokenError,
    SourceLocation,
    UnexpectedTokenError,
)

logger = logging.getLogger(__name__)


ADDITIVE_OPERATORS = (TokenType.PLUS, TokenType.MINUS)
MULTIPLICATIVE_OPERATORS = (TokenType.STAR, TokenType.SLASH, TokenType.MOD)

# Tokens that may begin a statement; used to resynchronize after an error
STATEMENT_START = (TokenType.IDENTIFIER, TokenType.INTEGER)


class Parser:
    """
    Recursive descent parser for minirb.

    The parser keeps a cursor into an immutable token list and looks at
    most one token ahead of it.

    Attributes:
        tokens: List of tokens to parse
        filename: Source filename for error reporting
        statements: Statements produced by the last parse() call
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        max_errors: int = 100,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
            filename: Source filename for error messages
            source_lines: Original source lines for error context
            max_errors: Stop parsing after this many syntax errors
        """
        self.tokens = tuple(tokens)
        self.filename = filename
        self.source_lines = source_lines or []
        self.statements: list[ASTNode] = []

        self._pos = 0
        self._errors = ErrorCollector(max_errors=max_errors)

    @property
    def errors(self) -> list:
        return self._errors.errors

    def parse(self) -> list[ASTNode]:
        """
        Parse the token list into top-level statements.

        Returns:
            Statements in source order

        Raises:
            ParseError: If any syntax error was found
        """
        self._pos = 0
        self._errors.clear()
        statements = []

        while not self._at_end():
            start = self._pos
            try:
                statements.append(self._parse_statement())
            except MinirbSyntaxError as e:
                self._errors.add(e)
                if self._errors.should_stop():
                    break
                self._synchronize(start)

        if self._errors.has_errors():
            logger.debug(f"Parse of {self.filename} failed with {self._errors.error_count()} errors")
            self._errors.raise_if_errors()

        self.statements = statements
        logger.debug(f"Parsed {len(statements)} statements from {self.filename}")
        return statements

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.tokens)

    def _peek(self, offset: int = 0) -> Optional[Token]:
        """Look at the token at current position + offset (None past the end)."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return None
        return self.tokens[pos]

    def _advance(self) -> Token:
        token = self.tokens[self._pos]
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        token = self._peek()
        return token is not None and token.type in types

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    def _end_location(self) -> SourceLocation:
        """Location just past the last token, for end-of-input errors."""
        if not self.tokens:
            return SourceLocation(self.filename, 1, 1)
        last = self.tokens[-1]
        return SourceLocation(self.filename, last.line, last.column + len(last.value))

    def _unexpected(self, token: Token, expected: str) -> UnexpectedTokenError:
        return UnexpectedTokenError(
            token.describe(),
            expected=expected,
            location=token.location,
            source_line=self._get_source_line(token.line),
        )

    def _synchronize(self, start: int) -> None:
        """
        Skip tokens after an error until one that can start a statement.

        Args:
            start: Cursor position where the failed statement began. If
                nothing was consumed since then, one token is skipped so
                that parsing always makes progress.
        """
        if self._pos == start and not self._at_end():
            self._advance()

        while not self._at_end() and not self._check(*STATEMENT_START):
            self._advance()

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> ASTNode:
        if self._check(TokenType.IDENTIFIER):
            return self._parse_identifier_statement()
        return self._parse_expression()

    def _parse_identifier_statement(self) -> ASTNode:
        """Dispatch a statement that starts with an identifier."""
        following = self._peek(1)

        if following is None or following.is_binary_operator():
            return self._parse_expression()

        if following.type == TokenType.SINGLE_EQUALS:
            return self._parse_assignment()

        if following.type in (TokenType.IDENTIFIER, TokenType.INTEGER):
            return self._parse_method_call()

        self._advance()
        raise self._unexpected(following, "'=', an argument or an operator")

    def _parse_assignment(self) -> AssignmentStatement:
        """Parse `IDENTIFIER '=' expression`."""
        name = self._advance()
        self._advance()  # '='

        expression = self._parse_expression()
        return AssignmentStatement(
            identifier=name.value,
            expression=expression,
            location=name.location,
        )

    def _parse_method_call(self) -> MethodCall:
        """Parse `IDENTIFIER expression` - exactly one argument, no parentheses."""
        name = self._advance()

        argument = self._parse_expression()
        return MethodCall(
            name=name.value,
            arguments=[argument],
            location=name.location,
        )

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> ASTNode:
        return self._parse_additive()

    def _parse_additive(self) -> ASTNode:
        return self._parse_binary(self._parse_multiplicative, ADDITIVE_OPERATORS)

    def _parse_multiplicative(self) -> ASTNode:
        return self._parse_binary(self._parse_primary, MULTIPLICATIVE_OPERATORS)

    def _parse_binary(
        self,
        operand_parser: Callable[[], ASTNode],
        operators: tuple[TokenType, ...],
    ) -> ASTNode:
        """
        Generic left-associative binary expression parser.

        Args:
            operand_parser: Function to parse operands
            operators: Token types accepted at this precedence level
        """
        expr = operand_parser()

        while self._check(*operators):
            op_token = self._advance()
            right = operand_parser()
            expr = BinaryExpression(
                left=expr,
                right=right,
                operator=op_token,
                location=op_token.location,
            )

        return expr

    def _parse_primary(self) -> ASTNode:
        """Parse an integer literal or identifier."""
        token = self._peek()

        if token is None:
            raise MissingTokenError(
                "an integer or identifier",
                self._end_location(),
            )

        if token.type == TokenType.INTEGER:
            self._advance()
            return IntegerLiteral(value=token.value, location=token.location)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return IdentifierLiteral(name=token.value, location=token.location)

        self._advance()
        raise self._unexpected(token, "an integer or identifier")


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> list[ASTNode]:
    """
    Lex and parse a source string.

    Args:
        source: minirb source code
        filename: Source filename for error messages

    Returns:
        List of top-level statements

    Raises:
        ParseError: If the source contains syntax errors
    """
    tokens = Lexer(source, filename).tokenize()
    return Parser(tokens, filename, source.splitlines()).parse()
