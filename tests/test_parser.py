# =============================================================================
# test_parser.py - Parser Unit Tests
# =============================================================================
# Tests for the minirb recursive descent parser.
#
# Test coverage includes:
#   - Assignment, method call and expression statements
#   - Operator precedence and left-associativity
#   - Statement boundaries without separators
#   - Syntax errors, error recovery and the aggregate ParseError
#   - The AST printer
# =============================================================================

import pytest
from minirb.ast import (
    ASTPrinter,
    AssignmentStatement,
    BinaryExpression,
    IdentifierLiteral,
    IntegerLiteral,
    MethodCall,
)
from minirb.errors import (
    MissingTokenError,
    ParseError,
    UnexpectedTokenError,
)
from minirb.lexer import Lexer, TokenType
from minirb.parser import Parser, parse_source


# =============================================================================
# Helper Functions
# =============================================================================

def parse(source: str) -> list:
    return parse_source(source, "<test>")


def shape(node) -> object:
    """Reduce a node to nested tuples for compact assertions."""
    if isinstance(node, IntegerLiteral):
        return node.value
    if isinstance(node, IdentifierLiteral):
        return node.name
    if isinstance(node, BinaryExpression):
        return (node.operator.value, shape(node.left), shape(node.right))
    if isinstance(node, MethodCall):
        return ("call", node.name, [shape(a) for a in node.arguments])
    if isinstance(node, AssignmentStatement):
        return ("=", node.identifier, shape(node.expression))
    raise AssertionError(f"unexpected node {node!r}")


def shapes(source: str) -> list:
    return [shape(s) for s in parse(source)]


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:
    """Tests for statement dispatch."""

    def test_empty_program(self):
        assert parse("") == []

    def test_assignment(self):
        statements = parse("x = 5")
        assert statements == [AssignmentStatement("x", IntegerLiteral("5"))]

    def test_assignment_of_expression(self):
        assert shapes("x = a + 2") == [("=", "x", ("+", "a", "2"))]

    def test_method_call_with_identifier(self):
        statements = parse("puts x")
        assert statements == [MethodCall("puts", [IdentifierLiteral("x")])]

    def test_method_call_with_integer(self):
        assert shapes("puts 42") == [("call", "puts", ["42"])]

    def test_method_call_argument_is_full_expression(self):
        assert shapes("puts 1 + 2 * 3") == [("call", "puts", [("+", "1", ("*", "2", "3"))])]

    def test_unknown_method_still_parses(self):
        """Method names are only checked at runtime."""
        assert shapes("foo 1") == [("call", "foo", ["1"])]

    def test_expression_statement(self):
        assert shapes("1 + 2") == [("+", "1", "2")]

    def test_identifier_expression_statement(self):
        """An identifier followed by an operator starts an expression."""
        assert shapes("x * 2") == [("*", "x", "2")]

    def test_bare_identifier_at_end(self):
        assert shapes("x") == ["x"]

    def test_statements_without_separators(self):
        assert shapes("x = 1 puts x") == [
            ("=", "x", "1"),
            ("call", "puts", ["x"]),
        ]

    def test_statements_on_separate_lines(self):
        assert shapes("a = 5\nb = a + 2\nputs b\n") == [
            ("=", "a", "5"),
            ("=", "b", ("+", "a", "2")),
            ("call", "puts", ["b"]),
        ]

    def test_statements_keep_source_order(self):
        names = [s.identifier for s in parse("c = 1 a = 2 b = 3")]
        assert names == ["c", "a", "b"]

    def test_node_locations(self):
        statement = parse("\n  y = 1")[0]
        assert (statement.location.line, statement.location.column) == (2, 3)


# =============================================================================
# Precedence and Associativity Tests
# =============================================================================

class TestExpressions:
    """Tests for the two-tier precedence and left-associativity."""

    def test_multiplication_binds_tighter(self):
        assert shapes("x = 2 + 3 * 4") == [("=", "x", ("+", "2", ("*", "3", "4")))]

    def test_multiplication_first(self):
        assert shapes("x = 2 * 3 + 4") == [("=", "x", ("+", ("*", "2", "3"), "4"))]

    def test_subtraction_left_associative(self):
        assert shapes("x = 10 - 3 - 2") == [("=", "x", ("-", ("-", "10", "3"), "2"))]

    def test_division_left_associative(self):
        assert shapes("x = 8 / 4 / 2") == [("=", "x", ("/", ("/", "8", "4"), "2"))]

    def test_mixed_multiplicative(self):
        assert shapes("x = 7 % 4 * 2 / 3") == [
            ("=", "x", ("/", ("*", ("%", "7", "4"), "2"), "3"))
        ]

    def test_operator_token_kept(self):
        expr = parse("1 % 2")[0]
        assert expr.operator.type == TokenType.MOD


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Syntax errors are collected and raised as one ParseError."""

    def test_bad_token_in_expression(self):
        with pytest.raises(ParseError) as exc_info:
            parse("x = $")
        errors = exc_info.value.errors
        assert len(errors) == 1
        assert isinstance(errors[0], UnexpectedTokenError)
        assert "BAD" in str(errors[0])

    def test_error_names_token_kind(self):
        with pytest.raises(ParseError, match="unexpected token PLUS"):
            parse("+ 1")

    def test_missing_operand_at_end(self):
        with pytest.raises(ParseError) as exc_info:
            parse("x = 1 +")
        assert isinstance(exc_info.value.errors[0], MissingTokenError)

    def test_assignment_without_value(self):
        with pytest.raises(ParseError) as exc_info:
            parse("x =")
        assert isinstance(exc_info.value.errors[0], MissingTokenError)

    def test_identifier_followed_by_bad_token(self):
        """An identifier followed by a token with no dispatch rule is rejected."""
        with pytest.raises(ParseError) as exc_info:
            parse("x $")
        error = exc_info.value.errors[0]
        assert isinstance(error, UnexpectedTokenError)
        assert error.location.column == 3

    def test_double_equals_rejected(self):
        with pytest.raises(ParseError):
            parse("x = = 1")

    def test_multiple_errors_reported(self):
        with pytest.raises(ParseError) as exc_info:
            parse("x = $\ny = 2\nz = ?")
        assert len(exc_info.value.errors) == 2
        assert "2 errors" in str(exc_info.value)

    def test_recovery_keeps_following_statement(self):
        """After an error the parser resumes at the next statement start."""
        parser = Parser(Lexer("x = $ puts 1").tokenize())
        with pytest.raises(ParseError):
            parser.parse()
        assert len(parser.errors) == 1

    def test_max_errors_stops_parsing(self):
        tokens = Lexer("$ 1 $ 2 $ 3").tokenize()
        parser = Parser(tokens, max_errors=2)
        with pytest.raises(ParseError):
            parser.parse()
        assert len(parser.errors) == 2

    def test_error_message_has_source_context(self):
        tokens = Lexer("x = 1\ny = $", "prog.rb").tokenize()
        parser = Parser(tokens, "prog.rb", ["x = 1", "y = $"])
        with pytest.raises(ParseError) as exc_info:
            parser.parse()
        text = str(exc_info.value.errors[0])
        assert text.startswith("prog.rb:2:5: error:")
        assert "    y = $" in text
        assert "hint: expected an integer or identifier" in text


# =============================================================================
# AST Printer Tests
# =============================================================================

class TestASTPrinter:

    def test_print_assignment(self):
        text = ASTPrinter().print(parse("x = 1 + y"))
        assert text.splitlines() == [
            "Assignment:",
            "  Identifier: x",
            "  Binary expression:",
            "    Operator: +",
            "    Integer literal: 1",
            "    Identifier literal: y",
        ]

    def test_print_method_call(self):
        text = ASTPrinter().print(parse("puts 3"))
        assert text.splitlines() == [
            "Method call:",
            "  Name: puts",
            "  Integer literal: 3",
        ]

    def test_print_empty(self):
        assert ASTPrinter().print([]) == ""
