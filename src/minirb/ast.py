"""
minirb Abstract Syntax Tree (AST) Definitions
=============================================

This module defines the AST node types produced by the minirb parser
and consumed by the bytecode compiler.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions
│   ├── IntegerLiteral - integer constant, kept as source text
│   ├── IdentifierLiteral - variable reference or bare argument
│   └── BinaryExpression - binary operators + - * / %
└── Statements
    ├── MethodCall - `name argument` (e.g. `puts x`)
    └── AssignmentStatement - `name = expression`

A program is a plain list of top-level nodes in source order. Any
node may appear at the top level: a bare expression is a statement too.

Design Notes
------------
- All nodes are dataclasses; each owns its children exclusively
- Each node stores its source location for error reporting
- Locations are excluded from equality, so trees can be compared
  structurally in tests
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from minirb.errors import SourceLocation
from minirb.lexer import Token


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears
    """
    location: Optional[SourceLocation] = field(default=None, compare=False, kw_only=True)


@dataclass
class Expression(ASTNode):
    """Base class for nodes that produce a value."""
    pass


@dataclass
class Statement(ASTNode):
    """Base class for nodes executed for their effect."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class IntegerLiteral(Expression):
    """
    Integer constant.

    The value stays as unparsed text until the VM coerces it, so
    `x = 007` followed by `puts x` prints `007`.

    Attributes:
        value: The digits exactly as written
    """
    value: str


@dataclass
class IdentifierLiteral(Expression):
    """
    Identifier reference.

    Attributes:
        name: The identifier text
    """
    name: str


@dataclass
class BinaryExpression(Expression):
    """
    Binary operation expression (a op b).

    Attributes:
        left: Left operand expression
        right: Right operand expression
        operator: The operator token (PLUS, MINUS, STAR, SLASH or MOD)
    """
    left: ASTNode
    right: ASTNode
    operator: Token


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class MethodCall(Statement):
    """
    Method call without parentheses: `puts x + 1`.

    Attributes:
        name: The method name
        arguments: Argument expressions, in order
    """
    name: str
    arguments: list[ASTNode] = field(default_factory=list)


@dataclass
class AssignmentStatement(Statement):
    """
    Assignment to a variable: `x = 1 + 2`.

    Attributes:
        identifier: The variable being assigned
        expression: The value expression
    """
    identifier: str
    expression: ASTNode


# =============================================================================
# Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about.

    Usage:
        class MyVisitor(ASTVisitor):
            def visit_MethodCall(self, node):
                ...

        visitor = MyVisitor()
        for statement in statements:
            visitor.visit(statement)
    """

    def visit(self, node: ASTNode) -> Any:
        """
        Visit a node by dispatching to the appropriate method.

        Args:
            node: The AST node to visit

        Returns:
            The result of the visit method (varies by node type)
        """
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes of a node without a dedicated method."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(statements))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, statements: list[ASTNode]) -> str:
        """Print a statement list and return it as a string."""
        self.output = []
        self.indent_level = 0
        for statement in statements:
            self.visit(statement)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def visit_IntegerLiteral(self, node: IntegerLiteral):
        self._emit(f"Integer literal: {node.value}")

    def visit_IdentifierLiteral(self, node: IdentifierLiteral):
        self._emit(f"Identifier literal: {node.name}")

    def visit_AssignmentStatement(self, node: AssignmentStatement):
        self._emit("Assignment:")
        self._indent()
        self._emit(f"Identifier: {node.identifier}")
        self.visit(node.expression)
        self._dedent()

    def visit_MethodCall(self, node: MethodCall):
        self._emit("Method call:")
        self._indent()
        self._emit(f"Name: {node.name}")
        for argument in node.arguments:
            self.visit(argument)
        self._dedent()

    def visit_BinaryExpression(self, node: BinaryExpression):
        self._emit("Binary expression:")
        self._indent()
        self._emit(f"Operator: {node.operator.value}")
        self.visit(node.left)
        self.visit(node.right)
        self._dedent()

    def generic_visit(self, node: ASTNode) -> None:
        self._emit(f"Unknown statement: {type(node).__name__}")
