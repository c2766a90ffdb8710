"""
minirb Bytecode Compiler
========================

Lowers the AST to the flat stack-machine bytecode described in
minirb.bytecode, using a post-order walk:

| Node                | Emitted slots                                   |
|---------------------|-------------------------------------------------|
| IntegerLiteral      | LITERAL, text                                   |
| IdentifierLiteral   | LITERAL, name                                   |
| BinaryExpression    | <left>, <right>, OP_*                           |
| MethodCall          | <arguments...>, LITERAL, name, METHOD_CALL      |
| AssignmentStatement | <expression>, LITERAL, identifier, SET_LOCAL    |

There are no optimization passes: output length is linear in the size
of the tree.

Each statement is compiled into a scratch buffer and only appended to
the program once it has compiled completely, so a failing statement
never leaves half its code behind. The first compiler error stops the
whole compilation.
"""

from typing import Optional
import logging

from minirb.ast import (
    ASTNode,
    ASTVisitor,
    AssignmentStatement,
    BinaryExpression,
    IdentifierLiteral,
    IntegerLiteral,
    MethodCall,
)
from minirb.bytecode import Opcode, Program, Slot
from minirb.errors import UnknownNodeError, UnknownOperatorError
from minirb.lexer import TokenType

logger = logging.getLogger(__name__)


# Operator token -> arithmetic opcode
BINARY_OPCODES: dict[TokenType, Opcode] = {
    TokenType.PLUS: Opcode.OP_PLUS,
    TokenType.MINUS: Opcode.OP_MINUS,
    TokenType.STAR: Opcode.OP_STAR,
    TokenType.SLASH: Opcode.OP_SLASH,
    TokenType.MOD: Opcode.OP_MOD,
}


class BytecodeCompiler(ASTVisitor):
    """
    Compiles a statement list to a Program.

    Usage:
        compiler = BytecodeCompiler()
        program = compiler.compile(statements)
        print(compiler.bytecode)

    Attributes:
        bytecode: Slots emitted by the last compile() call
    """

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self.bytecode: list[Slot] = []
        self._buffer: list[Slot] = []

    def compile(self, statements: list[Optional[ASTNode]]) -> Program:
        """
        Compile top-level statements in order.

        Args:
            statements: Parsed statements

        Returns:
            The compiled Program

        Raises:
            CompileError: If a node cannot be lowered
        """
        self.bytecode = []

        for statement in statements:
            self._buffer = []
            self.visit(statement)
            self.bytecode.extend(self._buffer)

        logger.debug(
            f"Compiled {len(statements)} statements into {len(self.bytecode)} slots"
        )
        return Program(bytecode=tuple(self.bytecode), filename=self.filename)

    def _emit(self, *slots: Slot) -> None:
        self._buffer.extend(slots)

    def visit(self, node: Optional[ASTNode]) -> None:
        if node is None:
            raise UnknownNodeError("None")
        super().visit(node)

    # =========================================================================
    # Node Lowering
    # =========================================================================

    def visit_IntegerLiteral(self, node: IntegerLiteral) -> None:
        self._emit(Opcode.LITERAL, node.value)

    def visit_IdentifierLiteral(self, node: IdentifierLiteral) -> None:
        self._emit(Opcode.LITERAL, node.name)

    def visit_BinaryExpression(self, node: BinaryExpression) -> None:
        self.visit(node.left)
        self.visit(node.right)

        opcode = BINARY_OPCODES.get(node.operator.type)
        if opcode is None:
            raise UnknownOperatorError(node.operator.describe(), node.location)

        self._emit(opcode)

    def visit_MethodCall(self, node: MethodCall) -> None:
        for argument in node.arguments:
            self.visit(argument)

        self._emit(Opcode.LITERAL, node.name)
        self._emit(Opcode.METHOD_CALL)

    def visit_AssignmentStatement(self, node: AssignmentStatement) -> None:
        self.visit(node.expression)

        self._emit(Opcode.LITERAL, node.identifier)
        self._emit(Opcode.SET_LOCAL)

    def generic_visit(self, node: ASTNode) -> None:
        raise UnknownNodeError(type(node).__name__, getattr(node, "location", None))


def compile_statements(statements: list[ASTNode], filename: str = "<input>") -> list[Slot]:
    """Compile statements and return the raw bytecode list."""
    return list(BytecodeCompiler(filename).compile(statements).bytecode)
