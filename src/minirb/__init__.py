"""
minirb - A Tiny Expression Language and Bytecode VM
===================================================

This package implements a small language front-end and execution
engine. Source text goes through four stages:

    Source → Lexer → Parser → AST → Bytecode Compiler → Bytecode → VM

Main Components
---------------
- **lexer**: converts source text into tokens
- **parser**: recursive descent parser producing AST statements
- **compiler**: lowers the AST to a flat stack-machine bytecode
- **vm**: executes bytecode with a runtime stack and a variable store
- **interpreter**: drives the whole pipeline and reports a status

The Language
------------
    x = 40 + 2      # assignment; the right side is an expression
    puts x          # method call without parentheses
    y = x * 2 - 1   # * / % bind tighter than + -

Values are integers; identifiers start with a lowercase letter. The only
method is `puts`.

Quick Start
-----------
    >>> from minirb import run_source
    >>> result = run_source("a = 5 b = a + 2 puts b")
    >>> result.output
    ['7']

Or use the command-line tool:
    $ minirb program.rb --dump=compiler
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from minirb.errors import (
    MinirbError,
    SourceLocation,
    LanguageError,
    MinirbSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    ParseError,
    CompileError,
    UnknownOperatorError,
    UnknownNodeError,
    MinirbRuntimeError,
    UnknownMethodError,
    DivisionByZeroError,
    ModuloByZeroError,
    UnknownOpcodeError,
    MissingOperandError,
    StackUnderflowError,
)
from minirb.lexer import Lexer, Token, TokenType, tokenize
from minirb.ast import (
    ASTNode,
    IntegerLiteral,
    IdentifierLiteral,
    BinaryExpression,
    MethodCall,
    AssignmentStatement,
    ASTPrinter,
)
from minirb.parser import Parser, parse_source
from minirb.bytecode import Opcode, Program, BytecodeDisassembler
from minirb.compiler import BytecodeCompiler, compile_statements
from minirb.vm import VirtualMachine, Locals, RawText, Integer, Identifier
from minirb.status import InterpreterResult
from minirb.interpreter import Interpreter, InterpreterOptions, RunResult, run_source

__all__ = [
    # Version
    "__version__",
    # Errors
    "MinirbError",
    "SourceLocation",
    "LanguageError",
    "MinirbSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "ParseError",
    "CompileError",
    "UnknownOperatorError",
    "UnknownNodeError",
    "MinirbRuntimeError",
    "UnknownMethodError",
    "DivisionByZeroError",
    "ModuloByZeroError",
    "UnknownOpcodeError",
    "MissingOperandError",
    "StackUnderflowError",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # AST
    "ASTNode",
    "IntegerLiteral",
    "IdentifierLiteral",
    "BinaryExpression",
    "MethodCall",
    "AssignmentStatement",
    "ASTPrinter",
    # Parser
    "Parser",
    "parse_source",
    # Bytecode
    "Opcode",
    "Program",
    "BytecodeDisassembler",
    "BytecodeCompiler",
    "compile_statements",
    # VM
    "VirtualMachine",
    "Locals",
    "RawText",
    "Integer",
    "Identifier",
    # Pipeline
    "InterpreterResult",
    "Interpreter",
    "InterpreterOptions",
    "RunResult",
    "run_source",
]
