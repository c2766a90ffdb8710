"""
minirb Error Hierarchy
======================

This module defines the exception hierarchy for the minirb interpreter.
All exceptions inherit from MinirbError, allowing callers to catch all
interpreter errors with a single except clause if desired.

Exception Hierarchy
-------------------
MinirbError (base)
└── LanguageError (errors tied to a source program)
    ├── MinirbSyntaxError - parser syntax errors
    │   ├── UnexpectedTokenError - token not allowed at this position
    │   └── MissingTokenError - input ended where a token was required
    ├── ParseError - aggregate report of all collected syntax errors
    ├── CompileError - AST cannot be lowered to bytecode
    │   ├── UnknownOperatorError - binary operator without an opcode
    │   └── UnknownNodeError - node type the compiler does not know
    └── MinirbRuntimeError - execution errors raised by the VM
        ├── UnknownMethodError - call to a method other than puts
        ├── DivisionByZeroError - '/' with a zero right operand
        ├── ModuloByZeroError - '%' with a zero right operand
        ├── UnknownOpcodeError - bytecode slot that is not an opcode
        ├── MissingOperandError - LITERAL at the end of the program
        └── StackUnderflowError - pop from an empty runtime stack

Error Message Format
--------------------
Errors with source information follow this format:

    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing

Example:
    hello.rb:2:7: error: unexpected token BAD '$'
        x = 1 $ 2
              ^
    hint: expected an integer or identifier
"""

from dataclasses import dataclass
from typing import List, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class MinirbError(Exception):
    """
    Base exception for all minirb errors.

    All exceptions in the package inherit from this class, allowing
    callers to catch every interpreter error with a single except clause:

        try:
            parse_source(source)
        except MinirbError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Tokens and AST nodes carry one of these so that every diagnostic
    can point back to the offending spot in the source file.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Language Errors
# =============================================================================

class LanguageError(MinirbError):
    """
    Base exception for errors tied to a source program.

    Provides common message formatting with source location, source line
    context and an optional hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            hello.rb:3:5: error: unexpected token BAD '?'
                x = ?
                    ^
            hint: expected an integer or identifier
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Syntax Errors (Parser)
# =============================================================================

class MinirbSyntaxError(LanguageError):
    """
    Syntax error in source code.

    Raised by the parser when the token stream does not match the
    grammar.
    """
    pass


class UnexpectedTokenError(MinirbSyntaxError):
    """
    Unexpected token during parsing.

    Raised when the parser encounters a token that cannot appear at the
    current position, such as an operator or a bad token where an
    operand is required.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token {found}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(MinirbSyntaxError):
    """
    Required token is missing.

    Raised when the input ends where the grammar still requires a
    token, e.g. the right operand of `1 +`.
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected} but reached end of input",
            location=location,
            source_line=source_line,
        )


class ParseError(LanguageError):
    """
    Aggregate parse error containing every collected syntax error.

    The message is already a formatted report from ErrorCollector and
    is passed through without another prefix.
    """

    def __init__(self, message: str, errors: Optional[List[LanguageError]] = None):
        self.errors = list(errors or [])
        super().__init__(message)

    def _format_message(self) -> str:
        """Return message as-is - it's already a formatted aggregate report."""
        return self.message


# =============================================================================
# Compiler Errors
# =============================================================================

class CompileError(LanguageError):
    """
    Error lowering the AST to bytecode.

    Raised when the compiler meets a node or operator it cannot
    translate. Compilation of the run stops at the first one.
    """
    pass


class UnknownOperatorError(CompileError):
    """Binary expression whose operator token has no opcode."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
    ):
        self.operator = operator
        super().__init__(
            f"unknown binary operator {operator}",
            location=location,
            hint="supported operators are + - * / %",
        )


class UnknownNodeError(CompileError):
    """Statement or expression node the compiler cannot lower."""

    def __init__(self, node_type: str, location: Optional[SourceLocation] = None):
        self.node_type = node_type
        super().__init__(
            f"unknown statement type {node_type} in compiler",
            location=location,
        )


# =============================================================================
# Runtime Errors (VM)
# =============================================================================

class MinirbRuntimeError(LanguageError):
    """
    Error raised while executing bytecode.

    Execution halts at the failing instruction. Output already written
    and locals already set are left as they are.

    Attributes:
        pc: Program counter of the failing instruction (if known)
    """

    def __init__(self, message: str, pc: Optional[int] = None, hint: Optional[str] = None):
        self.pc = pc
        super().__init__(message, hint=hint)

    def _format_message(self) -> str:
        prefix = "runtime error"
        if self.pc is not None:
            prefix = f"runtime error at {self.pc:04d}"
        text = f"{prefix}: {self.message}"
        if self.hint:
            text += f"\nhint: {self.hint}"
        return text


class UnknownMethodError(MinirbRuntimeError):
    """Call to a method name with no builtin behind it."""

    def __init__(self, name: str, pc: Optional[int] = None):
        self.name = name
        super().__init__(
            f"unknown method '{name}'",
            pc=pc,
            hint="the only available method is 'puts'",
        )


class DivisionByZeroError(MinirbRuntimeError):
    """Integer division with a zero right operand."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__("division by zero", pc=pc)


class ModuloByZeroError(MinirbRuntimeError):
    """Integer modulo with a zero right operand."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__("modulo by zero", pc=pc)


class UnknownOpcodeError(MinirbRuntimeError):
    """Bytecode slot at an instruction position that is not an opcode."""

    def __init__(self, value: object, pc: Optional[int] = None):
        self.value = value
        super().__init__(f"unknown bytecode: {value!r}", pc=pc)


class MissingOperandError(MinirbRuntimeError):
    """LITERAL instruction with no operand slot after it."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__("LITERAL is missing its operand", pc=pc)


class StackUnderflowError(MinirbRuntimeError):
    """Pop from an empty runtime stack."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__("stack underflow", pc=pc)


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The parser uses this to keep going after a syntax error, so that
    one run reports every problem in the file rather than just the
    first one.

    Example:
        collector = ErrorCollector(max_errors=100)

        for statement in statements:
            try:
                handle(statement)
            except LanguageError as e:
                collector.add(e)
                if collector.should_stop():
                    break

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        self.errors: List[LanguageError] = []
        self.warnings: List[str] = []
        self.max_errors = max_errors

    def add(self, error: LanguageError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        return len(self.errors)

    def warning_count(self) -> int:
        return len(self.warnings)

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        for warning in self.warnings:
            lines.append(warning)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()

    def raise_if_errors(self) -> None:
        """Raise a ParseError if any errors were collected."""
        if self.has_errors():
            raise ParseError(self.report(), self.errors)
