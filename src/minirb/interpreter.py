"""
minirb Interpreter Pipeline
===========================

This module provides the main interface for running minirb programs.
It drives the four stages strictly in sequence:

    Source → Lex → Parse → Compile → Execute

Each stage runs to completion before the next starts and hands the next
one an immutable value: a token list, a statement list, a Program.

Usage
-----
Command line:
    $ minirb hello.rb

Programmatic:
    >>> from minirb import run_source
    >>> result = run_source("x = 2 + 3 * 4 puts x")
    >>> result.output
    ['14']
    >>> result.status
    <InterpreterResult.OK: 2>

Error Handling
--------------
Language errors never escape run_source(); they are mapped to a status:

| Failure                         | Status          | Later stages |
|---------------------------------|-----------------|--------------|
| syntax error (incl. BAD token)  | COMPILER_ERROR  | skipped      |
| AST node the compiler rejects   | COMPILER_ERROR  | skipped      |
| runtime error in the VM         | RUNTIME_ERROR   | -            |

Output printed before a runtime error is kept.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional
import logging

from minirb.ast import ASTNode
from minirb.bytecode import Program, Slot
from minirb.compiler import BytecodeCompiler
from minirb.errors import CompileError, LanguageError, ParseError
from minirb.lexer import Lexer, Token
from minirb.parser import Parser
from minirb.status import InterpreterResult
from minirb.vm import StackValue, VirtualMachine

logger = logging.getLogger(__name__)


# Pipeline stage names, in execution order
STAGES = ("lexer", "parser", "compiler", "interpreter")


@dataclass
class InterpreterOptions:
    """
    Interpreter configuration options.

    Attributes:
        max_errors: Maximum syntax errors collected before parsing stops
        trace: Report every executed instruction to trace_output
        output: Sink for lines printed by the program (default: print)
        trace_output: Sink for trace lines (default: print)
        stage_hook: Called as stage_hook(stage, result) after the lexer,
            parser and compiler stages complete, before the next one runs.
            The command-line tool uses this to dump intermediate forms.
    """
    max_errors: int = 100
    trace: bool = False
    output: Optional[Callable[[str], None]] = None
    trace_output: Optional[Callable[[str], None]] = None
    stage_hook: Optional[Callable[[str, "RunResult"], None]] = None


@dataclass
class RunResult:
    """
    Result of one interpretation run.

    Gives read access to every intermediate representation so that
    callers can inspect them without re-running any stage.

    Attributes:
        filename: Source filename
        status: Overall completion status
        tokens: Tokens from the lexer
        statements: Statements from the parser (empty if parsing failed)
        program: Compiled program (None if compilation did not complete)
        output: Lines printed by the program, in order
        locals: Variable bindings at the end of execution
        errors: Errors that stopped the run
        warnings: Lexer warnings (bad characters)
    """
    filename: str = "<input>"
    status: InterpreterResult = InterpreterResult.OK
    tokens: list[Token] = field(default_factory=list)
    statements: list[ASTNode] = field(default_factory=list)
    program: Optional[Program] = None
    output: list[str] = field(default_factory=list)
    locals: dict[str, StackValue] = field(default_factory=dict)
    errors: list[LanguageError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is InterpreterResult.OK

    @property
    def bytecode(self) -> list[Slot]:
        """The flat bytecode array (empty if compilation did not complete)."""
        if self.program is None:
            return []
        return list(self.program.bytecode)


class Interpreter:
    """
    Runs minirb source through the full pipeline.

    Example:
        interpreter = Interpreter()
        result = interpreter.run_file("hello.rb")
        print(result.status.describe())

    Attributes:
        options: Interpreter configuration options
    """

    def __init__(self, options: Optional[InterpreterOptions] = None):
        self.options = options or InterpreterOptions()

    def run_source(self, source: str, filename: str = "<input>") -> RunResult:
        """
        Lex, parse, compile and execute source code.

        Every call uses a fresh VM, so running the same source twice
        produces the same output.

        Args:
            source: minirb source code
            filename: Source filename for diagnostics

        Returns:
            RunResult with the status and all intermediate forms
        """
        result = RunResult(filename=filename)

        # Stage 1: Lexical analysis
        lexer = Lexer(source, filename)
        result.tokens = lexer.tokenize()
        result.warnings = list(lexer.warnings)
        self._stage_done("lexer", result)

        try:
            # Stage 2: Parsing
            parser = Parser(
                result.tokens,
                filename,
                source.splitlines(),
                max_errors=self.options.max_errors,
            )
            result.statements = parser.parse()
            self._stage_done("parser", result)

            # Stage 3: Bytecode compilation
            result.program = BytecodeCompiler(filename).compile(result.statements)
            self._stage_done("compiler", result)

        except ParseError as e:
            result.errors = list(e.errors) or [e]
            result.status = InterpreterResult.COMPILER_ERROR
            logger.debug(f"{filename}: parsing failed")
            return result
        except CompileError as e:
            result.errors = [e]
            result.status = InterpreterResult.COMPILER_ERROR
            logger.debug(f"{filename}: compilation failed")
            return result

        # Stage 4: Execution
        result.status = self.execute(result)
        return result

    def execute(self, result: RunResult) -> InterpreterResult:
        """Run the compiled program of a result on a fresh VM."""
        sink = self.options.output or print

        def emit(line: str) -> None:
            result.output.append(line)
            sink(line)

        trace = None
        if self.options.trace:
            trace = self.options.trace_output or print

        vm = VirtualMachine(result.program, output=emit, trace=trace)
        status = vm.interpret()

        result.locals = vm.locals.as_dict()
        if vm.error is not None:
            result.errors = [vm.error]

        return status

    def run_file(self, filepath) -> RunResult:
        """
        Run a source file.

        Raises:
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.run_source(source, str(filepath))

    def _stage_done(self, stage: str, result: RunResult) -> None:
        if self.options.stage_hook is not None:
            self.options.stage_hook(stage, result)


def run_source(
    source: str,
    filename: str = "<input>",
    output: Optional[Callable[[str], None]] = None,
) -> RunResult:
    """
    Run minirb source code and collect its output.

    Program output is captured in RunResult.output. By default it is not
    echoed anywhere else; pass `output=print` to also print it.
    """
    options = InterpreterOptions(output=output or (lambda line: None))
    return Interpreter(options).run_source(source, filename)
