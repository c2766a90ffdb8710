"""
minirb - Command-Line Interface
===============================

Runs a minirb source file and optionally dumps the intermediate forms
produced by each pipeline stage.

Usage Examples
--------------
Run a program:
    $ minirb hello.rb

Show the tokens and the bytecode before running:
    $ minirb hello.rb --dump=lexer --dump=compiler

Trace every executed instruction:
    $ minirb hello.rb --dump=interpreter

Verbose logging:
    $ minirb -v hello.rb
"""

import logging
import sys
from pathlib import Path

import click

from minirb import __version__
from minirb.ast import ASTPrinter
from minirb.bytecode import BytecodeDisassembler
from minirb.cli.errors import ExitCode, handle_cli_exception
from minirb.interpreter import Interpreter, InterpreterOptions, RunResult

logger = logging.getLogger(__name__)


DUMP_CHOICES = ("lexer", "parser", "compiler", "interpreter")


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# Stage Dumps
# =============================================================================

def dump_tokens(result: RunResult) -> None:
    click.echo("\nLexer Tokens:")
    for token in result.tokens:
        click.echo(f"Token: {token.type.name}: {token.value}")


def dump_ast(result: RunResult) -> None:
    click.echo("\nParser AST:")
    text = ASTPrinter().print(result.statements)
    if text:
        click.echo(text)


def dump_bytecode(result: RunResult) -> None:
    click.echo("\nBytecode Program:")
    text = BytecodeDisassembler().disassemble_to_text(result.bytecode)
    if text:
        click.echo(text)


STAGE_DUMPS = {
    "lexer": dump_tokens,
    "parser": dump_ast,
    "compiler": dump_bytecode,
}


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "source_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--dump",
    "dumps",
    multiple=True,
    type=click.Choice(DUMP_CHOICES, case_sensitive=False),
    help="Print an intermediate form: lexer, parser, compiler, or "
         "interpreter (execution trace). Can be repeated.",
)
@click.option(
    "--max-errors",
    type=click.IntRange(min=1),
    default=100,
    show_default=True,
    help="Stop parsing after this many syntax errors",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="minirb")
def main(
    source_file: Path,
    dumps: tuple[str, ...],
    max_errors: int,
    verbose: bool,
) -> None:
    """
    Run a minirb program.

    SOURCE_FILE is the program to run.

    \b
    Examples:
        minirb hello.rb                    # Run the program
        minirb hello.rb --dump=lexer       # Show tokens first
        minirb hello.rb --dump=parser      # Show the AST first
        minirb hello.rb --dump=compiler    # Show the bytecode first
        minirb hello.rb --dump=interpreter # Trace execution

    \b
    Language:
        x = 1 + 2 * 3      assignment
        puts x             print a value
        + - * / %          integer arithmetic, no parentheses
    """
    setup_logging(verbose)
    selected = {d.lower() for d in dumps}

    def stage_hook(stage: str, result: RunResult) -> None:
        if stage in selected:
            STAGE_DUMPS[stage](result)

    options = InterpreterOptions(
        max_errors=max_errors,
        trace="interpreter" in selected,
        output=click.echo,
        trace_output=lambda line: click.echo(f"Trace: {line}"),
        stage_hook=stage_hook,
    )

    try:
        logger.debug(f"Running {source_file}")
        result = Interpreter(options).run_file(source_file)
    except Exception as e:
        handle_cli_exception(e, verbose)

    for warning in result.warnings:
        click.echo(warning, err=True)
    for error in result.errors:
        click.echo(str(error), err=True)

    click.echo("\nInterpreter finished execution.")
    click.echo(result.status.describe())

    sys.exit(ExitCode.from_status(result.status))


if __name__ == "__main__":
    main()
