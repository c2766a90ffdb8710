"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the minirb CLI.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from minirb.status import InterpreterResult


class ExitCode(IntEnum):
    """Standard exit codes for the CLI."""
    SUCCESS = 0
    COMPILER_ERROR = 1   # Syntax or compilation error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error
    RUNTIME_ERROR = 4    # Program failed while executing

    @classmethod
    def from_status(cls, status: InterpreterResult) -> "ExitCode":
        """Map an interpreter status to the process exit code."""
        if status is InterpreterResult.OK:
            return cls.SUCCESS
        if status is InterpreterResult.COMPILER_ERROR:
            return cls.COMPILER_ERROR
        return cls.RUNTIME_ERROR


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Unified exception handler for the CLI.

    Formats the error message, optionally prints the traceback in verbose
    mode, and exits with the matching exit code. Language errors never
    get here; the interpreter reports them through its status.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, UnicodeDecodeError):
        click.echo(f"Error: source file is not valid UTF-8: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
