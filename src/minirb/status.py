"""
Run completion status shared by the VM and the interpreter pipeline.
"""

from enum import IntEnum


class InterpreterResult(IntEnum):
    """
    Overall outcome of one interpretation run.

    The numeric values are stable and match the exit classification
    printed by the command-line tool.
    """

    RUNTIME_ERROR = 0
    COMPILER_ERROR = 1
    OK = 2

    @property
    def ok(self) -> bool:
        return self is InterpreterResult.OK

    def describe(self) -> str:
        """Human-readable classification of the outcome."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    InterpreterResult.OK: "Execution finished successfully.",
    InterpreterResult.COMPILER_ERROR: "Execution failed due to a compiler error.",
    InterpreterResult.RUNTIME_ERROR: "Execution failed due to a runtime error.",
}
