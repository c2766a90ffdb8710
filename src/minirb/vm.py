"""
minirb Virtual Machine
======================

Executes the bytecode produced by minirb.compiler on a stack machine
with a single flat variable store.

Execution Model
---------------
A program counter indexes the bytecode array. Each step reads one
opcode, runs its handler and advances the counter by the slots the
instruction occupies (2 for LITERAL, 1 for everything else). The loop
stops at the end of the array or at the first runtime error. There are
no jumps, so every run terminates.

Stack Values
------------
Values on the runtime stack are untyped at the language level. They are
modelled as a tagged variant with three cases:

| Variant     | Produced by                    | Example           |
|-------------|--------------------------------|-------------------|
| RawText     | LITERAL with numeric text      | RawText("007")    |
| Identifier  | LITERAL with a name            | Identifier("x")   |
| Integer     | arithmetic instructions        | Integer(42)       |

Pull Semantics
--------------
Identifiers are bound late. An Identifier is only looked up in the
locals map when an arithmetic instruction or a method call pops it
("pulls" it). Bindings are stored raw, so `b = a` binds b to
Identifier("a"). A pull looks the name up once and never follows the
stored value further, so arithmetic on b coerces the text "a". A method
call looks its pulled argument up one more time, which makes `puts b`
print the value of a. An unbound name is used as literal text.

Integer Coercion
----------------
Arithmetic coerces both operands when they are consumed: an Integer is
used as is; text parses its leading optionally-signed decimal digits
and anything else is 0. Division floors and modulo takes the sign of
the divisor, the same as Python's `//` and `%`.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union
import logging
import re
import string

from minirb.bytecode import Instruction, Opcode, Program, decode_opcode
from minirb.errors import (
    DivisionByZeroError,
    MinirbRuntimeError,
    MissingOperandError,
    ModuloByZeroError,
    StackUnderflowError,
    UnknownMethodError,
    UnknownOpcodeError,
)
from minirb.status import InterpreterResult

logger = logging.getLogger(__name__)


# =============================================================================
# Stack Values
# =============================================================================

@dataclass(frozen=True)
class RawText:
    """Literal operand text not yet interpreted as a number."""
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Integer:
    """Result of an arithmetic instruction."""
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Identifier:
    """A name waiting to be resolved through the locals map."""
    name: str

    def __str__(self) -> str:
        return self.name


StackValue = Union[RawText, Integer, Identifier]

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def to_integer(value: StackValue) -> int:
    """
    Coerce a stack value to an integer.

    Text is read up to the first character that is not part of a
    leading decimal integer; text without one coerces to 0.
    """
    match value:
        case Integer(value=number):
            return number
        case RawText(text=text) | Identifier(name=text):
            found = _LEADING_INTEGER.match(text)
            return int(found.group(1)) if found else 0
    raise TypeError(f"not a stack value: {value!r}")


def to_text(value: StackValue) -> str:
    """Textual form used when a value is printed."""
    return str(value)


def literal_value(operand: object) -> StackValue:
    """Classify a LITERAL operand into a stack value."""
    if isinstance(operand, int) and not isinstance(operand, bool):
        return Integer(int(operand))
    text = str(operand)
    if text[:1] != "" and text[0] in string.ascii_letters:
        return Identifier(text)
    return RawText(text)


# =============================================================================
# Locals Store
# =============================================================================

class Locals:
    """
    The single flat variable store of one VM instance.

    Keys are identifier names; values are stored exactly as they were
    popped by SET_LOCAL (unresolved).
    """

    def __init__(self):
        self._bindings: dict[str, StackValue] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def get(self, name: str) -> Optional[StackValue]:
        return self._bindings.get(name)

    def set(self, name: str, value: StackValue) -> None:
        self._bindings[name] = value

    def resolve(self, value: StackValue) -> StackValue:
        """
        Resolve a value through the bindings (pull semantics).

        A bound Identifier is replaced by its stored value, which is
        returned as is. Anything else is returned unchanged.
        """
        if isinstance(value, Identifier) and value.name in self._bindings:
            return self._bindings[value.name]
        return value

    def as_dict(self) -> dict[str, StackValue]:
        """Copy of the current bindings."""
        return dict(self._bindings)

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v}" for k, v in self._bindings.items())
        return f"Locals({items})"


# =============================================================================
# Builtin Methods
# =============================================================================

def _builtin_puts(vm: "VirtualMachine", argument: StackValue) -> None:
    vm.output(to_text(argument))


BUILTINS: dict[str, Callable[["VirtualMachine", StackValue], None]] = {
    "puts": _builtin_puts,
}


# =============================================================================
# Virtual Machine
# =============================================================================

class VirtualMachine:
    """
    Stack-based bytecode interpreter.

    Usage:
        vm = VirtualMachine(program, output=lines.append)
        status = vm.interpret()
        if status is InterpreterResult.RUNTIME_ERROR:
            print(vm.error)

    Attributes:
        program: The program being executed
        output: Sink receiving one string per printed line
        trace: Optional sink receiving one line per executed instruction
        locals: The variable store
        stack: The runtime stack
        pc: Program counter (slot index)
        error: The runtime error that stopped the last run, if any
    """

    def __init__(
        self,
        program: Union[Program, list],
        output: Optional[Callable[[str], None]] = None,
        trace: Optional[Callable[[str], None]] = None,
    ):
        self.program = program
        self.bytecode = tuple(program)
        self.output = output or print
        self.trace = trace

        self.locals = Locals()
        self.stack: list[StackValue] = []
        self.pc = 0
        self.error: Optional[MinirbRuntimeError] = None

        self._handlers: dict[Opcode, Callable[[], None]] = {
            Opcode.LITERAL: self._op_literal,
            Opcode.METHOD_CALL: self._op_method_call,
            Opcode.SET_LOCAL: self._op_set_local,
            Opcode.OP_PLUS: self._op_plus,
            Opcode.OP_MINUS: self._op_minus,
            Opcode.OP_STAR: self._op_star,
            Opcode.OP_SLASH: self._op_slash,
            Opcode.OP_MOD: self._op_mod,
        }

    def interpret(self) -> InterpreterResult:
        """
        Run the program from the start until the end or a runtime error.

        Locals persist across calls on the same instance; the stack and
        program counter start fresh.

        Returns:
            InterpreterResult.OK or InterpreterResult.RUNTIME_ERROR
        """
        self.pc = 0
        self.stack = []
        self.error = None

        while self.pc < len(self.bytecode):
            try:
                self.step()
            except MinirbRuntimeError as e:
                self.error = e
                logger.debug(f"Execution stopped: {e}")
                return InterpreterResult.RUNTIME_ERROR

        logger.debug(f"Executed {len(self.bytecode)} slots, {len(self.locals)} locals bound")
        return InterpreterResult.OK

    def step(self) -> None:
        """
        Execute exactly one instruction.

        Raises:
            MinirbRuntimeError: If the instruction fails
        """
        raw = self.bytecode[self.pc]
        opcode = decode_opcode(raw)

        if opcode is None:
            pc = self.pc
            self.pc += 1
            raise UnknownOpcodeError(raw, pc=pc)

        if self.trace is not None:
            self._trace(opcode)

        self._handlers[opcode]()

    # =========================================================================
    # Stack Operations
    # =========================================================================

    def _push(self, value: StackValue) -> None:
        self.stack.append(value)

    def _pop(self) -> StackValue:
        if not self.stack:
            raise StackUnderflowError(pc=self.pc)
        return self.stack.pop()

    def _pull(self) -> StackValue:
        """Pop a value and resolve it through the locals map."""
        return self.locals.resolve(self._pop())

    def _trace(self, opcode: Opcode) -> None:
        operand = None
        if opcode is Opcode.LITERAL and self.pc + 1 < len(self.bytecode):
            operand = self.bytecode[self.pc + 1]
        stack = ", ".join(repr(str(v)) for v in self.stack)
        self.trace(f"{Instruction(self.pc, opcode, operand)}  [{stack}]")

    # =========================================================================
    # Instruction Handlers
    # =========================================================================

    def _op_literal(self) -> None:
        if self.pc + 1 >= len(self.bytecode):
            pc = self.pc
            self.pc += 1
            raise MissingOperandError(pc=pc)

        self._push(literal_value(self.bytecode[self.pc + 1]))
        self.pc += 2

    def _op_method_call(self) -> None:
        name = to_text(self._pop())
        # Arguments get a second lookup, so `b = a; puts b` prints a's value
        argument = self.locals.resolve(self._pull())

        method = BUILTINS.get(name)
        if method is None:
            raise UnknownMethodError(name, pc=self.pc)

        method(self, argument)
        self.pc += 1

    def _op_set_local(self) -> None:
        name = to_text(self._pop())
        value = self._pop()

        self.locals.set(name, value)
        self.pc += 1

    def _binary_operands(self) -> tuple[int, int]:
        right = self._pull()
        left = self._pull()
        return to_integer(left), to_integer(right)

    def _op_plus(self) -> None:
        left, right = self._binary_operands()
        self._push(Integer(left + right))
        self.pc += 1

    def _op_minus(self) -> None:
        left, right = self._binary_operands()
        self._push(Integer(left - right))
        self.pc += 1

    def _op_star(self) -> None:
        left, right = self._binary_operands()
        self._push(Integer(left * right))
        self.pc += 1

    def _op_slash(self) -> None:
        left, right = self._binary_operands()
        if right == 0:
            raise DivisionByZeroError(pc=self.pc)
        self._push(Integer(left // right))
        self.pc += 1

    def _op_mod(self) -> None:
        left, right = self._binary_operands()
        if right == 0:
            raise ModuloByZeroError(pc=self.pc)
        self._push(Integer(left % right))
        self.pc += 1


def execute(program: Union[Program, list], output: Optional[Callable[[str], None]] = None) -> InterpreterResult:
    """Run a program on a fresh VM and return its status."""
    return VirtualMachine(program, output=output).interpret()
