"""
minirb Bytecode Format
======================

The compiler emits a flat list in which opcodes and operands are
interleaved positionally. There are no parallel arrays and no jumps.

Instruction Set
---------------
| Opcode      | Value | Operands | Stack effect                          |
|-------------|-------|----------|---------------------------------------|
| METHOD_CALL | 0     | -        | pop name, pop argument, call          |
| LITERAL     | 1     | text     | push operand                          |
| SET_LOCAL   | 2     | -        | pop name, pop value, bind             |
| OP_PLUS     | 3     | -        | pop right, pop left, push left + right|
| OP_MINUS    | 4     | -        | pop right, pop left, push left - right|
| OP_STAR     | 5     | -        | pop right, pop left, push left * right|
| OP_SLASH    | 6     | -        | pop right, pop left, push left // right|
| OP_MOD      | 7     | -        | pop right, pop left, push left % right|

LITERAL is the only instruction with an encoded operand and always
occupies two slots. Every other instruction occupies one slot.

Example
-------
`x = 1 + 2` compiles to:

    [LITERAL, "1", LITERAL, "2", OP_PLUS, LITERAL, "x", SET_LOCAL]
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, Optional, Union


class Opcode(IntEnum):
    """Bytecode instructions understood by the VM."""

    METHOD_CALL = 0
    LITERAL = 1
    SET_LOCAL = 2

    OP_PLUS = 3
    OP_MINUS = 4
    OP_STAR = 5
    OP_SLASH = 6
    OP_MOD = 7

    @property
    def operand_count(self) -> int:
        """Number of operand slots following this opcode."""
        return 1 if self is Opcode.LITERAL else 0

    @property
    def size(self) -> int:
        """Total slots occupied by the instruction."""
        return 1 + self.operand_count


# A bytecode slot is either an opcode or a LITERAL operand
Slot = Union[Opcode, str]


@dataclass(frozen=True)
class Program:
    """
    Compiled program handed from the compiler to the VM.

    Attributes:
        bytecode: Interleaved opcodes and operands (read-only)
        filename: Source filename the program was compiled from
    """
    bytecode: tuple[Slot, ...] = field(default_factory=tuple)
    filename: str = "<input>"

    def __len__(self) -> int:
        return len(self.bytecode)

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.bytecode)

    def __getitem__(self, index):
        return self.bytecode[index]


# =============================================================================
# Disassembly
# =============================================================================

@dataclass
class Instruction:
    """
    One decoded instruction.

    Attributes:
        offset: Slot index of the opcode
        opcode: The decoded opcode, or None if the slot is not an opcode
        operand: LITERAL operand text, if any
        raw: The raw slot value
    """
    offset: int
    opcode: Optional[Opcode]
    operand: Optional[str] = None
    raw: object = None

    @property
    def size(self) -> int:
        if self.opcode is None:
            return 1
        return self.opcode.size

    def __str__(self) -> str:
        if self.opcode is None:
            return f"{self.offset:04d}  ??? {self.raw!r}"
        if self.opcode is Opcode.LITERAL:
            return f"{self.offset:04d}  {self.opcode.name:<12}{self.operand!r}"
        return f"{self.offset:04d}  {self.opcode.name}"


def decode_opcode(value: object) -> Optional[Opcode]:
    """Return the Opcode for a slot value, or None if it is not one."""
    if isinstance(value, Opcode):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return Opcode(value)
        except ValueError:
            return None
    return None


class BytecodeDisassembler:
    """
    Decodes a bytecode array into readable instructions.

    Usage:
        disasm = BytecodeDisassembler()
        print(disasm.disassemble_to_text(program))
    """

    def disassemble(self, bytecode) -> list[Instruction]:
        """
        Decode every instruction in order.

        Slots that are not opcodes are reported as unknown single-slot
        instructions instead of raising, so malformed arrays can still
        be inspected.
        """
        instructions = []
        pc = 0
        slots = list(bytecode)

        while pc < len(slots):
            raw = slots[pc]
            opcode = decode_opcode(raw)

            if opcode is Opcode.LITERAL:
                operand = slots[pc + 1] if pc + 1 < len(slots) else None
                instructions.append(Instruction(pc, opcode, operand, raw))
            else:
                instructions.append(Instruction(pc, opcode, None, raw))

            pc += instructions[-1].size

        return instructions

    def disassemble_to_text(self, bytecode) -> str:
        return "\n".join(str(inst) for inst in self.disassemble(bytecode))
