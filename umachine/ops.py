"""Instruction decoding and the operations of the universal machine."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO

from .memory import Memory

_MASK = 0xFFFFFFFF
_END_OF_INPUT = 0xFFFFFFFF
_REGISTER_COUNT = 8


class Opcode(IntEnum):
    """The fourteen operations a machine word can encode in its top four bits."""

    CONDITIONAL_MOVE = 0
    SEGMENT_LOAD = 1
    SEGMENT_STORE = 2
    ADD = 3
    MULTIPLY = 4
    DIVIDE = 5
    NAND = 6
    HALT = 7
    MAP_SEGMENT = 8
    UNMAP_SEGMENT = 9
    OUTPUT = 10
    INPUT = 11
    LOAD_PROGRAM = 12
    LOAD_VALUE = 13


_KNOWN_OPCODES = frozenset(int(op) for op in Opcode)


@dataclass(frozen=True)
class Instruction:
    """A decoded machine word.

    ``opcode`` is an :class:`Opcode` when the word names a known operation and
    a plain integer otherwise; unknown operations do nothing when executed.
    """

    opcode: int
    a: int = 0
    b: int = 0
    c: int = 0
    value: int = 0


def decode(word: int) -> Instruction:
    """Split a 32-bit word into its opcode, register fields and immediate value."""
    code = (word >> 28) & 0xF
    opcode = Opcode(code) if code in _KNOWN_OPCODES else code
    if opcode == Opcode.LOAD_VALUE:
        return Instruction(opcode, a=(word >> 25) & 0x7, value=word & 0x1FFFFFF)
    return Instruction(
        opcode, a=(word >> 6) & 0x7, b=(word >> 3) & 0x7, c=word & 0x7
    )


class Machine:
    """Eight 32-bit registers over a segmented memory, with byte-stream I/O.

    When ``stdin`` or ``stdout`` is omitted, the process's standard binary
    streams are used at the moment input or output happens.
    """

    def __init__(
        self,
        memory: Memory,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
    ) -> None:
        self.memory = memory
        self.registers: list[int] = [0] * _REGISTER_COUNT
        self._stdin = stdin
        self._stdout = stdout

    @property
    def stdin(self) -> BinaryIO:
        return self._stdin if self._stdin is not None else sys.stdin.buffer

    @property
    def stdout(self) -> BinaryIO:
        return self._stdout if self._stdout is not None else sys.stdout.buffer

    def conditional_move(self, a: int, b: int, c: int) -> None:
        """Copy register ``b`` into ``a`` when register ``c`` is non-zero."""
        if self.registers[c] != 0:
            self.registers[a] = self.registers[b]

    def segment_load(self, a: int, b: int, c: int) -> None:
        """Load the word at segment ``r[b]``, offset ``r[c]`` into register ``a``."""
        self.registers[a] = self.memory.get_word(self.registers[b], self.registers[c])

    def segment_store(self, a: int, b: int, c: int) -> None:
        """Store register ``c`` at segment ``r[a]``, offset ``r[b]``."""
        self.memory.set_word(self.registers[a], self.registers[b], self.registers[c])

    def add(self, a: int, b: int, c: int) -> None:
        """Set register ``a`` to the sum of ``b`` and ``c`` modulo 2**32."""
        self.registers[a] = (self.registers[b] + self.registers[c]) & _MASK

    def multiply(self, a: int, b: int, c: int) -> None:
        """Set register ``a`` to the product of ``b`` and ``c`` modulo 2**32."""
        self.registers[a] = (self.registers[b] * self.registers[c]) & _MASK

    def divide(self, a: int, b: int, c: int) -> None:
        """Set register ``a`` to ``b`` divided by ``c``, rounding down.

        Raises :class:`ZeroDivisionError` when register ``c`` is zero.
        """
        self.registers[a] = self.registers[b] // self.registers[c]

    def nand(self, a: int, b: int, c: int) -> None:
        """Set register ``a`` to the bitwise NAND of registers ``b`` and ``c``."""
        self.registers[a] = ~(self.registers[b] & self.registers[c]) & _MASK

    def map_segment(self, b: int, c: int) -> None:
        """Map a zeroed segment of ``r[c]`` words and put its identifier in ``b``."""
        self.registers[b] = self.memory.map_segment(self.registers[c])

    def unmap_segment(self, c: int) -> None:
        """Unmap the segment whose identifier is in register ``c``."""
        self.memory.unmap_segment(self.registers[c])

    def output(self, c: int) -> None:
        """Write register ``c`` as one byte; it must hold a value up to 255."""
        value = self.registers[c]
        if value > 0xFF:
            raise ValueError(f"cannot output {value:#x}: not a byte")
        self.stdout.write(bytes((value,)))

    def input(self, c: int) -> None:
        """Read one byte into register ``c``; at end of input store all ones."""
        if self._stdout is None:
            sys.stdout.flush()
        self.stdout.flush()
        data = self.stdin.read(1)
        self.registers[c] = data[0] if data else _END_OF_INPUT

    def load_program(self, b: int, c: int) -> None:
        """Replace segment 0 with a copy of segment ``r[b]`` and jump to ``r[c]``."""
        self.memory.load_program(self.registers[b], self.registers[c])

    def load_value(self, a: int, value: int) -> None:
        """Set register ``a`` to the immediate ``value``."""
        self.registers[a] = value & 0x1FFFFFF

    def execute(self, instruction: Instruction) -> bool:
        """Carry out one instruction; return False when it halts the machine."""
        a, b, c = instruction.a, instruction.b, instruction.c
        match instruction.opcode:
            case Opcode.CONDITIONAL_MOVE:
                self.conditional_move(a, b, c)
            case Opcode.SEGMENT_LOAD:
                self.segment_load(a, b, c)
            case Opcode.SEGMENT_STORE:
                self.segment_store(a, b, c)
            case Opcode.ADD:
                self.add(a, b, c)
            case Opcode.MULTIPLY:
                self.multiply(a, b, c)
            case Opcode.DIVIDE:
                self.divide(a, b, c)
            case Opcode.NAND:
                self.nand(a, b, c)
            case Opcode.HALT:
                return False
            case Opcode.MAP_SEGMENT:
                self.map_segment(b, c)
            case Opcode.UNMAP_SEGMENT:
                self.unmap_segment(c)
            case Opcode.OUTPUT:
                self.output(c)
            case Opcode.INPUT:
                self.input(c)
            case Opcode.LOAD_PROGRAM:
                self.load_program(b, c)
            case Opcode.LOAD_VALUE:
                self.load_value(a, instruction.value)
            case _:
                pass
        return True