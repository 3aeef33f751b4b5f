"""Fetch-decode-execute loop and command-line entry point."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import BinaryIO

from .memory import Memory, ProgramFormatError, read_program
from .ops import Machine, decode


def run(machine: Machine) -> Machine:
    """Execute instructions from segment 0 until the machine halts."""
    memory = machine.memory
    while machine.execute(decode(memory.fetch())):
        pass
    return machine


def run_program(
    program: bytes | bytearray | Iterable[int],
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> Machine:
    """Run a program given as an image of bytes or as a sequence of words."""
    if isinstance(program, (bytes, bytearray, memoryview)):
        memory = Memory.from_bytes(bytes(program))
    else:
        memory = Memory(program)
    return run(Machine(memory, stdin, stdout))


def main(argv: list[str] | None = None) -> int:
    """Run the program image named on the command line."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Invalid argument amount", file=sys.stderr)
        return 1
    try:
        with open(args[0], "rb") as stream:
            program = read_program(stream)
    except OSError as error:
        print(f"cannot read {args[0]}: {error.strerror}", file=sys.stderr)
        return 1
    except ProgramFormatError as error:
        print(error, file=sys.stderr)
        return 1
    run(Machine(Memory(program)))
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())