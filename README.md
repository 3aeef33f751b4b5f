# umachine

An interpreter for the Universal Machine: a small virtual machine with eight
32-bit registers, segmented memory and fourteen instructions.

## Installing

```
pip install .
```

## Running a program

Give the command one argument, the path to a program image:

```
umachine program.um
```

The image is a sequence of 32-bit big-endian words. The command exits with a
failure status and a message on standard error when it is given other than
one argument, when the file cannot be read, or when the file's length is not
a multiple of four bytes ("Invalid .um file"). Otherwise it loads the image
into segment 0 and runs it, reading input from standard input and writing
output to standard output, until a halt instruction is reached.

## Instructions

| Opcode | Name             | Effect                                                      |
|--------|------------------|-------------------------------------------------------------|
| 0      | conditional move | if `r[C] != 0` then `r[A] = r[B]`                           |
| 1      | segment load     | `r[A] = m[r[B]][r[C]]`                                      |
| 2      | segment store    | `m[r[A]][r[B]] = r[C]`                                      |
| 3      | add              | `r[A] = (r[B] + r[C]) mod 2^32`                             |
| 4      | multiply         | `r[A] = (r[B] * r[C]) mod 2^32`                             |
| 5      | divide           | `r[A] = r[B] // r[C]`                                       |
| 6      | nand             | `r[A] = ~(r[B] & r[C])`                                     |
| 7      | halt             | stop                                                        |
| 8      | map segment      | new zeroed segment of `r[C]` words; its id goes to `r[B]`   |
| 9      | unmap segment    | release segment `r[C]`                                      |
| 10     | output           | write byte `r[C]`                                           |
| 11     | input            | read a byte into `r[C]`; at end of input, `0xFFFFFFFF`      |
| 12     | load program     | copy segment `r[B]` into segment 0, jump to `r[C]`          |
| 13     | load value       | `r[A] = value` (25-bit immediate; A is in bits 25–27)       |

For every opcode but 13, A, B and C are bits 6–8, 3–5 and 0–2 of the word.
Opcodes 14 and 15 do nothing.

Released segment ids are reused, oldest first, before new ids are handed out.
Loading program 0 only moves the program counter.

Errors are raised as Python exceptions rather than checked by the machine:

- dividing by zero raises `ZeroDivisionError`;
- outputting a value above 255 raises `ValueError`;
- fetching past the end of segment 0, or reading or writing outside a
  segment, raises `IndexError`.

## Using it from Python

```python
import io
from umachine.machine import run, run_program
from umachine.memory import Memory
from umachine.ops import Machine, decode

# load value 65 into r1, output r1, halt
program = [0xD2000041, 0xA0000001, 0x70000000]

out = io.BytesIO()
machine = run_program(program, io.BytesIO(b""), out)
assert out.getvalue() == b"A"
assert machine.registers[1] == 65

# Or build the pieces yourself from a program image.
image = b"".join(word.to_bytes(4, "big") for word in program)
machine = Machine(Memory.from_bytes(image), io.BytesIO(b"input"), out)
run(machine)
```

- `umachine.machine.run_program(program, stdin=None, stdout=None)` accepts
  either a byte image or a sequence of words, runs it, and returns the
  halted `Machine`.
- `umachine.machine.run(machine)` runs a `Machine` until it halts.
- `umachine.ops.decode(word)` turns a 32-bit word into an `Instruction`
  (`opcode`, `a`, `b`, `c`, `value`); `Machine.execute(instruction)` carries
  it out and returns `False` on halt.
- `Machine` exposes `registers` and `memory` and one method per operation
  (`add`, `nand`, `map_segment`, `load_program`, …). When `stdin` or `stdout`
  is not given, the process's standard binary streams are used.
- `umachine.memory.Memory` holds the segments and program counter;
  `umachine.memory.read_program(stream)` reads an image from a binary stream.
  An image that is not a whole number of words raises
  `umachine.memory.ProgramFormatError`, a subclass of `ValueError`.

## Tests

```
pip install .[test]
pytest
```