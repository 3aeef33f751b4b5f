import io

import pytest

from umachine.memory import Memory
from umachine.ops import Instruction, Machine, Opcode, decode


def three_register(code, a, b, c):
    return (code << 28) | (a << 6) | (b << 3) | c


def make_machine(stdin=b""):
    out = io.BytesIO()
    machine = Machine(Memory([]), io.BytesIO(stdin), out)
    return machine, out


def test_opcode_numbers_fixed_by_format():
    assert decode(0x70000000).opcode == 7
    assert decode(0x70000000).opcode is Opcode.HALT
    assert decode(0xD0000000).opcode == 13
    assert decode(0xD0000000).opcode is Opcode.LOAD_VALUE


@pytest.mark.parametrize("code", [0, 1, 2, 3, 4, 5, 6, 8, 9, 10, 11, 12])
@pytest.mark.parametrize("a,b,c", [(0, 0, 0), (7, 3, 1), (2, 5, 6), (7, 7, 7)])
def test_decode_register_fields(code, a, b, c):
    instruction = decode(three_register(code, a, b, c))
    assert instruction == Instruction(Opcode(code), a, b, c)


def test_decode_halt_word():
    assert decode(0x70000000).opcode is Opcode.HALT


def test_decode_load_value():
    word = (13 << 28) | (5 << 25) | 0x1FFFFFF
    instruction = decode(word)
    assert instruction.opcode is Opcode.LOAD_VALUE
    assert instruction.a == 5
    assert instruction.value == 0x1FFFFFF


def test_decode_unknown_opcode_keeps_number():
    assert decode(14 << 28).opcode == 14


@pytest.mark.parametrize("condition,expected", [(0, 11), (1, 22)])
def test_conditional_move(condition, expected):
    machine, _ = make_machine()
    machine.registers[0] = 11
    machine.registers[1] = 22
    machine.registers[2] = condition
    machine.conditional_move(0, 1, 2)
    assert machine.registers[0] == expected


def test_add_wraps_around():
    machine, _ = make_machine()
    machine.registers[1] = 0xFFFFFFFF
    machine.registers[2] = 1
    machine.add(0, 1, 2)
    assert machine.registers[0] == 0


def test_multiply_then_divide_round_trip():
    machine, _ = make_machine()
    machine.registers[1] = 1234
    machine.registers[2] = 567
    machine.multiply(3, 1, 2)
    machine.divide(4, 3, 2)
    assert machine.registers[4] == 1234


def test_multiply_stays_within_32_bits():
    machine, _ = make_machine()
    machine.registers[1] = 0xFFFFFFFF
    machine.registers[2] = 0xFFFFFFFF
    machine.multiply(0, 1, 2)
    assert 0 <= machine.registers[0] <= 0xFFFFFFFF


def test_divide_rounds_down():
    machine, _ = make_machine()
    machine.registers[1] = 7
    machine.registers[2] = 2
    machine.divide(0, 1, 2)
    assert machine.registers[0] == 3


def test_divide_by_zero_raises():
    machine, _ = make_machine()
    machine.registers[1] = 5
    with pytest.raises(ZeroDivisionError):
        machine.divide(0, 1, 2)


@pytest.mark.parametrize("value", [0, 1, 0x12345678, 0xFFFFFFFF])
def test_nand_twice_restores_value(value):
    machine, _ = make_machine()
    machine.registers[1] = value
    machine.nand(2, 1, 1)
    machine.nand(3, 2, 2)
    assert machine.registers[3] == value


def test_nand_of_zero_is_all_ones():
    machine, _ = make_machine()
    machine.nand(0, 1, 2)
    assert machine.registers[0] == 0xFFFFFFFF


def test_map_store_load_round_trip():
    machine, _ = make_machine()
    machine.registers[1] = 3
    machine.map_segment(2, 1)
    segment = machine.registers[2]
    assert machine.memory.segments[segment] == [0, 0, 0]
    machine.registers[3] = 2
    machine.registers[4] = 0xCAFE
    machine.segment_store(2, 3, 4)
    machine.segment_load(5, 2, 3)
    assert machine.registers[5] == 0xCAFE


def test_unmapped_identifier_is_reused():
    machine, _ = make_machine()
    machine.registers[1] = 4
    machine.map_segment(2, 1)
    first = machine.registers[2]
    machine.unmap_segment(2)
    machine.map_segment(3, 1)
    assert machine.registers[3] == first


def test_output_writes_byte():
    machine, out = make_machine()
    machine.registers[6] = 65
    machine.output(6)
    assert out.getvalue() == bytes([65])


def test_output_rejects_value_over_a_byte():
    machine, _ = make_machine()
    machine.registers[0] = 256
    with pytest.raises(ValueError):
        machine.output(0)


def test_input_reads_byte():
    machine, _ = make_machine(b"\x9a")
    machine.input(4)
    assert machine.registers[4] == 0x9A


def test_input_at_end_stores_all_ones():
    machine, _ = make_machine(b"")
    machine.input(4)
    assert machine.registers[4] == 0xFFFFFFFF


def test_load_value_sets_register():
    machine, _ = make_machine()
    machine.load_value(7, 0x1FFFFFF)
    assert machine.registers[7] == 0x1FFFFFF


def test_load_program_copies_segment_and_jumps():
    machine, _ = make_machine()
    machine.registers[1] = 2
    machine.map_segment(2, 1)
    machine.memory.set_word(machine.registers[2], 1, 0x70000000)
    machine.registers[3] = 1
    machine.load_program(2, 3)
    assert machine.memory.counter == 1
    assert machine.memory.segments[0] == machine.memory.segments[machine.registers[2]]
    assert machine.memory.segments[0] is not machine.memory.segments[machine.registers[2]]


def test_execute_halt_returns_false():
    machine, _ = make_machine()
    assert machine.execute(decode(0x70000000)) is False


def test_execute_dispatches_load_value():
    machine, _ = make_machine()
    word = (13 << 28) | (2 << 25) | 77
    assert machine.execute(decode(word)) is True
    assert machine.registers[2] == 77


def test_execute_unknown_opcode_changes_nothing():
    machine, _ = make_machine()
    machine.registers[:] = list(range(8))
    assert machine.execute(decode(15 << 28 | 0x1FF)) is True
    assert machine.registers == list(range(8))