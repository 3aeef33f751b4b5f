"""Segmented memory for the universal machine."""

from __future__ import annotations

import struct
from collections import deque
from collections.abc import Iterable
from typing import BinaryIO

_WORD = struct.Struct(">I")
_MASK = 0xFFFFFFFF


class ProgramFormatError(ValueError):
    """Raised when a program image is not a whole number of 32-bit words."""


def read_program(stream: BinaryIO) -> list[int]:
    """Read a program image from a binary stream as big-endian 32-bit words."""
    data = stream.read()
    if len(data) % _WORD.size:
        raise ProgramFormatError("Invalid .um file")
    return [word for (word,) in _WORD.iter_unpack(data)]


class Memory:
    """Segment 0 holds the running program; other segments are mapped on demand.

    Unmapped identifiers are queued and handed out again, oldest first,
    before any new identifier is allocated.
    """

    def __init__(self, program: Iterable[int]) -> None:
        self.segments: list[list[int]] = [[word & _MASK for word in program]]
        self.counter = 0
        self._unmapped: deque[int] = deque()

    @classmethod
    def from_bytes(cls, data: bytes) -> Memory:
        """Build memory whose segment 0 is the program image in ``data``."""
        if len(data) % _WORD.size:
            raise ProgramFormatError("Invalid .um file")
        return cls(word for (word,) in _WORD.iter_unpack(data))

    def fetch(self) -> int:
        """Return the word at the program counter and advance the counter."""
        try:
            word = self.segments[0][self.counter]
        except IndexError:
            raise IndexError(
                f"program counter {self.counter} is outside segment 0"
            ) from None
        self.counter += 1
        return word

    def get_word(self, segment: int, offset: int) -> int:
        """Return the word at ``offset`` in ``segment``."""
        return self.segments[segment][offset]

    def set_word(self, segment: int, offset: int, value: int) -> None:
        """Store ``value`` (truncated to 32 bits) at ``offset`` in ``segment``."""
        self.segments[segment][offset] = value & _MASK

    def map_segment(self, size: int) -> int:
        """Map a zero-filled segment of ``size`` words and return its identifier."""
        fresh = [0] * size
        if self._unmapped:
            index = self._unmapped.popleft()
            self.segments[index] = fresh
            return index
        self.segments.append(fresh)
        return len(self.segments) - 1

    def unmap_segment(self, segment: int) -> None:
        """Release ``segment`` so its identifier can be reused by a later mapping."""
        self._unmapped.append(segment)

    def load_program(self, segment: int, counter: int) -> None:
        """Replace segment 0 with a copy of ``segment`` and jump to ``counter``."""
        self.counter = counter
        if segment == 0:
            return
        self.segments[0] = list(self.segments[segment])