# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from typing import Optional, Tuple, Union

from .err import MalformedStream

Buffer = Union[bytes, bytearray]
"""Buffer is any byte container with ``find`` support, which can be decoded by a :py:class:`Cursor`."""


def read_unsigned_varint(buf: Buffer, offset: int = 0, end: Optional[int] = None) -> Tuple[int, int]:
    """read_unsigned_varint decodes an unsigned o5m varint starting at ``buf[offset]``.

    Every byte contributes its 7 low bits, least significant group first;
    a byte with the high bit clear terminates the number.

    Returns a tuple of (value, bytes_consumed). Raises :py:exc:`MalformedStream`
    if the number doesn't terminate before ``end`` (defaults to ``len(buf)``).
    """
    if end is None:
        end = len(buf)

    value = 0
    shift = 0
    pos = offset
    while True:
        if pos >= end:
            raise MalformedStream("varint runs past the end of the dataset")
        b = buf[pos]
        pos += 1
        value |= (b & 0x7F) << shift
        if b & 0x80 == 0:
            return value, pos - offset
        shift += 7


def read_signed_varint(buf: Buffer, offset: int = 0, end: Optional[int] = None) -> Tuple[int, int]:
    """read_signed_varint decodes a signed o5m varint starting at ``buf[offset]``.

    The lowest bit of the raw number is the sign. Non-negative numbers are stored as
    ``value << 1``, while negative numbers as ``((-1 - value) << 1) | 1``.

    Returns a tuple of (value, bytes_consumed).
    """
    raw, consumed = read_unsigned_varint(buf, offset, end)
    if raw & 1:
        return -1 - (raw >> 1), consumed
    return raw >> 1, consumed


def to_int32(value: int) -> int:
    """to_int32 wraps an integer into the signed 32-bit range, like a C cast would."""
    return ((value + 0x8000_0000) & 0xFFFF_FFFF) - 0x8000_0000


class Cursor:
    """Cursor reads o5m primitives from a single, already-buffered dataset.

    Only the ``buf[pos:end]`` slice is available; attempts to read past ``end``
    raise :py:exc:`MalformedStream`.
    """

    __slots__ = ("buf", "pos", "end")

    def __init__(self, buf: Buffer, pos: int = 0, end: Optional[int] = None) -> None:
        self.buf = buf
        self.pos = pos
        self.end = len(buf) if end is None else end

    @property
    def remaining(self) -> int:
        """remaining returns the number of bytes left in the dataset."""
        return self.end - self.pos

    def read_byte(self) -> int:
        if self.pos >= self.end:
            raise MalformedStream("unexpected end of dataset")
        b = self.buf[self.pos]
        self.pos += 1
        return b

    def read_bytes(self, n: int) -> bytes:
        if self.pos + n > self.end:
            raise MalformedStream(f"expected {n} more bytes in dataset, got {self.remaining}")
        data = bytes(self.buf[self.pos : self.pos + n])
        self.pos += n
        return data

    def read_unsigned(self) -> int:
        value, consumed = read_unsigned_varint(self.buf, self.pos, self.end)
        self.pos += consumed
        return value

    def read_signed(self) -> int:
        value, consumed = read_signed_varint(self.buf, self.pos, self.end)
        self.pos += consumed
        return value

    def read_string(self) -> str:
        """read_string reads a UTF-8 string terminated by a zero byte.
        The terminator is consumed, but not included in the result."""
        terminator = self.buf.find(0, self.pos, self.end)
        if terminator < 0:
            raise MalformedStream("unterminated string in dataset")
        s = bytes(self.buf[self.pos : terminator]).decode("utf-8", errors="replace")
        self.pos = terminator + 1
        return s
