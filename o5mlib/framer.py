# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from typing import IO

from .err import MalformedStream
from .varint import Cursor

DEFAULT_BUFFER_SIZE = 8192
"""DEFAULT_BUFFER_SIZE is the initial capacity of the dataset buffer. The buffer
grows automatically when a larger dataset is encountered."""

EOF_FLAG = -1
"""EOF_FLAG is returned by :py:meth:`Framer.read_type` when the stream is exhausted."""

_CHUNK_SIZE = 64 * 1024


class Framer:
    """Framer splits a raw o5m stream into datasets.

    Every dataset starts with a single type byte. Types below 0xF0 are followed by
    an unsigned varint length and that many bytes of payload, which are read
    in whole into an internal buffer before any decoding happens.

    The stream is only ever read forwards; it doesn't need to be seekable.
    """

    stream: IO[bytes]

    offset: int
    """offset is the total number of bytes consumed from the stream."""

    _buffer: bytearray

    def __init__(self, stream: IO[bytes], buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self.stream = stream
        self.offset = 0
        self._buffer = bytearray(buffer_size)

    def read_type(self) -> int:
        """read_type reads the next dataset type byte, or returns
        :py:const:`EOF_FLAG` if the stream has ended."""
        b = self.stream.read(1)
        if not b:
            return EOF_FLAG
        self.offset += 1
        return b[0]

    def read_length(self) -> int:
        """read_length reads an unsigned varint directly from the stream."""
        value = 0
        shift = 0
        while True:
            b = self.stream.read(1)
            if not b:
                raise MalformedStream(
                    f"unexpected end of stream in dataset length at offset {self.offset}"
                )
            self.offset += 1
            value |= (b[0] & 0x7F) << shift
            if b[0] & 0x80 == 0:
                return value
            shift += 7

    def read_payload(self, length: int) -> Cursor:
        """read_payload reads exactly ``length`` bytes from the stream and returns
        a :py:class:`Cursor` over them. The cursor is only valid until the next call.
        """
        # The buffer only ever grows by the bytes actually read, never by the declared length
        pos = 0
        while pos < length:
            chunk = self.stream.read(min(length - pos, _CHUNK_SIZE))
            if not chunk:
                raise MalformedStream(
                    f"unexpected end of stream: dataset declared {length} bytes, "
                    f"but only {pos} are available (offset {self.offset})"
                )
            self._buffer[pos : pos + len(chunk)] = chunk
            pos += len(chunk)
            self.offset += len(chunk)

        return Cursor(self._buffer, 0, length)

    def skip(self, length: int) -> None:
        """skip discards ``length`` bytes of the stream. The dataset length varint must have
        already been consumed by :py:meth:`read_length`."""
        while length > 0:
            chunk = self.stream.read(min(length, _CHUNK_SIZE))
            if not chunk:
                raise MalformedStream(
                    f"unexpected end of stream while skipping a dataset (offset {self.offset})"
                )
            length -= len(chunk)
            self.offset += len(chunk)
