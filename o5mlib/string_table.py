# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from typing import List, Optional, Tuple

from .err import MalformedStream

STRING_TABLE_SIZE = 15000
"""STRING_TABLE_SIZE is the number of string pairs remembered by o5m encoders and decoders."""

MAX_STRING_PAIR_SIZE = 250 + 2
"""MAX_STRING_PAIR_SIZE is the maximum encoded length (including both zero terminators)
of a string pair which may be stored in the string table. Longer pairs are never referenced.
"""

StringPair = Tuple[str, str]


class StringTable:
    """StringTable is the ring buffer of recently seen string pairs.

    Pairs are referenced by their backward distance from the most recently
    stored pair: distance 1 is the last stored pair, distance 2 the one
    before it, and so on. Once the table is full, the oldest pairs are overwritten.
    """

    size: int
    _pairs: List[Optional[StringPair]]
    _pos: int

    def __init__(self, size: int = STRING_TABLE_SIZE) -> None:
        self.size = size
        self.clear()

    def clear(self) -> None:
        self._pairs = [None] * self.size
        self._pos = 0

    def store(self, pair: StringPair, encoded_size: int) -> bool:
        """store appends a pair to the table, unless its ``encoded_size`` exceeds
        :py:const:`MAX_STRING_PAIR_SIZE`. Returns whether the pair was stored.
        """
        if encoded_size > MAX_STRING_PAIR_SIZE:
            return False

        self._pairs[self._pos] = pair
        self._pos += 1
        if self._pos >= self.size:
            self._pos = 0
        return True

    def resolve(self, distance: int) -> StringPair:
        """resolve returns a pair stored ``distance`` pairs ago.

        Well-formed streams only use distances from 1 up to the number of pairs
        stored since the last reset (at most :py:attr:`size`). Larger distances are not
        detected once the table has wrapped around - an older, overwritten pair is returned.
        """
        pair = self._pairs[(self._pos - distance) % self.size]
        if pair is None:
            raise MalformedStream(f"string reference {distance} points to an empty table slot")
        return pair
