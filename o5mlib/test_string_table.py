# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from unittest import TestCase

from .delta import MEMBER_UNKNOWN, DeltaState
from .err import MalformedStream
from .string_table import MAX_STRING_PAIR_SIZE, STRING_TABLE_SIZE, StringTable


class TestStringTable(TestCase):
    def test_resolve(self) -> None:
        t = StringTable()
        t.store(("highway", "primary"), 17)
        t.store(("name", "Main Street"), 18)

        self.assertEqual(t.resolve(1), ("name", "Main Street"))
        self.assertEqual(t.resolve(2), ("highway", "primary"))

    def test_wraparound(self) -> None:
        t = StringTable()
        for i in range(1, STRING_TABLE_SIZE + 2):
            t.store(("k", str(i)), 4)

        self.assertEqual(t.resolve(1), ("k", str(STRING_TABLE_SIZE + 1)))
        self.assertEqual(t.resolve(2), ("k", str(STRING_TABLE_SIZE)))
        self.assertEqual(t.resolve(STRING_TABLE_SIZE), ("k", "2"))

    def test_small_table(self) -> None:
        t = StringTable(3)
        for i in range(1, 6):
            t.store(("k", str(i)), 4)

        self.assertEqual(t.resolve(1), ("k", "5"))
        self.assertEqual(t.resolve(3), ("k", "3"))

    def test_oversized_not_stored(self) -> None:
        t = StringTable()
        self.assertTrue(t.store(("a", "b"), 4))
        self.assertTrue(t.store(("c", "d"), MAX_STRING_PAIR_SIZE))
        self.assertFalse(t.store(("e", "f"), MAX_STRING_PAIR_SIZE + 1))

        self.assertEqual(t.resolve(1), ("c", "d"))
        self.assertEqual(t.resolve(2), ("a", "b"))

    def test_empty_slot(self) -> None:
        t = StringTable()
        t.store(("a", "b"), 4)
        with self.assertRaises(MalformedStream):
            t.resolve(2)

    def test_clear(self) -> None:
        t = StringTable()
        t.store(("a", "b"), 4)
        t.clear()
        with self.assertRaises(MalformedStream):
            t.resolve(1)


class TestDeltaState(TestCase):
    def test_reset(self) -> None:
        s = DeltaState()
        s.node_id = 10
        s.way_id = 20
        s.relation_id = 30
        s.refs[MEMBER_UNKNOWN] = 5
        s.timestamp = 1700000000
        s.changeset = 42
        s.lon = -1
        s.lat = 1
        s.strings.store(("a", "b"), 4)

        s.reset()

        self.assertEqual(
            (s.node_id, s.way_id, s.relation_id, s.timestamp, s.changeset, s.lon, s.lat),
            (0, 0, 0, 0, 0, 0, 0),
        )
        self.assertListEqual(s.refs, [0, 0, 0, 0])
        with self.assertRaises(MalformedStream):
            s.strings.resolve(1)
