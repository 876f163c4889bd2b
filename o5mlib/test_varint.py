# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from unittest import TestCase

from . import _test_builder as o5m
from .err import MalformedStream
from .varint import Cursor, read_signed_varint, read_unsigned_varint, to_int32


class TestUnsignedVarint(TestCase):
    def test(self) -> None:
        self.assertEqual(read_unsigned_varint(b"\x05"), (5, 1))
        self.assertEqual(read_unsigned_varint(b"\x7f"), (127, 1))
        self.assertEqual(read_unsigned_varint(b"\xc3\x02"), (323, 2))
        self.assertEqual(read_unsigned_varint(b"\x80\x80\x01"), (16384, 3))

    def test_offset(self) -> None:
        self.assertEqual(read_unsigned_varint(b"\xff\xc3\x02\x00", 1), (323, 2))

    def test_truncated(self) -> None:
        with self.assertRaises(MalformedStream):
            read_unsigned_varint(b"\x80\x80")

    def test_respects_end(self) -> None:
        with self.assertRaises(MalformedStream):
            read_unsigned_varint(b"\xc3\x02", 0, 1)


class TestSignedVarint(TestCase):
    def test(self) -> None:
        self.assertEqual(read_signed_varint(b"\x08"), (4, 1))
        self.assertEqual(read_signed_varint(b"\x80\x01"), (64, 2))
        self.assertEqual(read_signed_varint(b"\x03"), (-2, 1))
        self.assertEqual(read_signed_varint(b"\x05"), (-3, 1))
        self.assertEqual(read_signed_varint(b"\x81\x01"), (-65, 2))

    def test_boundaries(self) -> None:
        for value in (0, -1, 1, -(2**31), 2**31 - 1, -(2**63) + 1):
            with self.subTest(value=value):
                encoded = o5m.signed(value)
                self.assertEqual(read_signed_varint(encoded), (value, len(encoded)))


class TestToInt32(TestCase):
    def test(self) -> None:
        self.assertEqual(to_int32(5), 5)
        self.assertEqual(to_int32(-5), -5)
        self.assertEqual(to_int32(2**31 - 1), 2**31 - 1)
        self.assertEqual(to_int32(2**31), -(2**31))
        self.assertEqual(to_int32(-(2**31) - 1), 2**31 - 1)


class TestCursor(TestCase):
    def test_reads(self) -> None:
        c = Cursor(b"\x05\x03foo\x00bar\x00\x2a")
        self.assertEqual(c.remaining, 11)
        self.assertEqual(c.read_unsigned(), 5)
        self.assertEqual(c.read_signed(), -2)
        self.assertEqual(c.read_string(), "foo")
        self.assertEqual(c.read_bytes(3), b"bar")
        self.assertEqual(c.read_byte(), 0)
        self.assertEqual(c.read_byte(), 0x2A)
        self.assertEqual(c.remaining, 0)

    def test_read_string_utf8(self) -> None:
        c = Cursor("Zażółć\x00".encode("utf-8"))
        self.assertEqual(c.read_string(), "Zażółć")
        self.assertEqual(c.remaining, 0)

    def test_unterminated_string(self) -> None:
        c = Cursor(b"foo\x00", 0, 3)
        with self.assertRaises(MalformedStream):
            c.read_string()

    def test_read_past_end(self) -> None:
        c = Cursor(bytearray(b"\x01\x02\x03"), 0, 1)
        self.assertEqual(c.read_byte(), 1)
        with self.assertRaises(MalformedStream):
            c.read_byte()
        with self.assertRaises(MalformedStream):
            c.read_unsigned()
        with self.assertRaises(MalformedStream):
            c.read_bytes(2)
