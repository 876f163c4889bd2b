# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

import bz2
import gzip
from io import BytesIO
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

from . import _test_builder as o5m
from .cancel import CancelFlag
from .err import Cancelled
from .model import Bounds, Metadata, Node, Relation, RelationMember, Way
from .reader import DataSet, collect_all_features, read_records

SIMPLE_DATA = o5m.stream(
    o5m.header(),
    o5m.bbox(21.0, 52.0, 21.1, 52.1),
    o5m.node(1, lon=210_100_000, lat=520_100_000, t=o5m.tags({"ref": "1"})),
    o5m.node(1, lon=100_000, lat=100_000, t=o5m.tags({"ref": "2"})),
    o5m.way(10, [1, 1], o5m.tags({"highway": "primary"})),
    o5m.relation(20, [o5m.member(10, b"1", "from"), o5m.member(0, b"0", "via")]),
)

SIMPLE_BOUNDS = Bounds(52.0, 21.0, 52.1, 21.1, "o5m")

SIMPLE_NODES = [
    Node(1, (52.01, 21.01), {"ref": "1"}, Metadata(1)),
    Node(2, (52.02, 21.02), {"ref": "2"}, Metadata(1)),
]

SIMPLE_WAYS = [Way(10, [1, 2], {"highway": "primary"}, Metadata(1))]

SIMPLE_RELATIONS = [
    Relation(
        20,
        [RelationMember("way", 10, "from"), RelationMember("node", 2, "via")],
        {},
        Metadata(1),
    ),
]


class TestReadRecords(TestCase):
    def test(self) -> None:
        records = list(read_records(BytesIO(SIMPLE_DATA)))
        self.assertListEqual(
            records,
            [SIMPLE_BOUNDS, *SIMPLE_NODES, *SIMPLE_WAYS, *SIMPLE_RELATIONS],
        )

    def test_gzip(self) -> None:
        records = list(read_records(BytesIO(gzip.compress(SIMPLE_DATA)), format="gz"))
        self.assertEqual(len(records), 5)

    def test_cancel(self) -> None:
        flag = CancelFlag()
        it = iter(read_records(BytesIO(SIMPLE_DATA), cancel=flag))

        self.assertEqual(next(it), SIMPLE_BOUNDS)
        flag.cancel()
        with self.assertRaises(Cancelled):
            next(it)


class TestDataSet(TestCase):
    def test(self) -> None:
        ds = DataSet.from_file(BytesIO(SIMPLE_DATA))

        self.assertListEqual(ds.bounds, [SIMPLE_BOUNDS])
        self.assertListEqual(ds.nodes, SIMPLE_NODES)
        self.assertListEqual(ds.ways, SIMPLE_WAYS)
        self.assertListEqual(ds.relations, SIMPLE_RELATIONS)
        self.assertFalse(ds.upload_discouraged)

    def test_upload_discouraged(self) -> None:
        ds = DataSet.from_file(BytesIO(o5m.stream(o5m.node(1, m=o5m.meta(0)))))
        self.assertTrue(ds.upload_discouraged)


class TestCollectAllFeatures(TestCase):
    def test_o5m(self) -> None:
        with TemporaryDirectory() as temp_dir_name:
            path = Path(temp_dir_name) / "data.o5m"
            path.write_bytes(SIMPLE_DATA)
            with path.open("rb") as f:
                nodes, ways, relations = collect_all_features(f)

        self.assertListEqual(nodes, SIMPLE_NODES)
        self.assertListEqual(ways, SIMPLE_WAYS)
        self.assertListEqual(relations, SIMPLE_RELATIONS)

    def test_bz2(self) -> None:
        with TemporaryDirectory() as temp_dir_name:
            path = Path(temp_dir_name) / "data.o5m.bz2"
            path.write_bytes(bz2.compress(SIMPLE_DATA))
            with path.open("rb") as f:
                nodes, ways, relations = collect_all_features(f)

        self.assertListEqual(nodes, SIMPLE_NODES)
        self.assertListEqual(ways, SIMPLE_WAYS)
        self.assertListEqual(relations, SIMPLE_RELATIONS)

    def test_gzip(self) -> None:
        with TemporaryDirectory() as temp_dir_name:
            path = Path(temp_dir_name) / "data.o5m.gz"
            path.write_bytes(gzip.compress(SIMPLE_DATA))
            with path.open("rb") as f:
                nodes, ways, relations = collect_all_features(f)

        self.assertListEqual(nodes, SIMPLE_NODES)
        self.assertListEqual(ways, SIMPLE_WAYS)
        self.assertListEqual(relations, SIMPLE_RELATIONS)
