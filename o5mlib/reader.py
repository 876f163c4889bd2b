# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

import bz2
import gzip
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import IO, Iterable, Iterator, List, Literal, Optional, Tuple

from typing_extensions import Self

from .decoder import Decoder
from .model import Bounds, Node, Record, Relation, Way
from .protocols import CancelToken, FeatureSink

FILE_FORMAT_T = Optional[Literal["o5m", "o5c", "gz", "bz2"]]
"""Type of the ``format`` argument of :py:func:`read_records`.

Useful when passing this argument forward from custom functions.
"""

DEFAULT_FILE_FORMAT = None
"""Default value for the ``format`` argument of :py:func:`read_records`.

Useful when passing this argument forward from custom functions.
"""


@contextmanager
def _open_stream(buf: IO[bytes], format: FILE_FORMAT_T) -> Iterator[IO[bytes]]:
    name = getattr(buf, "name", None)
    if not isinstance(name, str):
        name = ""

    if format == "gz" or (format is None and name.endswith(".gz")):
        with gzip.open(buf, mode="rb") as decompressed_buffer:
            yield decompressed_buffer  # type: ignore
    elif format == "bz2" or (format is None and name.endswith(".bz2")):
        with bz2.open(buf, mode="rb") as decompressed_buffer:
            yield decompressed_buffer  # type: ignore
    else:
        yield buf


def decode(buf: IO[bytes], sink: FeatureSink, cancel: Optional[CancelToken] = None) -> None:
    """decode runs a single :py:class:`Decoder` session over an uncompressed o5m/o5c stream,
    passing all records to the provided ``sink``."""
    Decoder(buf, sink, cancel).run()


@dataclass
class _BufferingSink:
    ready: List[Record] = field(default_factory=list)

    def accept_node(self, node: Node) -> None:
        self.ready.append(node)

    def accept_way(self, way: Way) -> None:
        self.ready.append(way)

    def accept_relation(self, relation: Relation) -> None:
        self.ready.append(relation)

    def accept_bounds(self, bounds: Bounds) -> None:
        self.ready.append(bounds)

    def mark_upload_discouraged(self) -> None:
        pass


def read_records(
    buf: IO[bytes],
    format: FILE_FORMAT_T = DEFAULT_FILE_FORMAT,
    cancel: Optional[CancelToken] = None,
) -> Iterable[Record]:
    """read_records generates :py:obj:`Record` instances from a possibly-compressed
    `o5m <https://wiki.openstreetmap.org/wiki/O5m>`_ or o5c file.

    If ``format`` is not provided, this function will check if ``buf.name`` ends with
    ``.gz`` or ``.bz2`` to determine whether the provided buffer needs to be decompressed.
    Otherwise, the data is assumed to be uncompressed.

    Records are generated as soon as their dataset is decoded, so this function
    may be used on files which don't fit in memory. Use :py:meth:`DataSet.from_file`
    to also learn whether uploading the data should be discouraged.
    """
    with _open_stream(buf, format) as stream:
        sink = _BufferingSink()
        decoder = Decoder(stream, sink, cancel)
        decoder.start()
        while decoder.step():
            if sink.ready:
                yield from sink.ready
                sink.ready.clear()
        decoder.finish()


@dataclass
class DataSet:
    """DataSet is a :py:class:`FeatureSink` which collects all decoded records in memory."""

    nodes: List[Node] = field(default_factory=list)
    ways: List[Way] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    bounds: List[Bounds] = field(default_factory=list)

    upload_discouraged: bool = False
    """upload_discouraged is set if any feature had version 0 - the data doesn't come
    directly from the OSM database and shouldn't be uploaded back."""

    def accept_node(self, node: Node) -> None:
        self.nodes.append(node)

    def accept_way(self, way: Way) -> None:
        self.ways.append(way)

    def accept_relation(self, relation: Relation) -> None:
        self.relations.append(relation)

    def accept_bounds(self, bounds: Bounds) -> None:
        self.bounds.append(bounds)

    def mark_upload_discouraged(self) -> None:
        self.upload_discouraged = True

    @classmethod
    def from_file(
        cls,
        buf: IO[bytes],
        format: FILE_FORMAT_T = DEFAULT_FILE_FORMAT,
        cancel: Optional[CancelToken] = None,
    ) -> Self:
        """Creates a :py:class:`DataSet` with all records from a possibly-compressed o5m or o5c file.

        ``format`` is interpreted as in :py:func:`read_records`.
        """
        ds = cls()
        with _open_stream(buf, format) as stream:
            decode(stream, ds, cancel)
        return ds


def collect_all_features(
    buf: IO[bytes],
    format: FILE_FORMAT_T = DEFAULT_FILE_FORMAT,
) -> Tuple[List[Node], List[Way], List[Relation]]:
    """collect_all_features reads all features from a possibly-compressed o5m or o5c file.

    ``format`` is passed through to :py:meth:`DataSet.from_file`.
    """
    ds = DataSet.from_file(buf, format)
    return ds.nodes, ds.ways, ds.relations
