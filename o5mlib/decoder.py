# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from logging import getLogger
from typing import IO, Callable, Dict, List, Optional, Tuple

from .delta import MEMBER_NODE, MEMBER_RELATION, MEMBER_UNKNOWN, MEMBER_WAY, DeltaState
from .err import (
    Cancelled,
    InvalidChangesetId,
    InvalidCoordinates,
    InvalidTimestamp,
    MalformedStream,
    UnsupportedHeader,
)
from .framer import EOF_FLAG, Framer
from .model import (
    Bounds,
    MemberType,
    Metadata,
    Node,
    Relation,
    RelationMember,
    User,
    Way,
    is_valid_lat,
    is_valid_lon,
)
from .protocols import CancelToken, FeatureSink, Position
from .string_table import STRING_TABLE_SIZE, StringPair, StringTable
from .varint import Cursor, to_int32

logger = getLogger("o5mlib.decoder")

NODE_DATASET = 0x10
WAY_DATASET = 0x11
RELATION_DATASET = 0x12
BBOX_DATASET = 0xDB
TIMESTAMP_DATASET = 0xDC
HEADER_DATASET = 0xE0
END_OF_DATA_FLAG = 0xFE
RESET_FLAG = 0xFF

SIZED_DATASET_LIMIT = 0xF0
"""Datasets with type bytes below SIZED_DATASET_LIMIT carry a length and a payload."""

SUPPORTED_HEADERS = (b"o5m2", b"o5c2")

COORDINATE_FACTOR = 1e-9
"""Coordinates are stored as integers in units of ``100 * COORDINATE_FACTOR`` degrees."""

COORDINATE_PRECISION = 7
"""Number of decimal places decoded coordinates are rounded to."""

MAX_CHANGESET_ID = 0x7FFF_FFFF

_MEMBER_TYPES: Tuple[MemberType, ...] = ("node", "way", "relation", "unknown")
_MEMBER_TYPE_CODES = ("node", "way", "relation", "?")
_MEMBER_TYPE_BY_INITIAL = {"n": MEMBER_NODE, "w": MEMBER_WAY, "r": MEMBER_RELATION}


def _descale(value: int) -> float:
    return round(value * 100 * COORDINATE_FACTOR, COORDINATE_PRECISION)


class Decoder:
    """Decoder runs a single decoding session over an o5m/o5c stream,
    passing every decoded record to a :py:class:`FeatureSink`.

    Usage::

        Decoder(stream, sink).run()

    The session is single-use: all of the delta-decoding state is bound to
    one pass over one stream. Any invalid data aborts the session by raising
    an :py:exc:`O5mError`; :py:exc:`Cancelled` is raised if ``cancel`` is set
    or the sink raises it.

    Deleted features (datasets with nothing but an id, or an id and a version)
    are silently skipped.
    """

    framer: Framer
    sink: FeatureSink
    cancel: Optional[CancelToken]
    state: DeltaState

    header: Optional[str]
    """header is the first 3 characters of the last header dataset, "o5m" or "o5c"."""

    upload_discouraged: bool
    """upload_discouraged is set if any decoded feature had version 0."""

    node_count: int
    way_count: int
    relation_count: int

    def __init__(
        self,
        stream: IO[bytes],
        sink: FeatureSink,
        cancel: Optional[CancelToken] = None,
        string_table_size: int = STRING_TABLE_SIZE,
    ) -> None:
        self.framer = Framer(stream)
        self.sink = sink
        self.cancel = cancel
        self.state = DeltaState(StringTable(string_table_size))
        self.header = None
        self.upload_discouraged = False
        self.node_count = 0
        self.way_count = 0
        self.relation_count = 0
        self._started = False
        self._handlers: Dict[int, Callable[[Cursor], None]] = {
            NODE_DATASET: self._decode_node,
            WAY_DATASET: self._decode_way,
            RELATION_DATASET: self._decode_relation,
            BBOX_DATASET: self._decode_bbox,
            TIMESTAMP_DATASET: self._decode_file_timestamp,
            HEADER_DATASET: self._decode_header,
        }

    def run(self) -> None:
        """run decodes the whole stream."""
        self.start()
        while self.step():
            pass
        self.finish()

    def start(self) -> None:
        """start verifies that the stream begins with the reset byte."""
        if self._started:
            raise RuntimeError("Decoder instances can only be used once")
        self._started = True

        first = self.framer.read_type()
        if first != RESET_FLAG:
            found = "end of stream" if first == EOF_FLAG else f"0x{first:02x}"
            raise MalformedStream(f"o5m stream must start with 0xff, got {found}")
        self.state.reset()

    def step(self) -> bool:
        """step decodes a single dataset. Returns False once
        the end of data (or end of stream) was reached."""
        if self.cancel is not None and self.cancel.is_cancelled():
            raise Cancelled(self.framer.offset)

        dataset_type = self.framer.read_type()
        if dataset_type == EOF_FLAG or dataset_type == END_OF_DATA_FLAG:
            return False

        elif dataset_type == RESET_FLAG:
            logger.debug("reset at stream offset %d", self.framer.offset)
            self.state.reset()

        elif dataset_type < SIZED_DATASET_LIMIT:
            length = self.framer.read_length()
            handler = self._handlers.get(dataset_type)
            if handler is None:
                logger.warning(
                    "skipping unknown dataset 0x%02x (%d bytes) at stream offset %d",
                    dataset_type,
                    length,
                    self.framer.offset,
                )
                self.framer.skip(length)
            else:
                try:
                    handler(self.framer.read_payload(length))
                except Cancelled as e:
                    if e.offset is None:
                        e.offset = self.framer.offset
                    raise

        else:
            logger.debug("ignoring flag 0x%02x at stream offset %d", dataset_type, self.framer.offset)

        return True

    def finish(self) -> None:
        """finish notifies the sink about the upload status of the data."""
        if self.upload_discouraged:
            self.sink.mark_upload_discouraged()

        logger.info(
            "decoded %d nodes, %d ways and %d relations (upload discouraged: %s)",
            self.node_count,
            self.way_count,
            self.relation_count,
            self.upload_discouraged,
        )

    # Features

    def _decode_node(self, c: Cursor) -> None:
        s = self.state
        s.node_id += c.read_signed()
        if c.remaining == 0:
            return  # only id - deleted node

        version, meta = self._decode_meta(c, "node", s.node_id)
        if c.remaining == 0:
            return  # only id and version - deleted node
        self._check_version(version)

        s.lon = to_int32(s.lon + c.read_signed())
        s.lat = to_int32(s.lat + c.read_signed())
        position = self._get_position(s.node_id)

        node = Node(s.node_id, position, self._decode_tags(c), meta)
        self.node_count += 1
        self.sink.accept_node(node)

    def _decode_way(self, c: Cursor) -> None:
        s = self.state
        s.way_id += c.read_signed()
        if c.remaining == 0:
            return  # only id - deleted way

        version, meta = self._decode_meta(c, "way", s.way_id)
        if c.remaining == 0:
            return  # only id and version - deleted way
        self._check_version(version)

        stop = self._get_references_stop(c)
        nodes: List[int] = []
        while c.remaining > stop:
            s.refs[MEMBER_NODE] += c.read_signed()
            nodes.append(s.refs[MEMBER_NODE])

        way = Way(s.way_id, nodes, self._decode_tags(c), meta)
        self.way_count += 1
        self.sink.accept_way(way)

    def _decode_relation(self, c: Cursor) -> None:
        s = self.state
        s.relation_id += c.read_signed()
        if c.remaining == 0:
            return  # only id - deleted relation

        version, meta = self._decode_meta(c, "relation", s.relation_id)
        if c.remaining == 0:
            return  # only id and version - deleted relation
        self._check_version(version)

        stop = self._get_references_stop(c)
        members: List[RelationMember] = []
        while c.remaining > stop:
            delta = c.read_signed()
            type_idx, role = self._decode_member_type_and_role(c)
            s.refs[type_idx] += delta
            members.append(RelationMember(_MEMBER_TYPES[type_idx], s.refs[type_idx], role))

        relation = Relation(s.relation_id, members, self._decode_tags(c), meta)
        self.relation_count += 1
        self.sink.accept_relation(relation)

    def _check_version(self, version: int) -> None:
        if version == 0:
            self.upload_discouraged = True

    def _get_position(self, node_id: int) -> Position:
        lat = _descale(self.state.lat)
        lon = _descale(self.state.lon)
        if not is_valid_lat(lat) or not is_valid_lon(lon):
            raise InvalidCoordinates(f"node {node_id} has invalid coordinates: {lat}, {lon}")
        return lat, lon

    @staticmethod
    def _get_references_stop(c: Cursor) -> int:
        """_get_references_stop reads the length of the references section,
        and returns the value of ``c.remaining`` at which the section ends."""
        length = c.read_unsigned()
        if length > c.remaining:
            raise MalformedStream(
                f"references section declares {length} bytes, "
                f"but only {c.remaining} are left in the dataset"
            )
        return c.remaining - length

    # Metadata

    def _decode_meta(self, c: Cursor, kind: str, id: int) -> Tuple[int, Metadata]:
        """_decode_meta reads the version, timestamp, changeset and author of a feature.

        Returns the raw version (which may be 0) and the decoded :py:class:`Metadata`.
        """
        s = self.state
        version = c.read_unsigned()
        meta = Metadata(version=version or 1)
        if version == 0:
            return version, meta

        s.timestamp += c.read_signed()
        if s.timestamp == 0:
            return version, meta
        if s.timestamp < 0:
            raise InvalidTimestamp(f"{kind} {id} has invalid timestamp: {s.timestamp}")

        s.changeset += c.read_signed()
        if s.changeset > MAX_CHANGESET_ID:
            raise InvalidChangesetId(f"{kind} {id} has invalid changeset id: {s.changeset}")

        meta.timestamp = s.timestamp
        meta.changeset = s.changeset
        meta.user = self._decode_author(c)
        return version, meta

    def _decode_author(self, c: Cursor) -> Optional[User]:
        ref = c.read_unsigned()
        if ref == 0:
            start = c.pos
            uid = c.read_unsigned()
            if uid != 0:
                c.read_byte()  # zero terminating the uid "string"
            name = c.read_string()
            pair = (str(uid) if uid else "", name)
            self.state.strings.store(pair, c.pos - start)
        else:
            pair = self.state.strings.resolve(ref)

        uid_str, name = pair
        if not uid_str:
            return None
        if not uid_str.isdigit():
            raise MalformedStream(
                f"author reference resolves to a non-numeric user id: {uid_str!r}"
            )
        return User(int(uid_str), name)

    # Strings

    def _decode_string_pair(self, c: Cursor) -> StringPair:
        ref = c.read_unsigned()
        if ref != 0:
            return self.state.strings.resolve(ref)

        start = c.pos
        key = c.read_string()
        value = c.read_string()
        self.state.strings.store((key, value), c.pos - start)
        return key, value

    def _decode_tags(self, c: Cursor) -> Dict[str, str]:
        tags: Dict[str, str] = {}
        while c.remaining > 0:
            key, value = self._decode_string_pair(c)
            tags[key] = value
        return tags

    def _decode_member_type_and_role(self, c: Cursor) -> Tuple[int, str]:
        """_decode_member_type_and_role reads the single type-and-role string of a relation member,
        e.g. "1outer". Returns the index into :py:attr:`DeltaState.refs` and the role.

        Unlike tags and authors, the size limit of a cached member string
        includes its (zero) reference byte.
        """
        start = c.pos
        ref = c.read_unsigned()
        if ref != 0:
            code, role = self.state.strings.resolve(ref)
            return _MEMBER_TYPE_BY_INITIAL.get(code[:1], MEMBER_UNKNOWN), role

        type_idx = c.read_byte() - 0x30  # ASCII "0", "1" or "2"
        if type_idx < MEMBER_NODE or type_idx > MEMBER_RELATION:
            type_idx = MEMBER_UNKNOWN
        role = c.read_string()
        self.state.strings.store((_MEMBER_TYPE_CODES[type_idx], role), c.pos - start)
        return type_idx, role

    # File-level datasets

    def _decode_bbox(self, c: Cursor) -> None:
        min_lon = _descale(to_int32(c.read_signed()))
        min_lat = _descale(to_int32(c.read_signed()))
        max_lon = _descale(to_int32(c.read_signed()))
        max_lat = _descale(to_int32(c.read_signed()))
        bounds = Bounds(min_lat, min_lon, max_lat, max_lon, self.header)

        if bounds.is_collapsed() or not bounds.is_valid():
            logger.warning("ignoring invalid bounds: %s", bounds)
            return
        self.sink.accept_bounds(bounds)

    def _decode_file_timestamp(self, c: Cursor) -> None:
        timestamp = c.read_signed()
        logger.debug("file timestamp: %d", timestamp)

    def _decode_header(self, c: Cursor) -> None:
        if c.remaining < 4:
            raise UnsupportedHeader(f"header dataset too short ({c.remaining} bytes)")
        header = c.read_bytes(4)
        if header not in SUPPORTED_HEADERS:
            raise UnsupportedHeader(f"unsupported header: {header!r}")
        self.header = header[:3].decode("ascii")
        logger.debug("header: %s", self.header)
