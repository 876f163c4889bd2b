# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

"""Helpers for assembling o5m streams in tests. Not a part of the public API."""

from typing import Iterable, Mapping, Optional

from .decoder import (
    BBOX_DATASET,
    END_OF_DATA_FLAG,
    HEADER_DATASET,
    NODE_DATASET,
    RELATION_DATASET,
    RESET_FLAG,
    WAY_DATASET,
)


def unsigned(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def signed(value: int) -> bytes:
    if value < 0:
        return unsigned(((-1 - value) << 1) | 1)
    return unsigned(value << 1)


def string_pair(key: str, value: str) -> bytes:
    return b"\x00" + key.encode("utf-8") + b"\x00" + value.encode("utf-8") + b"\x00"


def tags(t: Mapping[str, str]) -> bytes:
    return b"".join(string_pair(k, v) for k, v in t.items())


def author(uid: int, name: str) -> bytes:
    uid_part = unsigned(uid) + b"\x00" if uid else b"\x00"
    return b"\x00" + uid_part + name.encode("utf-8") + b"\x00"


def meta(
    version: int = 1,
    timestamp: int = 0,
    changeset: Optional[int] = None,
    user: bytes = b"",
) -> bytes:
    """meta encodes the version section. ``timestamp`` and ``changeset`` are deltas;
    ``changeset`` and ``user`` are only written if ``changeset`` is not None."""
    out = unsigned(version)
    if version == 0:
        return out
    out += signed(timestamp)
    if changeset is not None:
        out += signed(changeset) + user
    return out


def dataset(type: int, payload: bytes) -> bytes:
    return bytes([type]) + unsigned(len(payload)) + payload


def header(tag: bytes = b"o5m2") -> bytes:
    return dataset(HEADER_DATASET, tag)


def bbox(min_lon: float, min_lat: float, max_lon: float, max_lat: float) -> bytes:
    return dataset(
        BBOX_DATASET,
        b"".join(signed(round(x * 1e7)) for x in (min_lon, min_lat, max_lon, max_lat)),
    )


def node(
    id: int,
    lon: int = 0,
    lat: int = 0,
    t: bytes = b"",
    m: Optional[bytes] = None,
) -> bytes:
    """node encodes a node dataset; ``id``, ``lon`` and ``lat`` are raw deltas."""
    m = meta() if m is None else m
    return dataset(NODE_DATASET, signed(id) + m + signed(lon) + signed(lat) + t)


def way(id: int, refs: Iterable[int], t: bytes = b"", m: Optional[bytes] = None) -> bytes:
    m = meta() if m is None else m
    refs_section = b"".join(signed(r) for r in refs)
    return dataset(WAY_DATASET, signed(id) + m + unsigned(len(refs_section)) + refs_section + t)


def member(ref: int, type_digit: bytes, role: str) -> bytes:
    return signed(ref) + b"\x00" + type_digit + role.encode("utf-8") + b"\x00"


def member_ref(ref: int, distance: int) -> bytes:
    return signed(ref) + unsigned(distance)


def relation(
    id: int,
    members: Iterable[bytes],
    t: bytes = b"",
    m: Optional[bytes] = None,
) -> bytes:
    m = meta() if m is None else m
    members_section = b"".join(members)
    return dataset(
        RELATION_DATASET,
        signed(id) + m + unsigned(len(members_section)) + members_section + t,
    )


def stream(*datasets: bytes, end: bool = True) -> bytes:
    return bytes([RESET_FLAG]) + b"".join(datasets) + (bytes([END_OF_DATA_FLAG]) if end else b"")
