# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Union

from .protocols import Position

MemberType = Literal["node", "way", "relation", "unknown"]


@dataclass
class User:
    """User represents the `OpenStreetMap user <https://wiki.openstreetmap.org/wiki/User>`_
    which last modified a feature."""

    id: int
    name: str


@dataclass
class Metadata:
    """Metadata holds the version information of a single feature."""

    version: int = 1
    """version of the feature. A version of 0 in the file is reported as 1,
    see :py:meth:`FeatureSink.mark_upload_discouraged`."""

    timestamp: Optional[int] = None
    """timestamp of the last modification, in seconds since the Unix epoch."""

    changeset: Optional[int] = None
    user: Optional[User] = None

    @property
    def datetime(self) -> Optional[datetime]:
        if self.timestamp is None:
            return None
        return datetime.fromtimestamp(self.timestamp, timezone.utc)


@dataclass
class Node:
    """Node represents a single `OpenStreetMap node <https://wiki.openstreetmap.org/wiki/Node>`_."""

    id: int
    position: Position
    tags: Dict[str, str] = field(default_factory=dict)
    meta: Optional[Metadata] = None


@dataclass
class Way:
    """Way represents a single `OpenStreetMap way <https://wiki.openstreetmap.org/wiki/Way>`_."""

    id: int
    nodes: List[int] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)
    meta: Optional[Metadata] = None

    def is_closed(self) -> bool:
        return bool(self.nodes) and self.nodes[0] == self.nodes[-1]


@dataclass
class RelationMember:
    """RelationMember represents a single member of a
    `OpenStreetMap relation <https://wiki.openstreetmap.org/wiki/Relation>`_.

    Members with a type not recognized by the decoder have ``type == "unknown"``.
    """

    type: MemberType
    ref: int
    role: str


@dataclass
class Relation:
    """Relation represents a single `OpenStreetMap relation <https://wiki.openstreetmap.org/wiki/Relation>`_."""

    id: int
    members: List[RelationMember] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)
    meta: Optional[Metadata] = None


@dataclass
class Bounds:
    """Bounds represents the area covered by the data in an o5m file."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    origin: Optional[str] = None
    """origin is the header of the file which declared the bounds, "o5m" or "o5c"."""

    def is_collapsed(self) -> bool:
        return self.min_lat == self.max_lat and self.min_lon == self.max_lon

    def is_valid(self) -> bool:
        return (
            is_valid_lat(self.min_lat)
            and is_valid_lat(self.max_lat)
            and is_valid_lon(self.min_lon)
            and is_valid_lon(self.max_lon)
        )


Feature = Union[Node, Way, Relation]
"""Feature represents a single `OpenStreetMap feature <https://wiki.openstreetmap.org/wiki/Map_features>`_:
a :py:class:`Node`, :py:class:`Way` or :py:class:`Relation`.
"""

Record = Union[Node, Way, Relation, Bounds]
"""Record is anything produced by the o5m decoder: a :py:obj:`Feature` or :py:class:`Bounds`."""


def is_valid_lat(lat: float) -> bool:
    return -90.0 <= lat <= 90.0


def is_valid_lon(lon: float) -> bool:
    return -180.0 <= lon <= 180.0
