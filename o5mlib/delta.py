# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from dataclasses import dataclass, field
from typing import List

from .string_table import StringTable

MEMBER_NODE = 0
MEMBER_WAY = 1
MEMBER_RELATION = 2
MEMBER_UNKNOWN = 3
"""MEMBER_UNKNOWN is the slot in :py:attr:`DeltaState.refs` used by relation members
with an unrecognized type. It is tracked separately, so that such members
don't corrupt the running node/way/relation references.
"""


@dataclass
class DeltaState:
    """DeltaState holds all values which o5m datasets are delta-encoded against,
    together with the :py:class:`StringTable`.

    Every delta-encoded field is decoded as ``previous + delta``, and the
    result becomes the new ``previous``. All of the state is cleared by a reset
    dataset, which may appear anywhere in the stream.
    """

    strings: StringTable = field(default_factory=StringTable)

    node_id: int = 0
    way_id: int = 0
    relation_id: int = 0

    refs: List[int] = field(default_factory=lambda: [0, 0, 0, 0])
    """refs holds the last referenced ids, indexed by MEMBER_NODE, MEMBER_WAY,
    MEMBER_RELATION and MEMBER_UNKNOWN. Way node lists use the MEMBER_NODE slot."""

    timestamp: int = 0
    changeset: int = 0
    lon: int = 0
    lat: int = 0

    def reset(self) -> None:
        self.node_id = 0
        self.way_id = 0
        self.relation_id = 0
        self.refs = [0, 0, 0, 0]
        self.timestamp = 0
        self.changeset = 0
        self.lon = 0
        self.lat = 0
        self.strings.clear()
