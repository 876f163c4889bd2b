# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

"""Streaming decoder for o5m/o5c OpenStreetMap data"""

__title__ = "o5mlib"
__description__ = "Streaming decoder for o5m/o5c OpenStreetMap data"
__author__ = "Mikołaj Kuranowski"
__copyright__ = "© Copyright 2024 Mikołaj Kuranowski"
__license__ = "GPL-3.0-or-later"
__version__ = "1.0.0"
__email__ = "mkuranowski+pypackages@gmail.com"

from . import protocols
from .cancel import CancelFlag
from .decoder import Decoder
from .err import (
    Cancelled,
    InvalidChangesetId,
    InvalidCoordinates,
    InvalidTimestamp,
    MalformedStream,
    O5mError,
    UnsupportedHeader,
)
from .model import Bounds, Feature, Metadata, Node, Record, Relation, RelationMember, User, Way
from .reader import DataSet, collect_all_features, decode, read_records

__all__ = [
    "Bounds",
    "CancelFlag",
    "Cancelled",
    "collect_all_features",
    "DataSet",
    "decode",
    "Decoder",
    "Feature",
    "InvalidChangesetId",
    "InvalidCoordinates",
    "InvalidTimestamp",
    "MalformedStream",
    "Metadata",
    "Node",
    "O5mError",
    "protocols",
    "read_records",
    "Record",
    "Relation",
    "RelationMember",
    "UnsupportedHeader",
    "User",
    "Way",
]
