# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from typing import TYPE_CHECKING, Protocol, Tuple

if TYPE_CHECKING:
    from .model import Bounds, Node, Relation, Way

Position = Tuple[float, float]
"""Position describes the physical location of a node,
in WGS84 degrees, first latitude, then longitude.
"""


class FeatureSink(Protocol):
    """FeatureSink describes the consumer of decoded o5m records.

    Every accept method is called exactly once per decoded record, in stream order.
    Any accept method may raise :py:exc:`Cancelled` to stop the decoding -
    the exception is propagated to the caller of the decoder.
    """

    def accept_node(self, node: "Node") -> None: ...

    def accept_way(self, way: "Way") -> None: ...

    def accept_relation(self, relation: "Relation") -> None: ...

    def accept_bounds(self, bounds: "Bounds") -> None: ...

    def mark_upload_discouraged(self) -> None:
        """mark_upload_discouraged is called at most once, after all records were decoded,
        if any of the records had version 0 - meaning that the data doesn't come
        directly from the OSM database and shouldn't be uploaded back."""
        ...


class CancelToken(Protocol):
    """CancelToken describes any object which can ask the decoder to stop.

    The token is polled once before each dataset - a dataset being decoded is never interrupted.
    """

    def is_cancelled(self) -> bool: ...
