# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

"""Contains errors raised by o5mlib"""

from typing import Optional


class O5mError(ValueError):
    """Base for all errors raised on invalid o5m data.

    Any O5mError aborts the whole decoding session - a broken
    dataset means a corrupted file, not a skippable record.
    """

    pass


class MalformedStream(O5mError):
    """Stream doesn't start with the reset byte, ends prematurely,
    or a dataset tries to read beyond its declared length."""

    pass


class UnsupportedHeader(O5mError):
    """Header dataset is neither "o5m2" nor "o5c2"."""

    pass


class InvalidCoordinates(O5mError):
    """Decoded node position is outside of the valid latitude/longitude range."""

    pass


class InvalidChangesetId(O5mError):
    """Decoded changeset id doesn't fit in a signed 32-bit integer."""

    pass


class InvalidTimestamp(O5mError):
    """Decoded timestamp is negative."""

    pass


class Cancelled(Exception):
    """Raised when decoding was cancelled, either through a :py:class:`CancelToken`,
    or by a :py:class:`FeatureSink` refusing further records.

    Not an :py:exc:`O5mError`, so that cancellations can be told apart from corrupted files.
    """

    offset: Optional[int]
    """offset is the number of stream bytes consumed when the cancellation was observed."""

    def __init__(self, offset: Optional[int] = None) -> None:
        self.offset = offset
        super().__init__(offset)

    def __str__(self) -> str:
        if self.offset is None:
            return "decoding was cancelled"
        return f"decoding was cancelled at stream offset {self.offset}"
