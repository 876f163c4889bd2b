# © Copyright 2024 Mikołaj Kuranowski
# SPDX-License-Identifier: GPL-3.0-or-later

from threading import Event


class CancelFlag:
    """CancelFlag is a :py:class:`CancelToken` which may be set from any thread,
    for example from a GUI "cancel" button while decoding runs in a worker thread.
    """

    def __init__(self) -> None:
        self._event = Event()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    def is_cancelled(self) -> bool:
        return self._event.is_set()
