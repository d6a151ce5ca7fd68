"""Cooperative cancellation."""

from __future__ import annotations

import threading


class CancellationToken:
    """Set once by a stop request, polled by the worker.

    `wait` doubles as an interruptible sleep: it returns True as soon as the
    token is cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        if seconds <= 0:
            return self._event.is_set()
        return self._event.wait(seconds)
