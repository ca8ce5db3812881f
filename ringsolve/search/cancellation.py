"""Cancellation tokens shared between a solve call and whoever may abort it."""

from __future__ import annotations
import threading
import time

from ..errors import Cancelled


class CancelToken:
    """
    Thread-safe cancellation flag with an optional deadline.

    The engine polls ``raise_if_cancelled`` at every frontier pop; any
    other thread may call ``cancel``.
    """

    def __init__(self, timeout: float | None = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self.reason = "Search was cancelled"

    def cancel(self, reason: str = "Search was cancelled"):
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("Search timed out")
            return True
        return False

    def raise_if_cancelled(self, nodes: int = 0):
        if self.cancelled:
            raise Cancelled(self.reason, nodes=nodes)
