"""Cooperative cancellation handle."""

from __future__ import annotations

import threading


class CancelToken:
    """Signal polled by long-running operations at well-defined points.

    Cancelling is idempotent and may happen from any thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"
