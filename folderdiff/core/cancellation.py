"""
Cooperative cancellation for long-running comparisons.
"""

from __future__ import annotations

import threading

from folderdiff.core.errors import ComparisonCancelled


class CancellationToken:
    """
    Thread-safe cancellation flag.

    The caller keeps a reference and calls `cancel()` from any thread;
    the engine polls `is_cancelled` or calls `raise_if_cancelled()`
    at directory, file and chunk boundaries.
    """

    def __init__(self):
        self._event = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ComparisonCancelled("Comparison cancelled")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
