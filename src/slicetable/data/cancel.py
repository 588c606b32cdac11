"""Cooperative cancellation for fetches and gestures."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..errors import FetchAbortedError

LOGGER = logging.getLogger(__name__)


class CancelToken:
    """One-shot cancellation flag shared between a caller and its fetches.

    Asynchronous code checks :meth:`raise_if_cancelled` on entry and after
    each ``await``.  Cancelling is idempotent; callbacks run once, on the
    first call to :meth:`cancel`.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "Fetch aborted") -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as exc:
                LOGGER.error("Cancel callback %r failed: %s", callback, exc)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise FetchAbortedError(self._reason or "Fetch aborted")

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run *callback* on cancellation; returns a function that removes it.

        The callback runs immediately when the token is already cancelled.
        """
        if self._cancelled:
            callback()
            return lambda: None
        self._callbacks.append(callback)

        def remove() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return remove

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"CancelToken({state})"


def raise_if_cancelled(token: Optional[CancelToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()


__all__ = ["CancelToken", "raise_if_cancelled"]
