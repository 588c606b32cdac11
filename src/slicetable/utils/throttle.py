"""Leading + trailing throttle on the asyncio event loop."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from ..config import NOTIFY_THROTTLE_MS


class Throttle:
    """Run *callback* at most once every *interval_ms* milliseconds.

    The first call runs immediately.  Calls made during the cooldown collapse
    into a single trailing call when the cooldown ends.  Outside of a running
    event loop there is no timer to defer to, so every call runs immediately.
    """

    def __init__(self, callback: Callable[[], None], interval_ms: float = NOTIFY_THROTTLE_MS) -> None:
        self._callback = callback
        self._interval = interval_ms / 1000.0
        self._cooldown: Optional[asyncio.TimerHandle] = None
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def __call__(self) -> None:
        if self._cooldown is not None:
            self._pending = True
            return
        self._invoke()

    def _invoke(self) -> None:
        self._pending = False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None and self._interval > 0:
            self._cooldown = loop.call_later(self._interval, self._end_cooldown)
        self._callback()

    def _end_cooldown(self) -> None:
        self._cooldown = None
        if self._pending:
            self._invoke()

    def flush(self) -> None:
        """Run a pending trailing call now."""
        if self._pending:
            self.cancel()
            self._invoke()

    def cancel(self) -> None:
        """Drop the pending trailing call and end the cooldown."""
        if self._cooldown is not None:
            self._cooldown.cancel()
            self._cooldown = None
        self._pending = False


__all__ = ["Throttle"]
