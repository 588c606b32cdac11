"""Pure Python signal system — no Qt dependency.

Provides ``Signal`` for observer-pattern callbacks and ``ObservableProperty``
for data-binding in view models.  ``Signal.connect`` returns a
``Connection`` handle so owners can release observers deterministically when
the source they listen to is torn down.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

_logger = logging.getLogger(__name__)


class Connection:
    """Handle for one ``Signal`` handler; ``disconnect()`` is idempotent."""

    __slots__ = ("_signal", "_handler")

    def __init__(self, signal: "Signal", handler: Callable) -> None:
        self._signal: Signal | None = signal
        self._handler = handler

    @property
    def connected(self) -> bool:
        return self._signal is not None and self._signal.is_connected(self._handler)

    def disconnect(self) -> None:
        signal, self._signal = self._signal, None
        if signal is None:
            return
        try:
            signal.disconnect(self._handler)
        except ValueError:
            pass


class Signal:
    """Pure Python signal — does not depend on Qt.

    Exceptions raised by individual handlers are caught and logged so that one
    failing handler does not prevent subsequent handlers from executing (same
    semantics as ``EventBus``).
    """

    def __init__(self) -> None:
        self._handlers: list[Callable] = []
        self._lock = threading.Lock()

    def connect(self, handler: Callable) -> Connection:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)
        return Connection(self, handler)

    def disconnect(self, handler: Callable) -> None:
        with self._lock:
            self._handlers.remove(handler)

    def disconnect_all(self) -> None:
        with self._lock:
            self._handlers.clear()

    def is_connected(self, handler: Callable) -> bool:
        with self._lock:
            return handler in self._handlers

    def emit(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(*args, **kwargs)
            except Exception as exc:
                _logger.error("Signal handler %r failed: %s", handler, exc)

    @property
    def handler_count(self) -> int:
        with self._lock:
            return len(self._handlers)


class ObservableProperty:
    """Observable property — view-model data-binding foundation.

    Emits ``changed(new_value, old_value)`` whenever the value is set to a
    value that compares different.
    """

    def __init__(self, initial_value: Any = None) -> None:
        self._value = initial_value
        self.changed = Signal()

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        if self._value != new_value:
            old_value = self._value
            self._value = new_value
            self.changed.emit(new_value, old_value)
