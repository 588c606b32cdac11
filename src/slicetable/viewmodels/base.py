"""BaseViewModel — pure Python, no Qt dependency.

Provides subscription lifecycle management so that concrete view models can
subscribe to ``EventBus`` events and ``Signal``s and have them released
automatically via ``dispose()``.
"""

from __future__ import annotations

from typing import Callable, Type

from slicetable.events.bus import EventBus, Subscription

from .signal import Connection, Signal


class BaseViewModel:
    """ViewModel base class — pure Python, no Qt dependency."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._connections: list[Connection] = []

    def subscribe_event(
        self,
        event_bus: EventBus,
        event_type: Type,
        handler: Callable,
    ) -> Subscription:
        """Subscribe to an event type and track the subscription."""
        sub = event_bus.subscribe(event_type, handler)
        self._subscriptions.append(sub)
        return sub

    def connect_signal(self, signal: Signal, handler: Callable) -> Connection:
        """Connect to a signal and track the connection."""
        connection = signal.connect(handler)
        self._connections.append(connection)
        return connection

    def release_subscriptions(self) -> None:
        """Cancel every tracked subscription and connection."""
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions.clear()
        for connection in self._connections:
            connection.disconnect()
        self._connections.clear()

    def dispose(self) -> None:
        self.release_subscriptions()
