from __future__ import annotations

import logging
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Type


@dataclass(kw_only=True)
class Event:
    """Base event class."""
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Subscription:
    """Handle returned by subscribe(); cancelling it detaches the handler."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = Event
    handler: Callable = field(default=lambda e: None)
    active: bool = True
    bus: Optional["EventBus"] = field(default=None, repr=False, compare=False)

    def cancel(self):
        self.active = False
        if self.bus is not None:
            self.bus.unsubscribe(self)
            self.bus = None


class EventBus:
    """Synchronous typed event dispatcher.

    Handlers run in the publishing call, in subscription order.  A failing
    handler is logged and does not prevent the remaining handlers from running.
    """

    def __init__(self, logger: logging.Logger = None):
        self._logger = logger or logging.getLogger(__name__)
        self._handlers: Dict[Type[Event], List[Subscription]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[Event], handler: Callable) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler, bus=self)
        with self._lock:
            self._handlers[event_type].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription):
        subscription.active = False
        with self._lock:
            subs = self._handlers.get(subscription.event_type)
            if subs is None:
                return
            try:
                subs.remove(subscription)
            except ValueError:
                pass
            if not subs:
                del self._handlers[subscription.event_type]

    def publish(self, event: Event):
        event_type = type(event)

        with self._lock:
            subs = list(self._handlers.get(event_type, ()))

        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(event)
            except Exception as e:
                self._logger.error(f"Handler failed for {event_type.__name__}: {e}")

    def handler_count(self, event_type: Optional[Type[Event]] = None) -> int:
        """Number of live subscriptions, for one event type or overall."""
        with self._lock:
            if event_type is not None:
                return len(self._handlers.get(event_type, ()))
            return sum(len(subs) for subs in self._handlers.values())

    def clear(self):
        with self._lock:
            for subs in self._handlers.values():
                for sub in subs:
                    sub.active = False
                    sub.bus = None
            self._handlers.clear()
