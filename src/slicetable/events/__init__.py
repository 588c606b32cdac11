from .bus import Event, EventBus, Subscription
from .table_events import CellsResolvedEvent, DataUpdatedEvent, NumRowsChangedEvent

__all__ = [
    "CellsResolvedEvent",
    "DataUpdatedEvent",
    "Event",
    "EventBus",
    "NumRowsChangedEvent",
    "Subscription",
]
