from .bus import Event, EventBus, Subscription
from .domain_events import DomainEvent
from .list_events import (
    ListChangedEvent,
    SourceBoundEvent,
    StreamExhaustedEvent,
)

__all__ = [
    "DomainEvent",
    "Event",
    "EventBus",
    "ListChangedEvent",
    "SourceBoundEvent",
    "StreamExhaustedEvent",
    "Subscription",
]
