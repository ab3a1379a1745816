from dataclasses import dataclass

from .domain_events import DomainEvent


@dataclass(frozen=True)
class ListChangedEvent(DomainEvent):
    kind: str = ""
    start: int = 0
    count: int = 0
    change_token: int = 0


@dataclass(frozen=True)
class StreamExhaustedEvent(DomainEvent):
    item_count: int = 0


@dataclass(frozen=True)
class SourceBoundEvent(DomainEvent):
    stream: str = ""
