"""
Domain events.

A domain event records a state change that has already been committed,
for example a license created from a checkout. Handlers react to it
after the fact and can never veto it.
"""

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Type
from uuid import UUID, uuid4


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, kw_only=True)
class DomainEvent(ABC):
    """Immutable record of something that happened to an aggregate."""

    aggregate_id: str
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_now)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation including subclass fields."""
        data: Dict[str, Any] = {"event_type": self.event_type}
        for item in dataclasses.fields(self):
            value = getattr(self, item.name)
            if isinstance(value, UUID):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            data[item.name] = value
        return data


class EventHandler(ABC):
    """Reacts to published domain events."""

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        ...


class EventBus(ABC):
    """Publishes committed domain events to subscribed handlers."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        ...

    @abstractmethod
    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        ...
