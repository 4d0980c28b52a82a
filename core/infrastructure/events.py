"""
In-process event bus.

Handlers run on the publishing request's event loop once the change they
describe is committed. A failing handler is logged; it never fails the
publisher, because the state change it reacts to is already durable.
"""

import asyncio
import logging
from collections import defaultdict
from typing import DefaultDict, List, Type

from core.domain.events import DomainEvent, EventBus, EventHandler

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """EventBus dispatching by exact event class."""

    def __init__(self):
        self._handlers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    async def publish(self, event: DomainEvent) -> None:
        """
        Run every handler subscribed to ``type(event)`` concurrently.

        Args:
            event: Committed domain event
        """
        handlers = self._handlers.get(type(event), [])
        if handlers:
            await asyncio.gather(*(self._dispatch(handler, event) for handler in handlers))

    @staticmethod
    async def _dispatch(handler: EventHandler, event: DomainEvent) -> None:
        try:
            await handler.handle(event)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(
                "%s failed on %s: %s",
                type(handler).__name__,
                event.event_type,
                e,
                exc_info=True,
                extra={"event_id": str(event.event_id), "aggregate_id": event.aggregate_id},
            )


event_bus = InMemoryEventBus()
