"""
Event handlers for domain events.

These handlers process domain events after commit for side effects
like audit logging and metrics.
"""

import logging

from core.domain.events import DomainEvent, EventHandler
from core.metrics import license_status_transitions_total, licenses_created_total
from licenses.domain.events import LicenseCreated, LicenseStatusChanged

logger = logging.getLogger(__name__)

_registered = False


class AuditLogEventHandler(EventHandler):
    """Writes every license event, with all its fields, to the structured log."""

    async def handle(self, event: DomainEvent) -> None:
        logger.info(
            "Audit: %s %s", event.event_type, event.aggregate_id, extra=event.to_dict()
        )


class LicenseMetricsEventHandler(EventHandler):
    """Count license creations and status transitions."""

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for metrics.

        Args:
            event: Domain event
        """
        if isinstance(event, LicenseCreated):
            licenses_created_total.labels(status=event.status).inc()
        elif isinstance(event, LicenseStatusChanged):
            license_status_transitions_total.labels(
                from_status=event.previous_status, to_status=event.new_status
            ).inc()


def register_event_handlers():
    """Register all event handlers with the event bus."""
    global _registered
    from core.infrastructure.events import event_bus

    if _registered:
        return

    audit_handler = AuditLogEventHandler()
    metrics_handler = LicenseMetricsEventHandler()

    for event_type in (LicenseCreated, LicenseStatusChanged):
        event_bus.subscribe(event_type, audit_handler)
        event_bus.subscribe(event_type, metrics_handler)

    _registered = True
    logger.info("Event handlers registered")
