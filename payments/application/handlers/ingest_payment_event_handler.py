"""
IngestPaymentEventHandler.

The single commit path for license state. Each verified event is applied
inside one database transaction:

    ledger insert -> locked license lookup -> state machine -> commit

and only after commit are the side effects (key mail, domain events,
metrics) dispatched.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from asgiref.sync import sync_to_async

from core.domain.events import DomainEvent, EventBus
from core.infrastructure.database import run_atomic
from core.infrastructure.events import event_bus as default_event_bus
from core.metrics import payment_events_total
from licenses.domain.events import LicenseCreated, LicenseStatusChanged
from licenses.domain.license import License
from licenses.domain.services import LicenseLifecycleManager
from licenses.domain.state_machine import (
    IgnoreReason,
    LicenseStateMachine,
    LicenseTransition,
    TransitionAction,
)
from licenses.ports.license_notifier import LicenseNotifier
from licenses.ports.license_repository import LicenseRepository
from payments.application.commands.ingest_payment_event import IngestPaymentEventCommand
from payments.application.dto.payment_dto import IngestResultDTO
from payments.domain.outcomes import EventOutcome
from payments.domain.processor_event import (
    CheckoutMode,
    ProcessorEvent,
    SubscriptionSnapshot,
)
from payments.ports.event_ledger import EventLedger
from payments.ports.payment_gateway import PaymentGateway
from plugins.domain.plugin import Plugin
from plugins.ports.plugin_repository import PluginRepository

logger = logging.getLogger(__name__)

AtomicRunner = Callable[..., Awaitable[Any]]


@dataclass
class _Applied:
    """What the transaction committed, and what to do about it afterwards."""

    result: IngestResultDTO
    created: Optional[License] = None
    events: List[DomainEvent] = field(default_factory=list)


class IngestPaymentEventHandler:
    """Handler for IngestPaymentEventCommand."""

    def __init__(
        self,
        plugin_repository: PluginRepository,
        license_repository: LicenseRepository,
        event_ledger: EventLedger,
        payment_gateway: PaymentGateway,
        notifier: LicenseNotifier,
        event_bus: Optional[EventBus] = None,
        atomic_runner: AtomicRunner = run_atomic,
    ):
        """Initialize handler with repositories and collaborators."""
        self.plugin_repository = plugin_repository
        self.license_repository = license_repository
        self.event_ledger = event_ledger
        self.payment_gateway = payment_gateway
        self.notifier = notifier
        self.event_bus = event_bus or default_event_bus
        self.atomic_runner = atomic_runner
        self.lifecycle = LicenseLifecycleManager(license_repository)

    async def handle(self, command: IngestPaymentEventCommand) -> IngestResultDTO:
        """
        Handle ingest payment event command.

        Args:
            command: IngestPaymentEventCommand

        Returns:
            IngestResultDTO describing the outcome

        Raises:
            DatabaseError: If the store is unavailable; nothing was committed
                and the processor should redeliver
        """
        event = command.event
        plugin = None

        if await sync_to_async(self.event_ledger.has_seen)(event.event_id):
            applied = _Applied(IngestResultDTO(event.event_id, EventOutcome.DUPLICATE))
        else:
            plugin = await self._resolve_plugin(event)
            subscription = await self._resolve_subscription(event, plugin)
            applied = await self.atomic_runner(self._apply, event, plugin, subscription)

        await self._after_commit(event, plugin, applied)
        return applied.result

    async def _resolve_plugin(self, event: ProcessorEvent) -> Optional[Plugin]:
        """Load the plugin a checkout event was opened for."""
        if not event.is_checkout_completed or event.plugin_id is None:
            return None
        return await self.plugin_repository.find_by_id(event.plugin_id)

    async def _resolve_subscription(
        self, event: ProcessorEvent, plugin: Optional[Plugin]
    ) -> Optional[SubscriptionSnapshot]:
        """
        Learn the subscription state of a subscription-mode checkout.

        Runs before the transaction opens so no row lock is held across a
        network call. A failed lookup yields None and the license is
        created active.
        """
        if (
            plugin is None
            or event.checkout_mode != CheckoutMode.SUBSCRIPTION
            or not event.subscription_id
        ):
            return None

        embedded = event.embedded_subscription
        if embedded is not None:
            return embedded

        try:
            return await self.payment_gateway.retrieve_subscription(
                event.subscription_id, plugin.processor_account_id
            )
        except Exception as e:
            logger.warning(
                "Subscription lookup failed, assuming active: %s",
                e,
                extra={"event_id": event.event_id, "subscription_id": event.subscription_id},
            )
            return None

    def _find_existing(
        self, event: ProcessorEvent, plugin: Optional[Plugin]
    ) -> Optional[License]:
        """Load, and lock, the license an event refers to."""
        if event.is_checkout_completed:
            if event.checkout_mode == CheckoutMode.PAYMENT and event.checkout_session_id:
                return self.license_repository.find_by_checkout_session(
                    event.checkout_session_id, for_update=True
                )
            if event.checkout_mode == CheckoutMode.SUBSCRIPTION and event.subscription_id:
                return self.license_repository.find_by_subscription(
                    event.subscription_id, plugin_id=plugin.id, for_update=True
                )
            return None

        if event.subscription_id:
            return self.license_repository.find_by_subscription(
                event.subscription_id, for_update=True
            )
        return None

    def _apply(
        self,
        event: ProcessorEvent,
        plugin: Optional[Plugin],
        subscription: Optional[SubscriptionSnapshot],
    ) -> _Applied:
        """Apply one event. Runs inside a database transaction."""
        if not self.event_ledger.record_if_new(event.event_id, event.event_type):
            return _Applied(IngestResultDTO(event.event_id, EventOutcome.DUPLICATE))

        if event.is_checkout_completed and plugin is None:
            transition = LicenseTransition.ignore(IgnoreReason.UNKNOWN_PLUGIN)
            existing = None
        else:
            existing = self._find_existing(event, plugin) if event.is_handled_type else None
            transition = LicenseStateMachine.decide(event, existing, subscription)

        if transition.action == TransitionAction.CREATE:
            applied = self._create(event, plugin, transition)
        elif transition.action == TransitionAction.UPDATE:
            applied = self._update(event, existing, transition)
        elif transition.action == TransitionAction.NOOP:
            applied = _Applied(IngestResultDTO(event.event_id, EventOutcome.REPLAYED, existing.id))
        else:
            applied = _Applied(
                IngestResultDTO(
                    event.event_id,
                    EventOutcome.ignored(transition.reason),
                    existing.id if existing else None,
                )
            )

        self.event_ledger.mark_outcome(
            event.event_id, applied.result.outcome.value, applied.result.license_id
        )
        return applied

    def _create(
        self, event: ProcessorEvent, plugin: Plugin, transition: LicenseTransition
    ) -> _Applied:
        """Create the license a completed checkout paid for."""

        def draft(license_key: str) -> License:
            return License.create(
                plugin_id=plugin.id,
                license_key=license_key,
                status=transition.status,
                email=event.customer_email,
                expires_at=transition.expires_at,
                processor_customer_id=event.customer_id,
                processor_subscription_id=(
                    event.subscription_id
                    if event.checkout_mode == CheckoutMode.SUBSCRIPTION
                    else None
                ),
                processor_checkout_session_id=event.checkout_session_id,
                last_event_at=event.created_at,
            )

        license = self.lifecycle.create_license(draft)
        return _Applied(
            IngestResultDTO(event.event_id, EventOutcome.CREATED, license.id),
            created=license,
            events=[
                LicenseCreated(
                    aggregate_id=str(license.id),
                    license_id=license.id,
                    plugin_id=license.plugin_id,
                    status=license.status.value,
                    source_event_id=event.event_id,
                )
            ],
        )

    def _update(
        self, event: ProcessorEvent, existing: License, transition: LicenseTransition
    ) -> _Applied:
        """Move an existing license to the state the event calls for."""
        updated = self.lifecycle.apply(existing, transition, event.created_at)
        return _Applied(
            IngestResultDTO(event.event_id, EventOutcome.UPDATED, updated.id),
            events=[
                LicenseStatusChanged(
                    aggregate_id=str(updated.id),
                    license_id=updated.id,
                    plugin_id=updated.plugin_id,
                    previous_status=existing.status.value,
                    new_status=updated.status.value,
                    source_event_id=event.event_id,
                    expires_at=updated.expires_at.isoformat() if updated.expires_at else None,
                )
            ],
        )

    async def _after_commit(
        self, event: ProcessorEvent, plugin: Optional[Plugin], applied: _Applied
    ) -> None:
        """Dispatch side effects of a committed event."""
        result = applied.result

        if applied.created is not None:
            self.notifier.send_license_key(
                applied.created.license_key,
                plugin.name if plugin else "",
                applied.created.email,
            )

        for domain_event in applied.events:
            await self.event_bus.publish(domain_event)

        event_type = event.event_type if event.is_handled_type else "other"
        payment_events_total.labels(event_type=event_type, outcome=result.outcome.value).inc()

        log = logger.info if result.outcome != EventOutcome.IGNORED_ORPHAN else logger.warning
        log(
            "Payment event %s: %s",
            event.event_type,
            result.outcome.value,
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type,
                "outcome": result.outcome.value,
                "license_id": str(result.license_id) if result.license_id else None,
            },
        )
