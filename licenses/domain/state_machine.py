"""
License state machine.

Pure decision logic mapping (existing license, processor event) to the
change that event should cause. Nothing here touches storage.

| Event                                  | Existing license | Result                      |
|----------------------------------------|------------------|-----------------------------|
| checkout completed, one-time           | none for session | create active, no expiry    |
| checkout completed, subscription       | none for sub id  | create trial (trial end) if |
|                                        |                  | trialing, else active       |
| checkout completed, subscription       | exists           | no-op (replay)              |
| subscription updated active            | exists           | active, period end          |
| subscription updated trialing          | exists           | trial, trial end            |
| subscription updated past_due          | exists           | inactive, period end        |
| subscription updated canceled/unpaid   | exists           | canceled, period end        |
| subscription deleted                   | exists           | canceled, expiry unchanged  |
| invoice payment succeeded              | exists           | active, expiry unchanged    |
| invoice payment failed                 | exists           | inactive, expiry unchanged  |

Out-of-order delivery: an event older than the last event applied to a
license is ignored, and equal timestamps apply. Once the subscription has
ended (deleted, or updated to ``canceled``) the license stays ``canceled``.
A license canceled for an ``unpaid`` subscription can still be reactivated.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License
from payments.domain.processor_event import (
    CheckoutMode,
    PaymentEventType,
    ProcessorEvent,
    SubscriptionSnapshot,
)


class TransitionAction(Enum):
    """What the event does to the license store."""

    CREATE = "create"
    UPDATE = "update"
    NOOP = "noop"
    IGNORE = "ignore"


class IgnoreReason:
    """Why an event was acknowledged without changing anything."""

    UNKNOWN_TYPE = "unknown_type"
    UNKNOWN_PLUGIN = "unknown_plugin"
    UNSUPPORTED_MODE = "unsupported_mode"
    UNSUPPORTED_STATUS = "unsupported_status"
    MISSING_REFERENCE = "missing_reference"
    NOT_SUBSCRIPTION_LINKED = "not_subscription_linked"
    ORPHAN = "orphan"
    STALE = "stale"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class LicenseTransition:
    """Decision produced by the state machine."""

    action: TransitionAction
    status: Optional[LicenseStatus] = None
    expires_at: Optional[datetime] = None
    reason: Optional[str] = None
    ends_subscription: bool = False

    @classmethod
    def create(cls, status: LicenseStatus, expires_at: Optional[datetime]) -> "LicenseTransition":
        return cls(TransitionAction.CREATE, status=status, expires_at=expires_at)

    @classmethod
    def update(
        cls,
        status: LicenseStatus,
        expires_at: Optional[datetime],
        ends_subscription: bool = False,
    ) -> "LicenseTransition":
        return cls(
            TransitionAction.UPDATE,
            status=status,
            expires_at=expires_at,
            ends_subscription=ends_subscription,
        )

    @classmethod
    def noop(cls) -> "LicenseTransition":
        return cls(TransitionAction.NOOP, reason="replay")

    @classmethod
    def ignore(cls, reason: str) -> "LicenseTransition":
        return cls(TransitionAction.IGNORE, reason=reason)


# Subscription status -> license status for customer.subscription.updated
_SUBSCRIPTION_STATUS_MAP = {
    "active": LicenseStatus.ACTIVE,
    "trialing": LicenseStatus.TRIAL,
    "past_due": LicenseStatus.INACTIVE,
    "canceled": LicenseStatus.CANCELED,
    "unpaid": LicenseStatus.CANCELED,
}


class LicenseStateMachine:
    """Decides license transitions for processor events."""

    @classmethod
    def decide(
        cls,
        event: ProcessorEvent,
        existing: Optional[License],
        subscription: Optional[SubscriptionSnapshot] = None,
    ) -> LicenseTransition:
        """
        Decide what an event does to the license it refers to.

        Args:
            event: Verified processor event
            existing: License the event refers to, if one exists
            subscription: Subscription state for subscription-mode
                checkouts, when known

        Returns:
            LicenseTransition
        """
        if not event.is_handled_type:
            return LicenseTransition.ignore(IgnoreReason.UNKNOWN_TYPE)

        if event.is_checkout_completed:
            return cls._decide_checkout(event, existing, subscription)

        if not event.subscription_id:
            return LicenseTransition.ignore(IgnoreReason.NOT_SUBSCRIPTION_LINKED)
        if existing is None:
            return LicenseTransition.ignore(IgnoreReason.ORPHAN)
        if cls._is_stale(event, existing):
            return LicenseTransition.ignore(IgnoreReason.STALE)

        transition = cls._decide_subscription_change(event, existing)
        # Only an ended subscription is final; a license canceled for an
        # unpaid subscription recovers when the processor reports payment.
        if (
            transition.action == TransitionAction.UPDATE
            and existing.subscription_ended
            and transition.status != LicenseStatus.CANCELED
        ):
            return LicenseTransition.ignore(IgnoreReason.TERMINAL)
        return transition

    @staticmethod
    def _is_stale(event: ProcessorEvent, existing: License) -> bool:
        """An event older than the last one applied must not overwrite it."""
        if event.created_at is None or existing.last_event_at is None:
            return False
        return event.created_at < existing.last_event_at

    @staticmethod
    def _decide_checkout(
        event: ProcessorEvent,
        existing: Optional[License],
        subscription: Optional[SubscriptionSnapshot],
    ) -> LicenseTransition:
        """Creation on completed checkout, anchored on session or subscription id."""
        mode = event.checkout_mode

        if mode == CheckoutMode.PAYMENT:
            if not event.checkout_session_id:
                return LicenseTransition.ignore(IgnoreReason.MISSING_REFERENCE)
            if existing is not None:
                return LicenseTransition.noop()
            return LicenseTransition.create(LicenseStatus.ACTIVE, None)

        if mode == CheckoutMode.SUBSCRIPTION:
            if not event.subscription_id:
                return LicenseTransition.ignore(IgnoreReason.MISSING_REFERENCE)
            if existing is not None:
                return LicenseTransition.noop()
            if subscription is not None and subscription.status == "trialing":
                return LicenseTransition.create(LicenseStatus.TRIAL, subscription.trial_end)
            return LicenseTransition.create(LicenseStatus.ACTIVE, None)

        return LicenseTransition.ignore(IgnoreReason.UNSUPPORTED_MODE)

    @staticmethod
    def _decide_subscription_change(event: ProcessorEvent, existing: License) -> LicenseTransition:
        """Status changes for subscription and invoice events on an existing license."""
        if event.event_type == PaymentEventType.SUBSCRIPTION_UPDATED:
            snapshot = SubscriptionSnapshot.from_object(event.object)
            status = _SUBSCRIPTION_STATUS_MAP.get(snapshot.status)
            if status is None:
                return LicenseTransition.ignore(IgnoreReason.UNSUPPORTED_STATUS)
            if status == LicenseStatus.TRIAL:
                return LicenseTransition.update(status, snapshot.trial_end)
            return LicenseTransition.update(
                status,
                snapshot.current_period_end,
                ends_subscription=snapshot.status == "canceled",
            )

        if event.event_type == PaymentEventType.SUBSCRIPTION_DELETED:
            return LicenseTransition.update(
                LicenseStatus.CANCELED, existing.expires_at, ends_subscription=True
            )

        if event.event_type == PaymentEventType.INVOICE_PAYMENT_SUCCEEDED:
            return LicenseTransition.update(LicenseStatus.ACTIVE, existing.expires_at)

        # invoice.payment_failed
        return LicenseTransition.update(LicenseStatus.INACTIVE, existing.expires_at)
