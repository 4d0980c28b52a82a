"""
Payment processor event envelope.

Events arrive as JSON objects of the form
``{"id": ..., "type": ..., "created": ..., "data": {"object": {...}}}``.
Accessors here hide the differences between the object shapes the
processor sends across API versions.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from core.domain.exceptions import MalformedPayloadError


class PaymentEventType:
    """Event types that can change license state."""

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    SUBSCRIPTION_UPDATED = "customer.subscription.updated"
    SUBSCRIPTION_DELETED = "customer.subscription.deleted"
    INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
    INVOICE_PAYMENT_FAILED = "invoice.payment_failed"

    HANDLED = frozenset(
        {
            CHECKOUT_SESSION_COMPLETED,
            SUBSCRIPTION_UPDATED,
            SUBSCRIPTION_DELETED,
            INVOICE_PAYMENT_SUCCEEDED,
            INVOICE_PAYMENT_FAILED,
        }
    )


class CheckoutMode:
    """Checkout session modes."""

    PAYMENT = "payment"
    SUBSCRIPTION = "subscription"


def _timestamp(value: Any) -> Optional[datetime]:
    """Convert a unix timestamp to an aware datetime."""
    if value in (None, ""):
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _object_id(value: Any) -> Optional[str]:
    """Return the id of a reference that may be a bare id or an expanded object."""
    if isinstance(value, Mapping):
        value = value.get("id")
    return value or None


@dataclass(frozen=True)
class SubscriptionSnapshot:
    """The subscription fields that drive license state."""

    subscription_id: Optional[str]
    status: Optional[str]
    trial_end: Optional[datetime] = None
    current_period_end: Optional[datetime] = None

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> "SubscriptionSnapshot":
        """
        Build a snapshot from a processor subscription object.

        Newer API versions moved ``current_period_end`` from the
        subscription onto its items; both locations are read.

        Args:
            obj: Subscription object (dict-like)

        Returns:
            SubscriptionSnapshot
        """
        period_end = obj.get("current_period_end")
        if period_end is None:
            items = (obj.get("items") or {}).get("data") or []
            period_ends = [item.get("current_period_end") for item in items]
            period_ends = [value for value in period_ends if value is not None]
            period_end = max(period_ends) if period_ends else None

        return cls(
            subscription_id=obj.get("id"),
            status=obj.get("status"),
            trial_end=_timestamp(obj.get("trial_end")),
            current_period_end=_timestamp(period_end),
        )


@dataclass(frozen=True)
class ProcessorEvent:
    """
    A verified payment processor event.

    Immutable and uniquely identified by ``event_id``.
    """

    event_id: str
    event_type: str
    object: Dict[str, Any] = field(repr=False)
    created_at: Optional[datetime] = None
    account: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ProcessorEvent":
        """
        Build an event from a decoded webhook body.

        Args:
            payload: Decoded JSON body

        Returns:
            ProcessorEvent

        Raises:
            MalformedPayloadError: If the body is not an event envelope
        """
        if not isinstance(payload, dict):
            raise MalformedPayloadError("Event payload must be a JSON object")

        event_id = payload.get("id")
        event_type = payload.get("type")
        if not isinstance(event_id, str) or not event_id:
            raise MalformedPayloadError("Event payload is missing an id")
        if not isinstance(event_type, str) or not event_type:
            raise MalformedPayloadError("Event payload is missing a type")

        data = payload.get("data")
        obj = data.get("object") if isinstance(data, dict) else None
        if not isinstance(obj, dict):
            raise MalformedPayloadError("Event payload is missing data.object")

        return cls(
            event_id=event_id,
            event_type=event_type,
            object=obj,
            created_at=_timestamp(payload.get("created")),
            account=payload.get("account") or None,
        )

    @property
    def is_handled_type(self) -> bool:
        """Whether this event type can change license state."""
        return self.event_type in PaymentEventType.HANDLED

    @property
    def is_checkout_completed(self) -> bool:
        """Whether this is a completed checkout session."""
        return self.event_type == PaymentEventType.CHECKOUT_SESSION_COMPLETED

    @property
    def checkout_mode(self) -> Optional[str]:
        """Checkout mode (payment or subscription)."""
        return self.object.get("mode")

    @property
    def checkout_session_id(self) -> Optional[str]:
        """Checkout session id for checkout events."""
        if not self.is_checkout_completed:
            return None
        return self.object.get("id")

    @property
    def subscription_id(self) -> Optional[str]:
        """
        Subscription referenced by the event, if any.

        Checkout sessions reference it as ``subscription``; subscription
        events are the subscription itself; invoices reference it either
        directly or, on newer API versions, under
        ``parent.subscription_details``.
        """
        if self.event_type in (
            PaymentEventType.SUBSCRIPTION_UPDATED,
            PaymentEventType.SUBSCRIPTION_DELETED,
        ):
            return self.object.get("id")

        if self.event_type in (
            PaymentEventType.INVOICE_PAYMENT_SUCCEEDED,
            PaymentEventType.INVOICE_PAYMENT_FAILED,
        ):
            subscription = _object_id(self.object.get("subscription"))
            if subscription:
                return subscription
            parent = self.object.get("parent") or {}
            details = parent.get("subscription_details") or {}
            return _object_id(details.get("subscription"))

        return _object_id(self.object.get("subscription"))

    @property
    def embedded_subscription(self) -> Optional[SubscriptionSnapshot]:
        """Subscription state carried by the event itself, if any."""
        if self.event_type in (
            PaymentEventType.SUBSCRIPTION_UPDATED,
            PaymentEventType.SUBSCRIPTION_DELETED,
        ):
            return SubscriptionSnapshot.from_object(self.object)
        subscription = self.object.get("subscription")
        if self.is_checkout_completed and isinstance(subscription, Mapping):
            return SubscriptionSnapshot.from_object(subscription)
        return None

    @property
    def metadata(self) -> Dict[str, Any]:
        """Metadata attached to the event object."""
        metadata = self.object.get("metadata")
        return metadata if isinstance(metadata, dict) else {}

    @property
    def plugin_id(self) -> Optional[uuid.UUID]:
        """
        Plugin the event belongs to, from metadata or the client reference.

        Returns:
            Plugin UUID or None when absent or unparseable
        """
        reference = self.metadata.get("plugin_id") or self.object.get("client_reference_id")
        if not reference:
            return None
        try:
            return uuid.UUID(str(reference))
        except ValueError:
            return None

    @property
    def customer_id(self) -> Optional[str]:
        """Processor customer id."""
        return _object_id(self.object.get("customer"))

    @property
    def customer_email(self) -> str:
        """Best-effort purchaser email."""
        details = self.object.get("customer_details") or {}
        return details.get("email") or self.object.get("customer_email") or ""
