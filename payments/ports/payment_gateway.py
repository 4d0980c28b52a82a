"""
Payment gateway port (interface).

Outbound calls to the payment processor.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

from payments.domain.processor_event import SubscriptionSnapshot


@dataclass(frozen=True)
class CheckoutSessionRequest:
    """Parameters for a hosted checkout session."""

    mode: str
    price_id: str
    success_url: str
    cancel_url: str
    client_reference_id: str
    metadata: Dict[str, str] = field(default_factory=dict)
    customer_email: Optional[str] = None
    trial_period_days: int = 0
    account_id: Optional[str] = None


@dataclass(frozen=True)
class CheckoutSession:
    """A checkout session created by the processor."""

    session_id: str
    session_url: str


class PaymentGateway(ABC):
    """Abstract client for the payment processor API."""

    @abstractmethod
    async def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        """
        Create a hosted checkout session.

        Args:
            request: CheckoutSessionRequest

        Returns:
            CheckoutSession

        Raises:
            CheckoutRejectedError: If the processor refuses the request
        """
        pass

    @abstractmethod
    async def retrieve_subscription(
        self, subscription_id: str, account_id: Optional[str] = None
    ) -> SubscriptionSnapshot:
        """
        Fetch the current state of a subscription.

        Args:
            subscription_id: Processor subscription id
            account_id: Connected account owning the subscription

        Returns:
            SubscriptionSnapshot
        """
        pass
