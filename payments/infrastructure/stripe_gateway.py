"""
Stripe adapters for the payment ports.

Signature checks follow Stripe's scheme: the ``Stripe-Signature`` header
carries ``t=<unix time>,v1=<hex HMAC-SHA256 of "<t>.<body>">``.
"""
import json
import logging
from typing import Optional

import stripe
from asgiref.sync import sync_to_async

from core.domain.exceptions import (
    CheckoutRejectedError,
    InvalidSignatureError,
    MalformedPayloadError,
)
from payments.domain.processor_event import CheckoutMode, ProcessorEvent, SubscriptionSnapshot
from payments.ports.payment_gateway import CheckoutSession, CheckoutSessionRequest, PaymentGateway
from payments.ports.signature_verifier import SignatureVerifier

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 300


class StripeSignatureVerifier(SignatureVerifier):
    """Verify webhook bodies against the endpoint's signing secret."""

    def __init__(self, secret: str, tolerance: int = DEFAULT_TOLERANCE):
        """
        Args:
            secret: Webhook endpoint signing secret
            tolerance: Maximum signature age in seconds
        """
        if not secret:
            raise ValueError("Webhook signing secret is not configured")
        self.secret = secret
        self.tolerance = tolerance

    def verify(self, payload: bytes, signature_header: Optional[str]) -> ProcessorEvent:
        """
        Verify and decode a webhook body.

        The body is authenticated before it is parsed.

        Args:
            payload: Raw request body, byte-exact
            signature_header: Value of the Stripe-Signature header

        Returns:
            Verified ProcessorEvent

        Raises:
            InvalidSignatureError: If the signature is missing, wrong or too old
            MalformedPayloadError: If the authenticated body is not an event
        """
        if not signature_header:
            raise InvalidSignatureError("Missing signature header")

        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedPayloadError("Event payload is not valid UTF-8")

        try:
            stripe.WebhookSignature.verify_header(
                body, signature_header, self.secret, self.tolerance
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature rejected: %s", e)
            raise InvalidSignatureError()

        try:
            data = json.loads(body)
        except ValueError:
            raise MalformedPayloadError("Event payload is not valid JSON")

        return ProcessorEvent.from_payload(data)


class StripePaymentGateway(PaymentGateway):
    """
    Stripe API client.

    The Stripe SDK is blocking, so calls run in a worker thread.
    """

    def __init__(self, api_key: str):
        """
        Args:
            api_key: Stripe secret key
        """
        self.api_key = api_key

    def _request_options(self, account_id: Optional[str]) -> dict:
        options = {"api_key": self.api_key}
        if account_id:
            options["stripe_account"] = account_id
        return options

    async def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        """
        Create a hosted checkout session.

        Args:
            request: CheckoutSessionRequest

        Returns:
            CheckoutSession

        Raises:
            CheckoutRejectedError: If Stripe refuses the request
        """
        params = {
            "mode": request.mode,
            "line_items": [{"price": request.price_id, "quantity": 1}],
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
            "client_reference_id": request.client_reference_id,
            "metadata": dict(request.metadata),
        }
        if request.customer_email:
            params["customer_email"] = request.customer_email
        if request.mode == CheckoutMode.SUBSCRIPTION:
            subscription_data = {"metadata": dict(request.metadata)}
            if request.trial_period_days > 0:
                subscription_data["trial_period_days"] = request.trial_period_days
            params["subscription_data"] = subscription_data

        try:
            session = await sync_to_async(stripe.checkout.Session.create, thread_sensitive=False)(
                **params, **self._request_options(request.account_id)
            )
        except stripe.StripeError as e:
            logger.error(
                "Checkout session rejected: %s",
                e,
                extra={"error_type": type(e).__name__, "mode": request.mode},
            )
            raise CheckoutRejectedError(getattr(e, "user_message", None) or str(e))

        return CheckoutSession(session_id=session.id, session_url=session.url)

    async def retrieve_subscription(
        self, subscription_id: str, account_id: Optional[str] = None
    ) -> SubscriptionSnapshot:
        """
        Fetch the current state of a subscription.

        Args:
            subscription_id: Stripe subscription id
            account_id: Connected account owning the subscription

        Returns:
            SubscriptionSnapshot

        Raises:
            stripe.StripeError: If Stripe cannot return the subscription
        """
        subscription = await sync_to_async(stripe.Subscription.retrieve, thread_sensitive=False)(
            subscription_id, **self._request_options(account_id)
        )
        return SubscriptionSnapshot.from_object(subscription)
