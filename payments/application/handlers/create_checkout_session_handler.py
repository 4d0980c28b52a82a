"""
CreateCheckoutSessionHandler.

Handler for starting a hosted checkout for a plugin plan.
"""
import logging
from typing import Optional

from core.domain.exceptions import (
    CheckoutRejectedError,
    PluginNotFoundError,
    PriceNotConfiguredError,
)
from core.domain.value_objects import PlanType
from core.metrics import checkout_sessions_total
from payments.application.commands.create_checkout_session import CreateCheckoutSessionCommand
from payments.application.dto.payment_dto import CheckoutSessionDTO
from payments.domain.processor_event import CheckoutMode
from payments.ports.payment_gateway import CheckoutSessionRequest, PaymentGateway
from plugins.ports.plugin_repository import PluginRepository

logger = logging.getLogger(__name__)


class CreateCheckoutSessionHandler:
    """Handler for CreateCheckoutSessionCommand."""

    def __init__(
        self,
        plugin_repository: PluginRepository,
        payment_gateway: PaymentGateway,
        default_success_url: str,
        default_cancel_url: str,
    ):
        """Initialize handler with repositories and gateway."""
        self.plugin_repository = plugin_repository
        self.payment_gateway = payment_gateway
        self.default_success_url = default_success_url
        self.default_cancel_url = default_cancel_url

    async def handle(self, command: CreateCheckoutSessionCommand) -> CheckoutSessionDTO:
        """
        Handle create checkout session command.

        The plugin id travels in the session metadata and, for
        subscriptions, in the subscription metadata, so later events can
        be scoped to the plugin.

        Args:
            command: CreateCheckoutSessionCommand

        Returns:
            CheckoutSessionDTO with the hosted checkout URL

        Raises:
            PluginNotFoundError: If no plugin has the given slug
            PriceNotConfiguredError: If the plugin does not offer the plan
            CheckoutRejectedError: If the processor refuses the session
        """
        plan = command.plan_type.value

        plugin = await self.plugin_repository.find_by_slug(command.plugin_slug)
        if not plugin:
            checkout_sessions_total.labels(plan_type=plan, result="plugin_not_found").inc()
            raise PluginNotFoundError(f"Plugin '{command.plugin_slug}' not found")

        price_id = plugin.price_for(command.plan_type)
        if not price_id:
            checkout_sessions_total.labels(plan_type=plan, result="price_not_configured").inc()
            raise PriceNotConfiguredError(
                f"Plugin '{plugin.slug}' has no {plan} price configured"
            )

        is_subscription = command.plan_type == PlanType.SUBSCRIPTION
        request = CheckoutSessionRequest(
            mode=CheckoutMode.SUBSCRIPTION if is_subscription else CheckoutMode.PAYMENT,
            price_id=price_id,
            success_url=plugin.success_url or self.default_success_url,
            cancel_url=plugin.cancel_url or self.default_cancel_url,
            client_reference_id=str(plugin.id),
            metadata={
                "plugin_id": str(plugin.id),
                "plugin_slug": str(plugin.slug),
                "plan_type": plan,
            },
            customer_email=self._normalize_email(command.customer_email),
            trial_period_days=plugin.trial_period_days if is_subscription else 0,
            account_id=plugin.processor_account_id,
        )

        try:
            session = await self.payment_gateway.create_checkout_session(request)
        except CheckoutRejectedError:
            checkout_sessions_total.labels(plan_type=plan, result="rejected").inc()
            raise

        checkout_sessions_total.labels(plan_type=plan, result="created").inc()
        logger.info(
            "Checkout session created",
            extra={
                "plugin_id": str(plugin.id),
                "plan_type": plan,
                "session_id": session.session_id,
            },
        )
        return CheckoutSessionDTO(session_id=session.session_id, session_url=session.session_url)

    @staticmethod
    def _normalize_email(email: Optional[str]) -> Optional[str]:
        if not email:
            return None
        return email.strip().lower() or None
