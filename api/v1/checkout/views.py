"""
Checkout API views.

Starts a hosted processor checkout for a plugin plan. The license itself
is issued later, when the processor reports the completed checkout.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.checkout.serializers import (
    CheckoutSessionRequestSerializer,
    CheckoutSessionResponseSerializer,
)
from core.domain.value_objects import PlanType
from core.instrumentation import Status, StatusCode, get_tracer, mark_span_failed
from payments.application.commands.create_checkout_session import CreateCheckoutSessionCommand
from payments.application.handlers.create_checkout_session_handler import (
    CreateCheckoutSessionHandler,
)
from payments.infrastructure.stripe_gateway import StripePaymentGateway
from plugins.infrastructure.repositories.django_plugin_repository import DjangoPluginRepository

# Initialize repositories (in production, use DI container)
_plugin_repo = DjangoPluginRepository()

tracer = get_tracer(__name__)


class CreateCheckoutSessionView(APIView):
    """View for creating checkout sessions."""

    @extend_schema(
        operation_id="create_checkout_session",
        summary="Create Checkout Session",
        description=(
            "Create a hosted checkout for a plugin's one-time or subscription plan. "
            "Rate limited per client."
        ),
        tags=["Checkout API"],
        request=CheckoutSessionRequestSerializer,
        responses={
            200: CheckoutSessionResponseSerializer,
            400: {"description": "Bad Request or price not configured"},
            404: {"description": "Plugin not found"},
            422: {"description": "Rejected by the payment processor"},
            429: {"description": "Too many requests"},
        },
    )
    def post(self, request: Request) -> Response:
        """Create a checkout session."""
        return async_to_sync(self._handle_create_checkout_session)(request)

    async def _handle_create_checkout_session(self, request: Request) -> Response:
        """Async handler for checkout session creation."""
        with tracer.start_as_current_span("create_checkout_session") as span:
            span.set_attribute("operation", "create_checkout_session")

            serializer = CheckoutSessionRequestSerializer(data=request.data)
            if not serializer.is_valid():
                mark_span_failed(span, "validation_failed", "Validation failed")
                serializer.is_valid(raise_exception=True)

            plan_type = PlanType(serializer.validated_data["plan_type"])
            span.set_attribute("plugin.slug", serializer.validated_data["plugin_slug"])
            span.set_attribute("plan_type", plan_type.value)

            handler = CreateCheckoutSessionHandler(
                plugin_repository=_plugin_repo,
                payment_gateway=StripePaymentGateway(settings.STRIPE_SECRET_KEY),
                default_success_url=settings.CHECKOUT_SUCCESS_URL,
                default_cancel_url=settings.CHECKOUT_CANCEL_URL,
            )
            result = await handler.handle(
                CreateCheckoutSessionCommand(
                    plugin_slug=serializer.validated_data["plugin_slug"],
                    plan_type=plan_type,
                    customer_email=serializer.validated_data.get("customer_email"),
                )
            )

            response_serializer = CheckoutSessionResponseSerializer(result)
            span.set_status(Status(StatusCode.OK))
            return Response(response_serializer.data, status=status.HTTP_200_OK)
