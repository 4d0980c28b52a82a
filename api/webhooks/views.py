"""
Payment processor webhook views.

The processor retries any non-2xx answer, so every verified event is
acknowledged with 200 whatever its outcome. Only a storage failure
answers 503, which asks for redelivery.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.exceptions import InvalidSignatureError, PaymentEventException
from core.instrumentation import Status, StatusCode, get_tracer, mark_span_failed
from core.metrics import payment_event_rejections_total
from licenses.infrastructure.notifier import CeleryLicenseNotifier
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from payments.application.commands.ingest_payment_event import IngestPaymentEventCommand
from payments.application.handlers.ingest_payment_event_handler import IngestPaymentEventHandler
from payments.infrastructure.repositories.django_event_ledger import DjangoEventLedger
from payments.infrastructure.stripe_gateway import StripePaymentGateway, StripeSignatureVerifier
from plugins.infrastructure.repositories.django_plugin_repository import DjangoPluginRepository

# Initialize repositories (in production, use DI container)
_plugin_repo = DjangoPluginRepository()
_license_repo = DjangoLicenseRepository()
_event_ledger = DjangoEventLedger()
_notifier = CeleryLicenseNotifier()

SIGNATURE_HEADERS = ("HTTP_STRIPE_SIGNATURE", "HTTP_SIGNATURE")

tracer = get_tracer(__name__)


def _signature_header(request: Request):
    for header in SIGNATURE_HEADERS:
        value = request.META.get(header)
        if value:
            return value
    return None


class PaymentEventWebhookView(APIView):
    """View receiving signed payment processor events."""

    @extend_schema(
        operation_id="receive_payment_event",
        summary="Receive Payment Event",
        description=(
            "Endpoint for payment processor webhooks. The raw body must carry a valid "
            "Stripe-Signature header. Duplicate and irrelevant events are acknowledged "
            "without effect."
        ),
        tags=["Webhooks"],
        request={"application/json": {"type": "object"}},
        parameters=[
            OpenApiParameter(
                name="Stripe-Signature",
                location=OpenApiParameter.HEADER,
                required=True,
                description="Processor signature over the raw body",
            ),
        ],
        responses={
            200: {"description": "Event accepted"},
            400: {"description": "Invalid signature or malformed payload"},
            503: {"description": "Storage unavailable, retry later"},
        },
    )
    def post(self, request: Request) -> Response:
        """Receive a payment processor event."""
        return async_to_sync(self._handle_payment_event)(request)

    async def _handle_payment_event(self, request: Request) -> Response:
        """Async handler for payment events."""
        with tracer.start_as_current_span("receive_payment_event") as span:
            span.set_attribute("operation", "receive_payment_event")

            verifier = StripeSignatureVerifier(
                settings.STRIPE_WEBHOOK_SECRET, settings.STRIPE_WEBHOOK_TOLERANCE
            )
            try:
                event = verifier.verify(request.body, _signature_header(request))
            except PaymentEventException as e:
                reason = "signature" if isinstance(e, InvalidSignatureError) else "payload"
                payment_event_rejections_total.labels(reason=reason).inc()
                mark_span_failed(span, reason, e.message)
                raise

            span.set_attribute("event.id", event.event_id)
            span.set_attribute("event.type", event.event_type)

            handler = IngestPaymentEventHandler(
                plugin_repository=_plugin_repo,
                license_repository=_license_repo,
                event_ledger=_event_ledger,
                payment_gateway=StripePaymentGateway(settings.STRIPE_SECRET_KEY),
                notifier=_notifier,
            )
            result = await handler.handle(IngestPaymentEventCommand(event=event))

            span.set_attribute("event.outcome", result.outcome.value)
            span.set_status(Status(StatusCode.OK))
            return Response({"status": "success"}, status=status.HTTP_200_OK)
