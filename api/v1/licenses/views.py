"""
License API views.

Public, unauthenticated endpoints called by plugin installations to
check whether a license key unlocks premium features.
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.licenses.serializers import (
    ValidateLicenseQuerySerializer,
    ValidateLicenseResponseSerializer,
)
from core.instrumentation import Status, StatusCode, get_tracer, mark_span_failed
from licenses.application.handlers.validate_license_handler import ValidateLicenseHandler
from licenses.application.queries.validate_license import ValidateLicenseQuery
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from plugins.infrastructure.repositories.django_plugin_repository import DjangoPluginRepository

# Initialize repositories (in production, use DI container)
_plugin_repo = DjangoPluginRepository()
_license_repo = DjangoLicenseRepository()

tracer = get_tracer(__name__)


class ValidateLicenseView(APIView):
    """View for validating a license key against a plugin."""

    @extend_schema(
        operation_id="validate_license",
        summary="Validate License",
        description=(
            "Check whether a license key currently unlocks a plugin. "
            "Keys are scoped to the plugin that issued them. Rate limited per client."
        ),
        tags=["License API"],
        parameters=[
            OpenApiParameter(
                name="plugin_slug",
                location=OpenApiParameter.QUERY,
                required=True,
                description="Plugin slug",
            ),
            OpenApiParameter(
                name="license_key",
                location=OpenApiParameter.QUERY,
                required=True,
                description="License key to validate",
            ),
        ],
        responses={
            200: ValidateLicenseResponseSerializer,
            400: {"description": "Missing parameters"},
            404: {"description": "Plugin not found"},
            429: {"description": "Too many requests"},
        },
    )
    def get(self, request: Request) -> Response:
        """Validate a license key."""
        return async_to_sync(self._handle_validate_license)(request)

    async def _handle_validate_license(self, request: Request) -> Response:
        """Async handler for license validation."""
        with tracer.start_as_current_span("validate_license") as span:
            span.set_attribute("operation", "validate_license")

            serializer = ValidateLicenseQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                mark_span_failed(span, "validation_failed", "Validation failed")
                serializer.is_valid(raise_exception=True)

            plugin_slug = serializer.validated_data["plugin_slug"]
            span.set_attribute("plugin.slug", plugin_slug)

            handler = ValidateLicenseHandler(
                plugin_repository=_plugin_repo,
                license_repository=_license_repo,
            )
            result = await handler.handle(
                ValidateLicenseQuery(
                    plugin_slug=plugin_slug,
                    license_key=serializer.validated_data["license_key"],
                )
            )

            span.set_attribute("license.valid", result.valid)
            span.set_status(Status(StatusCode.OK))
            return Response(result.to_response(), status=status.HTTP_200_OK)
