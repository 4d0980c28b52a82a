"""
OpenTelemetry tracing setup and span helpers.

Tracing is switched on by ``OTEL_ENABLED``; until then ``get_tracer``
hands out OpenTelemetry's no-op tracer and the API views run unchanged.
"""

import logging

from django.conf import settings
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.django import DjangoInstrumentor
from opentelemetry.instrumentation.psycopg2 import Psycopg2Instrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Status, StatusCode
from prometheus_client import start_http_server

logger = logging.getLogger(__name__)

__all__ = ["Status", "StatusCode", "get_tracer", "mark_span_failed", "setup_opentelemetry"]

_configured = False


def setup_opentelemetry() -> None:
    """
    Install the OTLP trace exporter and auto-instrument Django, psycopg2
    and Redis. Also starts a standalone Prometheus scrape port when
    ``PROMETHEUS_PORT`` is set, for deployments that keep ``/metrics/``
    off the public ingress.
    """
    global _configured
    if _configured:
        return

    resource = Resource.create(
        {
            "service.name": settings.OTEL_SERVICE_NAME,
            "deployment.environment": settings.ENVIRONMENT,
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
                insecure=settings.OTEL_EXPORTER_OTLP_INSECURE,
            )
        )
    )
    trace.set_tracer_provider(provider)

    DjangoInstrumentor().instrument()
    Psycopg2Instrumentor().instrument()
    RedisInstrumentor().instrument()

    if settings.PROMETHEUS_PORT:
        try:
            start_http_server(settings.PROMETHEUS_PORT)
        except OSError as e:
            logger.warning("Prometheus scrape port %s unavailable: %s", settings.PROMETHEUS_PORT, e)

    _configured = True
    logger.info(
        "Tracing enabled",
        extra={"otlp_endpoint": settings.OTEL_EXPORTER_OTLP_ENDPOINT},
    )


def get_tracer(name: str):
    """Tracer for manual spans around API operations."""
    return trace.get_tracer(name)


def mark_span_failed(span: Span, reason: str, description: str) -> None:
    """Tag a span with a short failure reason and set its status to error."""
    span.set_attribute("error", reason)
    span.set_status(Status(StatusCode.ERROR, description))
