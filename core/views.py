"""
Operational endpoints: liveness, dependency health, readiness and the
Prometheus scrape target. None of them are rate limited.
"""

import logging

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import HttpResponse, JsonResponse
from django.views import View
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

logger = logging.getLogger(__name__)

SERVICE_NAME = "plugin-license-service"


def database_available() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        logger.warning("Database health check failed: %s", e)
        return False
    return True


def cache_available() -> bool:
    """The rate limiter's counter store answers reads and writes."""
    try:
        cache.set("health:probe", SERVICE_NAME, 10)
        return cache.get("health:probe") == SERVICE_NAME
    except Exception as e:  # pylint: disable=broad-exception-caught
        # Backend errors differ per cache client
        logger.warning("Cache health check failed: %s", e)
        return False


def processor_configured() -> bool:
    """Webhooks cannot be verified, nor checkouts opened, without Stripe secrets."""
    return bool(settings.STRIPE_WEBHOOK_SECRET and settings.STRIPE_SECRET_KEY)


def _probe(name: str, ok: bool) -> JsonResponse:
    if ok:
        return JsonResponse({"status": "healthy", name: "connected"})
    return JsonResponse({"status": "unhealthy", name: "disconnected"}, status=503)


class HealthView(View):
    """Liveness: the process is up and serving requests."""

    def get(self, _request):
        return JsonResponse({"status": "healthy", "service": SERVICE_NAME})


class HealthDBView(View):
    def get(self, _request):
        return _probe("database", database_available())


class HealthCacheView(View):
    def get(self, _request):
        return _probe("cache", cache_available())


class ReadyView(View):
    """Readiness: every dependency needed to ingest events and validate keys."""

    def get(self, _request):
        checks = {
            "database": database_available(),
            "cache": cache_available(),
            "payment_processor": processor_configured(),
        }
        ready = all(checks.values())
        return JsonResponse(
            {"status": "ready" if ready else "not_ready", "checks": checks},
            status=200 if ready else 503,
        )


class MetricsView(View):
    """Prometheus scrape endpoint."""

    def get(self, _request):
        return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
