"""
App configuration for Plugin License Service.
"""

import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class PluginLicenseServiceConfig(AppConfig):
    """App configuration for PluginLicenseService."""

    name = "PluginLicenseService"
    verbose_name = "Plugin License Service"

    def ready(self):
        """Wire observability and domain event handlers once apps are loaded."""
        if getattr(self, "_initialized", False):
            return

        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()

        if settings.OTEL_ENABLED:
            from core.instrumentation import setup_opentelemetry

            try:
                setup_opentelemetry()
            except Exception as e:  # pylint: disable=broad-exception-caught
                # Tracing is optional; the service must start without a collector
                logger.warning("Failed to setup OpenTelemetry: %s", e)

        self._initialized = True
