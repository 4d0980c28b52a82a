"""
Structured JSON logging.

Every record is one JSON object carrying the service name, the
environment and, when a span is active, the trace and span ids. License
keys are masked before any handler sees them.
"""

import logging
import os
import re
import sys

from opentelemetry import trace
from pythonjsonlogger.json import JsonFormatter

APP_LOGGERS = ("core", "api", "plugins", "licenses", "payments", "PluginLicenseService")

# Keys are 32 upper-case alphanumerics; see licenses.domain.services.LicenseKeyGenerator
_LICENSE_KEY = re.compile(r"\b([A-Z0-9]{4})[A-Z0-9]{24}([A-Z0-9]{4})\b")


def mask_license_keys(text: str) -> str:
    """Keep the first and last four characters of anything shaped like a license key."""
    return _LICENSE_KEY.sub(r"\1...\2", text)


class LicenseKeyRedactionFilter(logging.Filter):
    """Masks license keys in the rendered message and in ``license_key`` extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.msg = record.getMessage()
            record.args = None
        if isinstance(record.msg, str):
            record.msg = mask_license_keys(record.msg)
        key = getattr(record, "license_key", None)
        if isinstance(key, str):
            record.license_key = mask_license_keys(key)
        return True


class ServiceJsonFormatter(JsonFormatter):
    """JSON formatter adding service identity and trace context."""

    def __init__(self, *args, environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = "plugin-license-service"
        log_record["environment"] = self.environment

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            log_record["trace_id"] = format(span_context.trace_id, "032x")
            log_record["span_id"] = format(span_context.span_id, "016x")


def get_logging_config(environment: str = "development") -> dict:
    """
    Build the LOGGING dict for an environment.

    Args:
        environment: development, test or production

    Returns:
        Django logging configuration dictionary
    """
    default_level = "DEBUG" if environment == "development" else "INFO"
    log_level = os.environ.get("LOG_LEVEL", default_level).upper()

    def logger(level: str) -> dict:
        return {"handlers": ["console"], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "redact_license_keys": {"()": LicenseKeyRedactionFilter},
        },
        "formatters": {
            "json": {
                "()": ServiceJsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "environment": environment,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["redact_license_keys"],
                "stream": sys.stdout,
            },
        },
        "root": {"handlers": ["console"], "level": log_level},
        "loggers": {
            "django": logger("INFO"),
            "django.request": logger("WARNING"),
            "django.db.backends": logger("WARNING"),
            "celery": logger("INFO"),
            **{name: logger(log_level) for name in APP_LOGGERS},
        },
    }
