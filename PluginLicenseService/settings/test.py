"""
Test settings for PluginLicenseService.
"""

from .base import *  # noqa: F403, F401

DEBUG = False

ALLOWED_HOSTS = ["testserver", "localhost"]

# Tables are created from the models (no migrations), in memory
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Use in-memory cache for tests
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Celery runs tasks inline, mail lands in django.core.mail.outbox
CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = "memory://"
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

STRIPE_SECRET_KEY = "sk_test_plugin_license_service"
STRIPE_WEBHOOK_SECRET = "whsec_test_plugin_license_service"
STRIPE_WEBHOOK_TOLERANCE = 300

OTEL_ENABLED = False

# Disable logging during tests
LOGGING_CONFIG = None
