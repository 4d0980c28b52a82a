"""
Celery configuration for background tasks.

Used for fire-and-forget license key mail delivery.
"""
import os

from celery import Celery

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "PluginLicenseService.settings.dev")

app = Celery("PluginLicenseService")

# Load configuration from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
