"""
Production settings for PluginLicenseService.
"""

import os

from .base import *  # noqa: F403, F401
from .logging import get_logging_config

DEBUG = False

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "").split(",")

# Security settings
SECURE_SSL_REDIRECT = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# Behind a load balancer the client address is in X-Forwarded-For
RATE_LIMIT_TRUST_FORWARDED_FOR = (
    os.environ.get("RATE_LIMIT_TRUST_FORWARDED_FOR", "true").lower() == "true"
)

LOGGING = get_logging_config("production")
LOGGING["handlers"]["file"] = {
    "class": "logging.handlers.RotatingFileHandler",
    "filename": os.environ.get("LOG_FILE", "/var/log/plugin_license_service/app.log"),
    "maxBytes": 1024 * 1024 * 10,  # 10 MB
    "backupCount": 10,
    "formatter": "json",
    "filters": ["redact_license_keys"],
}
LOGGING["root"]["handlers"].append("file")
