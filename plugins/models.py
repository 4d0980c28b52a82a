"""
Model registration for the plugins app.
"""
from plugins.infrastructure.models import Plugin  # noqa: F401
