"""
Model registration for the payments app.
"""
from payments.infrastructure.models import AppliedEvent  # noqa: F401
