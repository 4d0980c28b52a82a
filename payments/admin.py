"""
Django admin configuration for payments app.
"""
from django.contrib import admin

from payments.infrastructure.models import AppliedEvent


@admin.register(AppliedEvent)
class AppliedEventAdmin(admin.ModelAdmin):
    """Admin interface for AppliedEvent model."""

    list_display = ["event_id", "event_type", "outcome", "license_id", "applied_at"]
    list_filter = ["event_type", "outcome", "applied_at"]
    search_fields = ["event_id", "license_id"]
    readonly_fields = ["id", "event_id", "event_type", "outcome", "license_id", "applied_at"]

    def has_add_permission(self, request):
        """Applied events are read-only."""
        return False

    def has_change_permission(self, request, obj=None):
        """Applied events are read-only."""
        return False
