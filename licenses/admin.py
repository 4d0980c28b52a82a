"""
Django admin configuration for licenses app.
"""
from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from core.domain.value_objects import LicenseStatus
from licenses.infrastructure.models import License


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    """
    Admin interface for License model.

    Licenses change only through payment events, so every field is
    read-only here.
    """

    list_display = [
        "license_key",
        "plugin",
        "email",
        "status_display",
        "valid_now",
        "expires_at",
        "created_at",
    ]
    list_filter = ["status", "plugin", "created_at"]
    search_fields = [
        "license_key",
        "email",
        "processor_subscription_id",
        "processor_checkout_session_id",
        "plugin__slug",
    ]
    readonly_fields = [
        "id",
        "license_key",
        "plugin",
        "email",
        "status",
        "expires_at",
        "processor_customer_id",
        "processor_subscription_id",
        "processor_checkout_session_id",
        "last_event_at",
        "subscription_ended",
        "created_at",
        "updated_at",
    ]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "license_key", "plugin", "email", "status"),
            },
        ),
        (
            "Expiration",
            {
                "fields": ("expires_at",),
            },
        ),
        (
            "Payment Processor",
            {
                "fields": (
                    "processor_customer_id",
                    "processor_subscription_id",
                    "processor_checkout_session_id",
                    "last_event_at",
                    "subscription_ended",
                ),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "active": "green",
            "trial": "blue",
            "inactive": "orange",
            "canceled": "red",
            "expired": "gray",
        }
        color = colors.get(obj.status, "black")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def valid_now(self, obj):
        """What the validation endpoint would answer for this key right now."""
        if not LicenseStatus(obj.status).grants_access:
            return False
        return obj.expires_at is None or obj.expires_at > timezone.now()

    valid_now.boolean = True
    valid_now.short_description = "Valid now"

    def has_add_permission(self, request):
        """Licenses are created from payment events only."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Licenses are never hard-deleted."""
        return False

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("plugin")
