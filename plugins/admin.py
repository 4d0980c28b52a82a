"""
Django admin configuration for plugins app.
"""

from django.contrib import admin

from plugins.infrastructure.models import Plugin


@admin.register(Plugin)
class PluginAdmin(admin.ModelAdmin):
    """Admin interface for Plugin model."""

    list_display = ["name", "slug", "has_one_time_price", "has_recurring_price", "created_at"]
    list_filter = ["created_at", "updated_at"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ["id", "created_at", "updated_at"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "name", "slug"),
            },
        ),
        (
            "Payment Processor",
            {
                "fields": (
                    "one_time_price_id",
                    "recurring_price_id",
                    "processor_account_id",
                    "trial_period_days",
                ),
            },
        ),
        (
            "Checkout",
            {
                "fields": ("success_url", "cancel_url"),
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

    @admin.display(boolean=True, description="One-time price")
    def has_one_time_price(self, obj):
        """Whether a one-time price is configured."""
        return bool(obj.one_time_price_id)

    @admin.display(boolean=True, description="Recurring price")
    def has_recurring_price(self, obj):
        """Whether a recurring price is configured."""
        return bool(obj.recurring_price_id)
