"""
Plugin model.
"""
import uuid

from django.db import models


class Plugin(models.Model):
    """
    A third-party plugin whose premium features are gated by licenses.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, help_text="Plugin display name")
    slug = models.SlugField(max_length=100, unique=True, help_text="URL-safe identifier")
    one_time_price_id = models.CharField(
        max_length=255, blank=True, default="", help_text="Processor price for one-time purchase"
    )
    recurring_price_id = models.CharField(
        max_length=255, blank=True, default="", help_text="Processor price for subscriptions"
    )
    processor_account_id = models.CharField(
        max_length=255, blank=True, default="", help_text="Developer's connected processor account"
    )
    trial_period_days = models.PositiveIntegerField(default=0)
    success_url = models.URLField(max_length=500, blank=True, default="")
    cancel_url = models.URLField(max_length=500, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "plugins"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.slug})"
