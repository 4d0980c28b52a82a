"""
License model.
"""
import uuid

from django.db import models


class License(models.Model):
    """
    A license grants a plugin's users access to its premium features.

    Rows are created and mutated only by payment event ingestion and are
    never hard-deleted by the service.
    """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("trial", "Trial"),
        ("inactive", "Inactive"),
        ("expired", "Expired"),
        ("canceled", "Canceled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_key = models.CharField(max_length=32, unique=True, editable=False)
    plugin = models.ForeignKey(
        "plugins.Plugin", on_delete=models.PROTECT, related_name="licenses"
    )
    email = models.EmailField(blank=True, default="", db_index=True)
    processor_customer_id = models.CharField(max_length=255, null=True, blank=True)
    processor_subscription_id = models.CharField(max_length=255, null=True, blank=True)
    processor_checkout_session_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Dedup anchor for one-time purchases",
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)
    expires_at = models.DateTimeField(null=True, blank=True)
    last_event_at = models.DateTimeField(
        null=True, blank=True, help_text="Processor timestamp of the last applied event"
    )
    subscription_ended = models.BooleanField(
        default=False, help_text="Processor reported the subscription as permanently over"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "licenses"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["plugin", "processor_subscription_id"],
                name="unique_license_per_plugin_subscription",
            ),
        ]
        indexes = [
            models.Index(fields=["plugin", "license_key"]),
            models.Index(fields=["processor_subscription_id"]),
            models.Index(fields=["status"]),
        ]

    def __str__(self):
        return f"{self.license_key[:8]}... ({self.status})"
