"""
Applied event model (deduplication ledger).

Every processor event is recorded by its event id in the same
transaction that applies it. A redelivered event finds its id here
and is acknowledged without effect.
"""
import uuid

from django.db import models


class AppliedEvent(models.Model):
    """A processor event that has been applied."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=255)
    outcome = models.CharField(max_length=50, blank=True, default="")
    license_id = models.UUIDField(null=True, blank=True)
    applied_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "applied_events"
        ordering = ["-applied_at"]

    def __str__(self):
        return f"{self.event_id} ({self.event_type})"
