"""
Django implementation of EventLedger port.
"""
import uuid
from datetime import datetime
from typing import Optional

from django.db import IntegrityError, transaction

from payments.infrastructure.models import AppliedEvent
from payments.ports.event_ledger import EventLedger


class DjangoEventLedger(EventLedger):
    """
    Django ORM implementation of EventLedger.

    The unique constraint on ``event_id`` is the check-and-insert: of two
    concurrent deliveries only one insert succeeds.
    """

    def record_if_new(self, event_id: str, event_type: str) -> bool:
        try:
            with transaction.atomic():
                AppliedEvent.objects.create(event_id=event_id, event_type=event_type)
        except IntegrityError:
            return False
        return True

    def mark_outcome(
        self, event_id: str, outcome: str, license_id: Optional[uuid.UUID] = None
    ) -> None:
        AppliedEvent.objects.filter(event_id=event_id).update(
            outcome=outcome, license_id=license_id
        )

    def has_seen(self, event_id: str) -> bool:
        return AppliedEvent.objects.filter(event_id=event_id).exists()

    def prune(self, older_than: datetime) -> int:
        deleted, _ = AppliedEvent.objects.filter(applied_at__lt=older_than).delete()
        return deleted

    def count_older_than(self, older_than: datetime) -> int:
        return AppliedEvent.objects.filter(applied_at__lt=older_than).count()
