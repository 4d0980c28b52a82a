"""
Django management command to prune the applied event ledger.

This command should be run periodically (e.g., via cron or scheduled task).
Records must outlive the processor's redelivery window, so the retention
never drops below MIN_RETENTION_DAYS.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from payments.infrastructure.repositories.django_event_ledger import DjangoEventLedger

logger = logging.getLogger(__name__)

MIN_RETENTION_DAYS = 30


class Command(BaseCommand):
    """Command to delete old applied event records."""

    help = "Delete applied payment event records older than the retention period"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help=(
                "Retention in days (default APPLIED_EVENT_RETENTION_DAYS, "
                f"minimum {MIN_RETENTION_DAYS})"
            ),
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - don't actually delete records",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        days = options["days"]
        if days is None:
            days = settings.APPLIED_EVENT_RETENTION_DAYS
        if days < MIN_RETENTION_DAYS:
            # pylint: disable=no-member
            self.stdout.write(
                self.style.WARNING(
                    f"Retention of {days} day(s) is below the minimum, using {MIN_RETENTION_DAYS}"
                )
            )
            days = MIN_RETENTION_DAYS

        ledger = DjangoEventLedger()
        cutoff = timezone.now() - timedelta(days=days)

        if options["dry_run"]:
            count = ledger.count_older_than(cutoff)
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            self.stdout.write(
                f"Would delete {count} applied event record(s) older than {days} days"
            )
            return

        deleted = ledger.prune(cutoff)
        logger.info("Pruned applied events", extra={"deleted": deleted, "retention_days": days})
        self.stdout.write(
            # pylint: disable=no-member
            self.style.SUCCESS(f"Deleted {deleted} applied event record(s) older than {days} days")
        )
