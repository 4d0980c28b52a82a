"""
Celery-backed license notifier.

Mail delivery is queued so that ingestion never waits on SMTP.
"""
import logging

from core.metrics import license_emails_total
from licenses.ports.license_notifier import LicenseNotifier

logger = logging.getLogger(__name__)


class CeleryLicenseNotifier(LicenseNotifier):
    """Queue license key emails on the Celery broker."""

    def send_license_key(self, license_key: str, plugin_name: str, email: str) -> None:
        """
        Queue the license key email.

        Args:
            license_key: Generated license key
            plugin_name: Display name of the purchased plugin
            email: Buyer email address
        """
        from core.tasks import send_license_key_email_task

        if not email:
            logger.warning(
                "No buyer email on license, skipping key delivery",
                extra={"plugin_name": plugin_name},
            )
            license_emails_total.labels(result="skipped").inc()
            return

        try:
            send_license_key_email_task.apply_async(
                args=(license_key, plugin_name, email), retry=False
            )
            license_emails_total.labels(result="queued").inc()
        except Exception as e:
            # The license is already committed; delivery can be retried by hand.
            logger.error(
                "Failed to queue license key email: %s",
                e,
                exc_info=True,
                extra={"plugin_name": plugin_name},
            )
            license_emails_total.labels(result="failed").inc()
