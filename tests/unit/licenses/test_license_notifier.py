"""
Unit tests for license key delivery.
"""

from unittest import mock

from core.tasks import send_license_key_email_task
from licenses.infrastructure.notifier import CeleryLicenseNotifier


class TestCeleryLicenseNotifier:
    """Tests for CeleryLicenseNotifier with tasks run eagerly."""

    def test_sends_key_email(self, mailoutbox, settings):
        """Test the key is mailed to the buyer."""
        settings.LICENSE_EMAIL_FROM = "licenses@example.com"

        CeleryLicenseNotifier().send_license_key("K" * 32, "Acme Tool", "u@example.com")

        assert len(mailoutbox) == 1
        message = mailoutbox[0]
        assert message.to == ["u@example.com"]
        assert message.from_email == "licenses@example.com"
        assert message.subject == "Your Acme Tool license key"
        assert "K" * 32 in message.body

    def test_skips_without_email(self, mailoutbox):
        """Test nothing is sent when the buyer email is unknown."""
        CeleryLicenseNotifier().send_license_key("K" * 32, "Acme Tool", "")

        assert mailoutbox == []

    def test_queue_failure_does_not_raise(self, mailoutbox):
        """Test a broker failure is logged, not propagated."""
        with mock.patch.object(
            send_license_key_email_task, "apply_async", side_effect=ConnectionError("broker down")
        ):
            CeleryLicenseNotifier().send_license_key("K" * 32, "Acme Tool", "u@example.com")

        assert mailoutbox == []

    def test_enqueue_does_not_retry_publish(self):
        """Test an unreachable broker fails fast instead of blocking the caller."""
        with mock.patch.object(send_license_key_email_task, "apply_async") as apply_async:
            CeleryLicenseNotifier().send_license_key("K" * 32, "Acme Tool", "u@example.com")

        apply_async.assert_called_once_with(
            args=("K" * 32, "Acme Tool", "u@example.com"), retry=False
        )
