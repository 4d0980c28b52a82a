"""
Unit tests for License domain entity.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_license(status=LicenseStatus.ACTIVE, expires_at=None, **kwargs):
    return License.create(
        plugin_id=uuid.uuid4(),
        license_key="K" * 32,
        status=status,
        expires_at=expires_at,
        **kwargs,
    )


class TestLicenseEntity:
    """Tests for License domain entity."""

    def test_create_license(self):
        """Test creating a license entity."""
        plugin_id = uuid.uuid4()

        license = License.create(
            plugin_id=plugin_id,
            license_key="K" * 32,
            status=LicenseStatus.ACTIVE,
            email="u@example.com",
            processor_checkout_session_id="cs_test_1",
        )

        assert license.plugin_id == plugin_id
        assert license.status == LicenseStatus.ACTIVE
        assert license.expires_at is None
        assert license.email == "u@example.com"
        assert license.processor_checkout_session_id == "cs_test_1"
        assert license.created_at.tzinfo is not None

    def test_create_license_requires_key(self):
        """Test a license cannot exist without a key."""
        with pytest.raises(ValueError, match="License key is required"):
            License.create(plugin_id=uuid.uuid4(), license_key="", status=LicenseStatus.ACTIVE)

    def test_active_without_expiry_is_valid(self):
        """Test a lifetime license is valid."""
        assert make_license().is_valid(NOW) is True

    def test_trial_before_expiry_is_valid(self):
        """Test a running trial is valid."""
        license = make_license(LicenseStatus.TRIAL, NOW + timedelta(days=3))

        assert license.is_valid(NOW) is True

    def test_active_past_expiry_is_invalid(self):
        """Test validity is derived from expiry, not status alone."""
        license = make_license(LicenseStatus.ACTIVE, NOW - timedelta(seconds=1))

        assert license.is_valid(NOW) is False
        assert license.invalid_reason(NOW) == "expired"

    def test_expiry_at_exactly_now_is_invalid(self):
        """Test the expiry instant itself no longer grants access."""
        license = make_license(LicenseStatus.ACTIVE, NOW)

        assert license.is_valid(NOW) is False

    @pytest.mark.parametrize(
        "status, reason",
        [
            (LicenseStatus.INACTIVE, "inactive"),
            (LicenseStatus.CANCELED, "canceled"),
            (LicenseStatus.EXPIRED, "expired"),
        ],
    )
    def test_non_granting_status_is_invalid(self, status, reason):
        """Test statuses other than active and trial are never valid."""
        license = make_license(status, NOW + timedelta(days=30))

        assert license.is_valid(NOW) is False
        assert license.invalid_reason(NOW) == reason

    def test_valid_license_has_no_reason(self):
        """Test invalid_reason is None for a valid license."""
        assert make_license().invalid_reason(NOW) is None

    def test_transition_to_returns_new_instance(self):
        """Test transitions do not mutate the original."""
        license = make_license()
        event_at = NOW - timedelta(minutes=5)

        changed = license.transition_to(LicenseStatus.INACTIVE, NOW, event_at)

        assert license.status == LicenseStatus.ACTIVE
        assert changed.status == LicenseStatus.INACTIVE
        assert changed.expires_at == NOW
        assert changed.last_event_at == event_at
        assert changed.id == license.id
        assert changed.license_key == license.license_key

    def test_transition_keeps_last_event_at_without_timestamp(self):
        """Test a transition without an event time keeps the previous one."""
        license = make_license(last_event_at=NOW)

        changed = license.transition_to(LicenseStatus.CANCELED, None)

        assert changed.last_event_at == NOW
