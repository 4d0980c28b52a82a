"""
License domain entity.

This is the core domain entity representing a license.
It contains business logic and is independent of infrastructure.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import LicenseStatus


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    Represents a credential that entitles one plugin's users to its
    premium features. Validity is never stored: it is derived from
    ``status`` and ``expires_at`` every time it is asked for.
    """

    id: uuid.UUID
    plugin_id: uuid.UUID
    license_key: str
    email: str
    status: LicenseStatus
    expires_at: Optional[datetime]
    processor_customer_id: Optional[str]
    processor_subscription_id: Optional[str]
    processor_checkout_session_id: Optional[str]
    last_event_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    subscription_ended: bool = False

    def __post_init__(self):
        """Validate license entity."""
        if not self.plugin_id:
            raise ValueError("Plugin ID is required")
        if not self.license_key:
            raise ValueError("License key is required")
        if not isinstance(self.status, LicenseStatus):
            raise ValueError(f"Invalid license status: {self.status}")

    @classmethod
    def create(
        cls,
        plugin_id: uuid.UUID,
        license_key: str,
        status: LicenseStatus,
        email: str = "",
        expires_at: Optional[datetime] = None,
        processor_customer_id: Optional[str] = None,
        processor_subscription_id: Optional[str] = None,
        processor_checkout_session_id: Optional[str] = None,
        last_event_at: Optional[datetime] = None,
        license_id: Optional[uuid.UUID] = None,
    ) -> "License":
        """
        Create a new License entity.

        Args:
            plugin_id: Owning plugin UUID
            license_key: Generated credential string
            status: Initial status
            email: Purchaser email (best effort)
            expires_at: Optional expiration datetime
            processor_customer_id: Processor customer reference
            processor_subscription_id: Processor subscription reference
            processor_checkout_session_id: Processor checkout session reference
            last_event_at: Processor timestamp of the creating event
            license_id: Optional UUID (generated if not provided)

        Returns:
            License entity instance
        """
        now = utc_now()
        return cls(
            id=license_id or uuid.uuid4(),
            plugin_id=plugin_id,
            license_key=license_key,
            email=email or "",
            status=status,
            expires_at=expires_at,
            processor_customer_id=processor_customer_id,
            processor_subscription_id=processor_subscription_id,
            processor_checkout_session_id=processor_checkout_session_id,
            last_event_at=last_event_at,
            created_at=now,
            updated_at=now,
        )

    def is_valid(self, current_time: Optional[datetime] = None) -> bool:
        """
        Check if license currently grants access.

        Args:
            current_time: Current time (defaults to now, UTC)

        Returns:
            True if status is active or trial and the license has not expired
        """
        if not self.status.grants_access:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at > (current_time or utc_now())

    def invalid_reason(self, current_time: Optional[datetime] = None) -> Optional[str]:
        """
        Explain why a license does not grant access.

        Args:
            current_time: Current time (defaults to now, UTC)

        Returns:
            "expired", "inactive" or "canceled", or None when valid
        """
        if self.is_valid(current_time):
            return None
        if self.status == LicenseStatus.CANCELED:
            return "canceled"
        if self.status == LicenseStatus.INACTIVE:
            return "inactive"
        return "expired"

    def transition_to(
        self,
        status: LicenseStatus,
        expires_at: Optional[datetime],
        event_at: Optional[datetime] = None,
        subscription_ended: bool = False,
    ) -> "License":
        """
        Create a new License instance with a new status and expiry.

        Args:
            status: New status
            expires_at: New expiration (pass the current value to keep it)
            event_at: Processor timestamp of the event causing the change
            subscription_ended: The processor reports the subscription as
                permanently over; once set it stays set

        Returns:
            New License instance
        """
        return replace(
            self,
            status=status,
            expires_at=expires_at,
            last_event_at=event_at or self.last_event_at,
            subscription_ended=self.subscription_ended or subscription_ended,
            updated_at=utc_now(),
        )
