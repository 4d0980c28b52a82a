"""
License domain events.

Domain events represent something that happened in the license domain.
They are published after the change they describe has been committed.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from core.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class LicenseCreated(DomainEvent):
    """Event raised when a license is created from a purchase."""

    license_id: uuid.UUID
    plugin_id: uuid.UUID
    status: str
    source_event_id: str


@dataclass(frozen=True, kw_only=True)
class LicenseStatusChanged(DomainEvent):
    """Event raised when a payment event changes a license's status or expiry."""

    license_id: uuid.UUID
    plugin_id: uuid.UUID
    previous_status: str
    new_status: str
    source_event_id: str
    expires_at: Optional[str] = None
