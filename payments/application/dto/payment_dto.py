"""
Payment DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from typing import Optional

from payments.domain.outcomes import EventOutcome


@dataclass
class IngestResultDTO:
    """DTO for the result of ingesting one payment event."""

    event_id: str
    outcome: EventOutcome
    license_id: Optional[uuid.UUID] = None


@dataclass
class CheckoutSessionDTO:
    """DTO for a created checkout session."""

    session_id: str
    session_url: str
