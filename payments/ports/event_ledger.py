"""
Event ledger port (interface).

Records which processor events have been applied so each one takes
effect at most once, however often it is redelivered.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class EventLedger(ABC):
    """
    Abstract deduplication ledger for processor events.

    Methods are synchronous and run inside the same database transaction
    as the license mutation they guard.
    """

    @abstractmethod
    def record_if_new(self, event_id: str, event_type: str) -> bool:
        """
        Atomically record an event id.

        Args:
            event_id: Processor event id
            event_type: Processor event type

        Returns:
            True if the id was not seen before, False if it was
        """
        pass

    @abstractmethod
    def mark_outcome(
        self, event_id: str, outcome: str, license_id: Optional[uuid.UUID] = None
    ) -> None:
        """
        Store what applying a recorded event did.

        Args:
            event_id: Processor event id
            outcome: Ingestion outcome
            license_id: License the event touched, if any
        """
        pass

    @abstractmethod
    def has_seen(self, event_id: str) -> bool:
        """
        Whether an event id has been recorded.

        Args:
            event_id: Processor event id

        Returns:
            True if recorded
        """
        pass

    @abstractmethod
    def prune(self, older_than: datetime) -> int:
        """
        Delete records applied before a cutoff.

        Args:
            older_than: Cutoff datetime

        Returns:
            Number of records deleted
        """
        pass

    @abstractmethod
    def count_older_than(self, older_than: datetime) -> int:
        """
        Count records applied before a cutoff.

        Args:
            older_than: Cutoff datetime

        Returns:
            Number of records that prune would delete
        """
        pass
