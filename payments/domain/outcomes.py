"""
Event ingestion outcomes.

A verified event is always acknowledged; the outcome records what it did.
"""
from enum import Enum


class EventOutcome(Enum):
    """What applying one processor event did."""

    CREATED = "created"
    UPDATED = "updated"
    REPLAYED = "replayed"
    DUPLICATE = "duplicate"
    IGNORED_UNKNOWN_TYPE = "ignored_unknown_type"
    IGNORED_UNKNOWN_PLUGIN = "ignored_unknown_plugin"
    IGNORED_UNSUPPORTED_MODE = "ignored_unsupported_mode"
    IGNORED_UNSUPPORTED_STATUS = "ignored_unsupported_status"
    IGNORED_MISSING_REFERENCE = "ignored_missing_reference"
    IGNORED_NOT_SUBSCRIPTION_LINKED = "ignored_not_subscription_linked"
    IGNORED_ORPHAN = "ignored_orphan"
    IGNORED_STALE = "ignored_stale"
    IGNORED_TERMINAL = "ignored_terminal"

    @classmethod
    def ignored(cls, reason: str) -> "EventOutcome":
        """Outcome for an event the state machine ignored for ``reason``."""
        return cls(f"ignored_{reason}")

    @property
    def changed_license(self) -> bool:
        """Whether the outcome mutated the license store."""
        return self in (EventOutcome.CREATED, EventOutcome.UPDATED)
