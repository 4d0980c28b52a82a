"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
import re
from abc import ABC
from dataclasses import dataclass
from enum import Enum

# Same rule as django.core.validators.validate_slug, which the plugin table enforces
_SLUG_PATTERN = re.compile(r"[-a-zA-Z0-9_]+\Z")


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class PluginSlug(ValueObject):
    """Plugin slug value object (immutable, URL-safe, unique system-wide)."""

    value: str

    def __post_init__(self):
        """Validate slug format."""
        if not self.value:
            raise ValueError("Plugin slug cannot be empty")
        if len(self.value) > 100 or not _SLUG_PATTERN.match(self.value):
            raise ValueError(f"Invalid plugin slug format: {self.value}")

    def __str__(self) -> str:
        """Return slug as string."""
        return self.value


class LicenseStatus(Enum):
    """Closed set of license states."""

    ACTIVE = "active"
    TRIAL = "trial"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    CANCELED = "canceled"

    @property
    def grants_access(self) -> bool:
        """Whether a license in this status can be valid at all."""
        return self in (LicenseStatus.ACTIVE, LicenseStatus.TRIAL)

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class PlanType(Enum):
    """Purchase plan offered by a plugin."""

    ONE_TIME = "one_time"
    SUBSCRIPTION = "subscription"

    def __str__(self) -> str:
        """Return plan type as string."""
        return self.value
