"""
Plugin domain entity.

A plugin is the product a license unlocks. It is owned by an external
developer account and maintained by administrators; this service only
reads it to scope licenses and to open checkout sessions.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import PlanType, PluginSlug


@dataclass(frozen=True)
class Plugin:
    """
    Plugin domain entity.

    Carries the payment processor catalog references used to interpret
    incoming events and to start checkouts. Never mutated by this service.
    """

    id: uuid.UUID
    name: str
    slug: PluginSlug
    one_time_price_id: Optional[str]
    recurring_price_id: Optional[str]
    processor_account_id: Optional[str]
    trial_period_days: int
    success_url: Optional[str]
    cancel_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate plugin entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise ValueError("Plugin name cannot be empty")
        if len(self.name) > 255:
            raise ValueError("Plugin name too long")
        if self.trial_period_days < 0:
            raise ValueError("Trial period cannot be negative")

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        one_time_price_id: Optional[str] = None,
        recurring_price_id: Optional[str] = None,
        processor_account_id: Optional[str] = None,
        trial_period_days: int = 0,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
        plugin_id: Optional[uuid.UUID] = None,
    ) -> "Plugin":
        """
        Create a new Plugin entity.

        Args:
            name: Plugin display name
            slug: Plugin slug (URL-safe identifier)
            one_time_price_id: Processor price for one-time purchases
            recurring_price_id: Processor price for subscriptions
            processor_account_id: Developer's connected processor account
            trial_period_days: Trial length offered on subscriptions
            success_url: Where checkout redirects after payment
            cancel_url: Where checkout redirects when abandoned
            plugin_id: Optional UUID (generated if not provided)

        Returns:
            Plugin entity instance
        """
        now = datetime.now(timezone.utc)
        return cls(
            id=plugin_id or uuid.uuid4(),
            name=name.strip(),
            slug=PluginSlug(slug),
            one_time_price_id=one_time_price_id or None,
            recurring_price_id=recurring_price_id or None,
            processor_account_id=processor_account_id or None,
            trial_period_days=trial_period_days,
            success_url=success_url or None,
            cancel_url=cancel_url or None,
            created_at=now,
            updated_at=now,
        )

    def price_for(self, plan_type: PlanType) -> Optional[str]:
        """
        Return the processor price identifier for a plan.

        Args:
            plan_type: Requested plan

        Returns:
            Price identifier or None when the plan is not offered
        """
        if plan_type == PlanType.SUBSCRIPTION:
            return self.recurring_price_id
        return self.one_time_price_id
