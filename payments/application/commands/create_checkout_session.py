"""
CreateCheckoutSessionCommand.

Command to start a hosted checkout for a plugin plan.
"""
from dataclasses import dataclass
from typing import Optional

from core.domain.value_objects import PlanType


@dataclass
class CreateCheckoutSessionCommand:
    """Command to create a checkout session."""

    plugin_slug: str
    plan_type: PlanType
    customer_email: Optional[str] = None
