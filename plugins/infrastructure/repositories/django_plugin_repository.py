"""
Django implementation of PluginRepository port.

This adapter converts Django ORM models into domain entities.
"""

import uuid
from typing import Optional

from asgiref.sync import sync_to_async

from core.domain.value_objects import PluginSlug
from plugins.domain.plugin import Plugin
from plugins.infrastructure.models import Plugin as PluginModel
from plugins.ports.plugin_repository import PluginRepository


class DjangoPluginRepository(PluginRepository):
    """Django ORM implementation of PluginRepository."""

    def _to_domain(self, model: PluginModel) -> Plugin:
        """
        Convert Django model to domain entity.

        Args:
            model: Django Plugin model

        Returns:
            Plugin domain entity
        """
        return Plugin(
            id=model.id,
            name=model.name,
            slug=PluginSlug(model.slug),
            one_time_price_id=model.one_time_price_id or None,
            recurring_price_id=model.recurring_price_id or None,
            processor_account_id=model.processor_account_id or None,
            trial_period_days=model.trial_period_days,
            success_url=model.success_url or None,
            cancel_url=model.cancel_url or None,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @sync_to_async
    def find_by_id(self, plugin_id: uuid.UUID) -> Optional[Plugin]:
        """
        Find a plugin by ID.

        Args:
            plugin_id: Plugin UUID

        Returns:
            Plugin entity or None if not found
        """
        try:
            return self._to_domain(PluginModel.objects.get(id=plugin_id))
        except PluginModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_slug(self, slug: str) -> Optional[Plugin]:
        """
        Find a plugin by slug.

        Args:
            slug: Plugin slug

        Returns:
            Plugin entity or None if not found
        """
        try:
            return self._to_domain(PluginModel.objects.get(slug=slug))
        except PluginModel.DoesNotExist:
            return None
