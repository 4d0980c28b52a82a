"""
Plugin repository port (interface).

This defines the contract for plugin lookups.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from plugins.domain.plugin import Plugin


class PluginRepository(ABC):
    """
    Abstract repository for Plugin entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    Plugins are read-only here.
    """

    @abstractmethod
    async def find_by_id(self, plugin_id: uuid.UUID) -> Optional[Plugin]:
        """
        Find a plugin by ID.

        Args:
            plugin_id: Plugin UUID

        Returns:
            Plugin entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[Plugin]:
        """
        Find a plugin by slug.

        Args:
            slug: Plugin slug

        Returns:
            Plugin entity or None if not found
        """
        pass
