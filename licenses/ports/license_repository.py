"""
License repository port (interface).

This defines the contract for the license store.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from licenses.domain.license import License


class LicenseRepository(ABC):
    """
    Abstract repository for License entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.

    Methods are synchronous: mutations run inside a single database
    transaction opened by the caller (see ``core.infrastructure.database``).
    """

    @abstractmethod
    def add(self, license: License) -> License:
        """
        Insert a new license.

        Args:
            license: License entity to insert

        Returns:
            Saved license entity

        Raises:
            KeyGenerationCollisionError: If the license key is already taken
        """
        pass

    @abstractmethod
    def update(self, license: License) -> License:
        """
        Persist status, expiry and event bookkeeping of an existing license.

        Args:
            license: License entity to save

        Returns:
            Saved license entity
        """
        pass

    @abstractmethod
    def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    def find_by_plugin_and_key(self, plugin_id: uuid.UUID, license_key: str) -> Optional[License]:
        """
        Find a license by key, scoped to the plugin that issued it.

        Args:
            plugin_id: Plugin UUID
            license_key: License key string

        Returns:
            License entity or None if not found under that plugin
        """
        pass

    @abstractmethod
    def find_by_checkout_session(
        self, checkout_session_id: str, for_update: bool = False
    ) -> Optional[License]:
        """
        Find the license created by a checkout session.

        Args:
            checkout_session_id: Processor checkout session id
            for_update: Lock the row until the transaction ends

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    def find_by_subscription(
        self,
        subscription_id: str,
        plugin_id: Optional[uuid.UUID] = None,
        for_update: bool = False,
    ) -> Optional[License]:
        """
        Find the license tracking a processor subscription.

        Args:
            subscription_id: Processor subscription id
            plugin_id: Restrict to one plugin when known
            for_update: Lock the row until the transaction ends

        Returns:
            License entity or None if not found
        """
        pass
