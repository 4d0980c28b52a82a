"""
Django implementation of LicenseRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from typing import Optional

from django.db import IntegrityError, transaction

from core.domain.exceptions import KeyGenerationCollisionError
from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License
from licenses.infrastructure.models import License as LicenseModel
from licenses.ports.license_repository import LicenseRepository


class DjangoLicenseRepository(LicenseRepository):
    """
    Django ORM implementation of LicenseRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements repository interface
    """

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        return License(
            id=model.id,
            plugin_id=model.plugin_id,
            license_key=model.license_key,
            email=model.email,
            status=LicenseStatus(model.status),
            expires_at=model.expires_at,
            processor_customer_id=model.processor_customer_id,
            processor_subscription_id=model.processor_subscription_id,
            processor_checkout_session_id=model.processor_checkout_session_id,
            last_event_at=model.last_event_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            subscription_ended=model.subscription_ended,
        )

    def _to_model(self, license: License) -> LicenseModel:
        """
        Convert domain entity to a new Django model instance.

        Args:
            license: License domain entity

        Returns:
            Unsaved Django License model
        """
        return LicenseModel(
            id=license.id,
            plugin_id=license.plugin_id,
            license_key=license.license_key,
            email=license.email,
            processor_customer_id=license.processor_customer_id,
            processor_subscription_id=license.processor_subscription_id,
            processor_checkout_session_id=license.processor_checkout_session_id,
            status=license.status.value,
            expires_at=license.expires_at,
            last_event_at=license.last_event_at,
            subscription_ended=license.subscription_ended,
        )

    def add(self, license: License) -> License:
        """
        Insert a new license.

        The insert runs in a savepoint so a key collision leaves the
        surrounding transaction usable for a retry.

        Args:
            license: License entity to insert

        Returns:
            Saved license entity

        Raises:
            KeyGenerationCollisionError: If the license key is already taken
        """
        model = self._to_model(license)
        try:
            with transaction.atomic():
                model.save(force_insert=True)
        except IntegrityError:
            if LicenseModel.objects.filter(license_key=license.license_key).exists():
                raise KeyGenerationCollisionError()
            raise
        return self._to_domain(model)

    def update(self, license: License) -> License:
        """
        Persist status, expiry and event bookkeeping of an existing license.

        Args:
            license: License entity to save

        Returns:
            Saved license entity
        """
        model = LicenseModel.objects.get(id=license.id)
        model.status = license.status.value
        model.expires_at = license.expires_at
        model.last_event_at = license.last_event_at
        model.subscription_ended = license.subscription_ended
        model.save(
            update_fields=[
                "status",
                "expires_at",
                "last_event_at",
                "subscription_ended",
                "updated_at",
            ]
        )
        return self._to_domain(model)

    def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        model = LicenseModel.objects.filter(id=license_id).first()
        return self._to_domain(model) if model else None

    def find_by_plugin_and_key(self, plugin_id: uuid.UUID, license_key: str) -> Optional[License]:
        """
        Find a license by key, scoped to the plugin that issued it.

        Args:
            plugin_id: Plugin UUID
            license_key: License key string

        Returns:
            License entity or None if not found under that plugin
        """
        model = LicenseModel.objects.filter(plugin_id=plugin_id, license_key=license_key).first()
        return self._to_domain(model) if model else None

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
        queryset = LicenseModel.objects.filter(processor_checkout_session_id=checkout_session_id)
        if for_update:
            queryset = queryset.select_for_update()
        model = queryset.first()
        return self._to_domain(model) if model else None

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
        queryset = LicenseModel.objects.filter(processor_subscription_id=subscription_id)
        if plugin_id is not None:
            queryset = queryset.filter(plugin_id=plugin_id)
        if for_update:
            queryset = queryset.select_for_update()
        model = queryset.order_by("created_at").first()
        return self._to_domain(model) if model else None
