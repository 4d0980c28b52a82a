"""
ValidateLicenseHandler.

Handler for the public license validation query.
"""
import logging
from datetime import datetime
from typing import Callable

from asgiref.sync import sync_to_async

from core.domain.exceptions import PluginNotFoundError
from core.metrics import license_validations_total
from licenses.application.dto.license_dto import ValidationResultDTO
from licenses.application.queries.validate_license import ValidateLicenseQuery
from licenses.domain.license import utc_now
from licenses.domain.services import LicenseKeyGenerator, LicenseValidator
from licenses.ports.license_repository import LicenseRepository
from plugins.ports.plugin_repository import PluginRepository

logger = logging.getLogger(__name__)


class ValidateLicenseHandler:
    """Handler for ValidateLicenseQuery."""

    def __init__(
        self,
        plugin_repository: PluginRepository,
        license_repository: LicenseRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize handler with repositories."""
        self.plugin_repository = plugin_repository
        self.license_repository = license_repository
        self.clock = clock

    async def handle(self, query: ValidateLicenseQuery) -> ValidationResultDTO:
        """
        Handle license validation query.

        Validity is recomputed from status and expiry on every call.

        Args:
            query: ValidateLicenseQuery

        Returns:
            ValidationResultDTO

        Raises:
            PluginNotFoundError: If no plugin has the given slug
        """
        plugin = await self.plugin_repository.find_by_slug(query.plugin_slug)
        if not plugin:
            license_validations_total.labels(result="plugin_not_found").inc()
            raise PluginNotFoundError(f"Plugin '{query.plugin_slug}' not found")

        if not LicenseKeyGenerator.is_well_formed(query.license_key):
            license_validations_total.labels(result="not_found").inc()
            return ValidationResultDTO.not_found()

        license = await sync_to_async(self.license_repository.find_by_plugin_and_key)(
            plugin.id, query.license_key
        )
        if not license:
            license_validations_total.labels(result="not_found").inc()
            return ValidationResultDTO.not_found()

        is_valid, reason = LicenseValidator.validate_license(license, self.clock())
        license_validations_total.labels(result="valid" if is_valid else "invalid").inc()

        if not is_valid:
            logger.debug(
                "License invalid",
                extra={"license_id": str(license.id), "reason": reason},
            )
            return ValidationResultDTO(valid=False, status=license.status.value, reason=reason)

        return ValidationResultDTO(
            valid=True,
            status=license.status.value,
            email=license.email,
            expires_at=license.expires_at,
            plugin_name=plugin.name,
        )
