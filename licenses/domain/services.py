"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import logging
import secrets
import string
from datetime import datetime
from typing import Callable, Optional, Tuple

from core.domain.exceptions import KeyGenerationCollisionError
from licenses.domain.license import License
from licenses.domain.state_machine import LicenseTransition, TransitionAction
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class LicenseKeyGenerator:
    """Domain service for license key generation."""

    ALPHABET = string.ascii_uppercase + string.digits
    KEY_LENGTH = 32
    MAX_ATTEMPTS = 5

    @classmethod
    def generate(cls) -> str:
        """
        Generate a license key.

        36 symbols over 32 positions is about 165 bits of entropy from
        the operating system's secure random source.

        Returns:
            32-character upper-case alphanumeric key
        """
        return "".join(secrets.choice(cls.ALPHABET) for _ in range(cls.KEY_LENGTH))

    @classmethod
    def is_well_formed(cls, key: str) -> bool:
        """Whether a string could be a key produced by this generator."""
        return len(key) == cls.KEY_LENGTH and all(char in cls.ALPHABET for char in key)


class LicenseValidator:
    """Domain service for license validation."""

    @staticmethod
    def validate_license(
        license: License, current_time: Optional[datetime] = None
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate a license.

        Args:
            license: License entity to validate
            current_time: Evaluation time (defaults to now)

        Returns:
            Tuple of (is_valid, reason)
        """
        if license.is_valid(current_time):
            return True, None
        return False, license.invalid_reason(current_time)


class LicenseLifecycleManager:
    """
    Domain service that commits state machine decisions.

    Runs inside the caller's unit of work; every mutation of a license
    goes through here.
    """

    def __init__(
        self,
        repository: LicenseRepository,
        key_generator: Callable[[], str] = LicenseKeyGenerator.generate,
        max_attempts: int = LicenseKeyGenerator.MAX_ATTEMPTS,
    ):
        """Initialize manager with the license store."""
        self.repository = repository
        self.key_generator = key_generator
        self.max_attempts = max_attempts

    def create_license(self, draft: Callable[[str], License]) -> License:
        """
        Persist a new license, generating its key.

        Args:
            draft: Builds the license entity for a given key

        Returns:
            Saved license entity

        Raises:
            KeyGenerationCollisionError: If every generated key collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = draft(self.key_generator())
            try:
                return self.repository.add(candidate)
            except KeyGenerationCollisionError:
                logger.warning(
                    "License key collision, regenerating",
                    extra={"attempt": attempt, "max_attempts": self.max_attempts},
                )
        raise KeyGenerationCollisionError(
            f"Could not generate a unique license key after {self.max_attempts} attempts"
        )

    def apply(
        self,
        existing: License,
        transition: LicenseTransition,
        event_at: Optional[datetime] = None,
    ) -> License:
        """
        Apply an update transition to an existing license.

        Args:
            existing: License loaded for update
            transition: UPDATE decision from the state machine
            event_at: Processor timestamp of the causing event

        Returns:
            Updated license entity
        """
        if transition.action != TransitionAction.UPDATE:
            raise ValueError(f"Cannot apply a {transition.action.value} transition")
        updated = existing.transition_to(
            transition.status,
            transition.expires_at,
            event_at,
            subscription_ended=transition.ends_subscription,
        )
        return self.repository.update(updated)
