"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""
from typing import Optional


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class PaymentEventException(DomainException):
    """Base exception for rejected payment processor events."""

    pass


class InvalidSignatureError(PaymentEventException):
    """Raised when an event signature is missing, wrong or outside tolerance."""

    def __init__(self, message: str = "Invalid event signature"):
        super().__init__(message, code="INVALID_SIGNATURE")


class MalformedPayloadError(PaymentEventException):
    """Raised when a verified event body is not a well-formed event envelope."""

    def __init__(self, message: str = "Malformed event payload"):
        super().__init__(message, code="MALFORMED_PAYLOAD")


class PluginException(DomainException):
    """Base exception for plugin-related errors."""

    pass


class PluginNotFoundError(PluginException):
    """Raised when a plugin is not found."""

    def __init__(self, message: str = "Plugin not found"):
        super().__init__(message, code="PLUGIN_NOT_FOUND")


class PriceNotConfiguredError(PluginException):
    """Raised when a plugin has no processor price for the requested plan."""

    def __init__(self, message: str = "Price not configured for this plan"):
        super().__init__(message, code="PRICE_NOT_CONFIGURED")


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class KeyGenerationCollisionError(LicenseException):
    """Raised when no unique license key could be generated."""

    def __init__(self, message: str = "Could not generate a unique license key"):
        super().__init__(message, code="KEY_GENERATION_COLLISION")


class CheckoutRejectedError(DomainException):
    """Raised when the payment processor refuses to open a checkout session."""

    def __init__(self, message: str = "Checkout session was rejected by the payment processor"):
        super().__init__(message, code="CHECKOUT_REJECTED")


class RateLimitExceededError(DomainException):
    """Raised when a client origin exceeds its request ceiling."""

    def __init__(
        self,
        limit: int,
        retry_after: int,
        reset_at: Optional[int] = None,
        message: str = "Rate limit exceeded. Please try again later.",
    ):
        super().__init__(message, code="RATE_LIMIT_EXCEEDED")
        self.limit = limit
        self.retry_after = retry_after
        self.reset_at = reset_at
