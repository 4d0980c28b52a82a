"""
Serializers for License API endpoints.
"""

from rest_framework import serializers


class ValidateLicenseQuerySerializer(serializers.Serializer):
    """Serializer for license validation query parameters."""

    plugin_slug = serializers.CharField(required=True, max_length=100)
    license_key = serializers.CharField(required=True, max_length=64)

    def validate_license_key(self, value):
        """Keys are upper-case; tolerate surrounding whitespace."""
        return value.strip().upper()


class ValidateLicenseResponseSerializer(serializers.Serializer):
    """
    Serializer for the validation result (documentation only).

    Valid results carry status, email, expires_at and plugin_name;
    invalid ones carry status and reason; unknown keys carry error.
    """

    valid = serializers.BooleanField()
    status = serializers.CharField(required=False)
    email = serializers.EmailField(required=False, allow_blank=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    plugin_name = serializers.CharField(required=False)
    reason = serializers.CharField(required=False)
    error = serializers.CharField(required=False)
