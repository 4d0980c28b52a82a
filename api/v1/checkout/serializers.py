"""
Serializers for Checkout API endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import PlanType


class CheckoutSessionRequestSerializer(serializers.Serializer):
    """Serializer for checkout session request."""

    plugin_slug = serializers.CharField(required=True, max_length=100)
    plan_type = serializers.ChoiceField(choices=[plan.value for plan in PlanType])
    customer_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)


class CheckoutSessionResponseSerializer(serializers.Serializer):
    """Serializer for CheckoutSessionDTO."""

    session_url = serializers.URLField()
    session_id = serializers.CharField()
