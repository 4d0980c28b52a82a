"""
Unit tests for the processor event envelope.
"""
import uuid
from datetime import datetime, timezone

import pytest

from core.domain.exceptions import MalformedPayloadError
from payments.domain.processor_event import ProcessorEvent, SubscriptionSnapshot


class TestProcessorEventParsing:
    """Tests for ProcessorEvent.from_payload."""

    def test_parses_envelope(self, payloads):
        """Test id, type and creation time are read."""
        payload = payloads.subscription(
            "customer.subscription.updated", created=1_767_000_000, event_id="evt_1"
        )

        event = ProcessorEvent.from_payload(payload)

        assert event.event_id == "evt_1"
        assert event.event_type == "customer.subscription.updated"
        assert event.created_at == datetime.fromtimestamp(1_767_000_000, tz=timezone.utc)

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"type": "invoice.payment_failed", "data": {"object": {}}},
            {"id": "evt_1", "data": {"object": {}}},
            {"id": "evt_1", "type": "invoice.payment_failed"},
            {"id": "evt_1", "type": "invoice.payment_failed", "data": {"object": "x"}},
        ],
    )
    def test_rejects_malformed_payload(self, payload):
        """Test envelopes without id, type or data.object are rejected."""
        with pytest.raises(MalformedPayloadError):
            ProcessorEvent.from_payload(payload)


class TestProcessorEventAccessors:
    """Tests for object shape accessors."""

    def test_checkout_references(self, payloads):
        """Test checkout sessions expose session, plugin, customer and email."""
        plugin_id = uuid.uuid4()
        event = ProcessorEvent.from_payload(
            payloads.checkout_completed(
                plugin_id, mode="subscription", subscription="sub_1", session_id="cs_1"
            )
        )

        assert event.checkout_session_id == "cs_1"
        assert event.checkout_mode == "subscription"
        assert event.subscription_id == "sub_1"
        assert event.plugin_id == plugin_id
        assert event.customer_id == "cus_test_0001"
        assert event.customer_email == "u@example.com"

    def test_plugin_from_client_reference(self, payloads):
        """Test the client reference is used when metadata is absent."""
        plugin_id = uuid.uuid4()
        payload = payloads.checkout_completed(plugin_id)
        payload["data"]["object"]["metadata"] = {}

        assert ProcessorEvent.from_payload(payload).plugin_id == plugin_id

    def test_unparseable_plugin_reference(self, payloads):
        """Test garbage plugin references read as absent."""
        payload = payloads.checkout_completed("not-a-uuid")

        assert ProcessorEvent.from_payload(payload).plugin_id is None

    def test_expanded_subscription_is_embedded(self, payloads):
        """Test an expanded subscription object is read without a lookup."""
        payload = payloads.checkout_completed(
            uuid.uuid4(),
            mode="subscription",
            subscription={"id": "sub_1", "status": "trialing", "trial_end": 1_767_000_000},
        )

        event = ProcessorEvent.from_payload(payload)

        assert event.subscription_id == "sub_1"
        assert event.embedded_subscription.status == "trialing"

    def test_invoice_subscription_in_parent_details(self, payloads):
        """Test newer invoice shapes are understood."""
        event = ProcessorEvent.from_payload(
            payloads.invoice("invoice.payment_succeeded", subscription_id="sub_9", nested=True)
        )

        assert event.subscription_id == "sub_9"

    def test_customer_email_fallback(self, payloads):
        """Test customer_email is used when customer_details is absent."""
        payload = payloads.checkout_completed(uuid.uuid4())
        payload["data"]["object"].pop("customer_details")
        payload["data"]["object"]["customer_email"] = "fallback@example.com"

        assert ProcessorEvent.from_payload(payload).customer_email == "fallback@example.com"


class TestSubscriptionSnapshot:
    """Tests for SubscriptionSnapshot."""

    def test_period_end_from_items(self):
        """Test period end is read from items when absent at the top level."""
        snapshot = SubscriptionSnapshot.from_object(
            {
                "id": "sub_1",
                "status": "active",
                "items": {
                    "data": [
                        {"current_period_end": 1_767_000_000},
                        {"current_period_end": 1_767_086_400},
                    ]
                },
            }
        )

        assert snapshot.current_period_end == datetime.fromtimestamp(
            1_767_086_400, tz=timezone.utc
        )

    def test_missing_dates(self):
        """Test absent dates read as None."""
        snapshot = SubscriptionSnapshot.from_object({"id": "sub_1", "status": "active"})

        assert snapshot.trial_end is None
        assert snapshot.current_period_end is None
