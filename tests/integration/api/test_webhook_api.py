"""
Integration tests for the payment event webhook.
"""

import time
from unittest import mock

import pytest
from django.db import OperationalError
from django.urls import reverse

from licenses.infrastructure.models import License
from payments.infrastructure.models import AppliedEvent
from payments.infrastructure.repositories.django_event_ledger import DjangoEventLedger


@pytest.fixture
def deliver(api_client, encode, sign_payload):
    """Fixture posting a signed event to the webhook."""

    def _deliver(payload, header=None):
        body = encode(payload)
        return api_client.post(
            reverse("webhooks:payment-events"),
            data=body,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=header or sign_payload(body),
        )

    return _deliver


def validate(api_client, key, plugin_slug="acme-tool"):
    return api_client.get(
        reverse("licenses:validate-license"),
        {"plugin_slug": plugin_slug, "license_key": key},
    )


@pytest.mark.django_db
@pytest.mark.integration
class TestPaymentEventWebhook:
    """Integration tests for the webhook endpoint."""

    def test_one_time_purchase_issues_key(
        self, api_client, deliver, payloads, db_plugin, mailoutbox
    ):
        """Test a completed one-time checkout issues a key that validates."""
        response = deliver(payloads.checkout_completed(db_plugin.id, email="buyer@example.com"))

        assert response.status_code == 200
        assert response.json() == {"status": "success"}

        license = License.objects.get()
        assert license.status == "active"
        assert license.expires_at is None
        assert license.processor_checkout_session_id == "cs_test_0001"

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["buyer@example.com"]
        assert "Acme Tool" in mailoutbox[0].subject
        assert license.license_key in mailoutbox[0].body

        result = validate(api_client, license.license_key).json()
        assert result["valid"] is True
        assert result["status"] == "active"
        assert result["email"] == "buyer@example.com"
        assert result["expires_at"] is None
        assert result["plugin_name"] == "Acme Tool"

    def test_trial_subscription_then_deleted(self, api_client, deliver, payloads, db_plugin):
        """Test a trial license validates until its subscription is deleted."""
        now = int(time.time())
        trial_end = now + 14 * 86400
        deliver(
            payloads.checkout_completed(
                db_plugin.id,
                mode="subscription",
                subscription={"id": "sub_1", "status": "trialing", "trial_end": trial_end},
                created=now,
            )
        )
        license = License.objects.get()
        assert license.status == "trial"
        assert license.processor_subscription_id == "sub_1"

        trial = validate(api_client, license.license_key).json()
        assert trial["valid"] is True
        assert trial["status"] == "trial"
        assert trial["expires_at"] is not None

        response = deliver(
            payloads.subscription(
                "customer.subscription.deleted", "sub_1", status="canceled", created=now + 60
            )
        )

        assert response.status_code == 200
        license.refresh_from_db()
        assert license.status == "canceled"
        assert validate(api_client, license.license_key).json() == {
            "valid": False,
            "status": "canceled",
            "reason": "canceled",
        }

    def test_redelivery_is_acknowledged_once(self, deliver, payloads, db_plugin, mailoutbox):
        """Test the same event delivered twice creates one license and one email."""
        payload = payloads.checkout_completed(db_plugin.id, event_id="evt_twice")

        first = deliver(payload)
        second = deliver(payload)

        assert first.status_code == 200
        assert second.status_code == 200
        assert License.objects.count() == 1
        assert len(mailoutbox) == 1
        assert AppliedEvent.objects.get(event_id="evt_twice").outcome == "created"

    def test_irrelevant_event_is_acknowledged(self, deliver, payloads, db):
        """Test unhandled event types are accepted and recorded."""
        response = deliver(payloads.invoice("invoice.created", event_id="evt_irrelevant"))

        assert response.status_code == 200
        assert AppliedEvent.objects.get(event_id="evt_irrelevant").outcome == (
            "ignored_unknown_type"
        )

    def test_orphan_event_is_acknowledged(self, deliver, payloads, db):
        """Test events for unknown subscriptions are accepted without effect."""
        response = deliver(payloads.subscription("customer.subscription.updated", "sub_nobody"))

        assert response.status_code == 200
        assert License.objects.count() == 0

    def test_invalid_signature(self, deliver, payloads, db_plugin, encode, sign_payload):
        """Test a body signed with the wrong secret is rejected and not applied."""
        payload = payloads.checkout_completed(db_plugin.id)
        header = sign_payload(encode(payload), "whsec_wrong")

        response = deliver(payload, header=header)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_SIGNATURE"
        assert License.objects.count() == 0
        assert AppliedEvent.objects.count() == 0

    def test_missing_signature(self, api_client, payloads, db_plugin, encode):
        """Test unsigned bodies are rejected."""
        response = api_client.post(
            reverse("webhooks:payment-events"),
            data=encode(payloads.checkout_completed(db_plugin.id)),
            content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_SIGNATURE"

    def test_malformed_payload(self, api_client, sign_payload, db):
        """Test an authentic body that is not an event is rejected."""
        body = b'{"data": {}}'

        response = api_client.post(
            reverse("webhooks:payment-events"),
            data=body,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=sign_payload(body),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MALFORMED_PAYLOAD"

    def test_storage_failure_asks_for_redelivery(self, deliver, payloads, db_plugin):
        """Test storage errors answer 503 so the processor retries."""
        with mock.patch.object(
            DjangoEventLedger,
            "has_seen",
            autospec=True,
            side_effect=OperationalError("database is down"),
        ):
            response = deliver(payloads.checkout_completed(db_plugin.id))

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "STORAGE_UNAVAILABLE"
        assert License.objects.count() == 0
