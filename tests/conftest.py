"""
Pytest configuration and shared fixtures.
"""

import hashlib
import hmac
import json
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from django.conf import settings
from django.core.cache import cache

from core.domain.events import DomainEvent, EventBus, EventHandler
from core.domain.exceptions import KeyGenerationCollisionError
from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License
from licenses.ports.license_notifier import LicenseNotifier
from licenses.ports.license_repository import LicenseRepository
from payments.domain.processor_event import SubscriptionSnapshot
from payments.ports.event_ledger import EventLedger
from payments.ports.payment_gateway import CheckoutSession, CheckoutSessionRequest, PaymentGateway
from plugins.domain.plugin import Plugin
from plugins.ports.plugin_repository import PluginRepository


# In-memory adapters for handler tests


class InMemoryPluginRepository(PluginRepository):
    """PluginRepository over a list of entities."""

    def __init__(self, plugins=()):
        self.plugins = list(plugins)

    async def find_by_id(self, plugin_id):
        return next((p for p in self.plugins if p.id == plugin_id), None)

    async def find_by_slug(self, slug):
        return next((p for p in self.plugins if str(p.slug) == slug), None)


class InMemoryLicenseRepository(LicenseRepository):
    """LicenseRepository over a dict, enforcing key uniqueness."""

    def __init__(self):
        self.licenses: Dict[uuid.UUID, License] = {}
        self.add_calls = 0

    def add(self, license):
        self.add_calls += 1
        if any(existing.license_key == license.license_key for existing in self.licenses.values()):
            raise KeyGenerationCollisionError()
        self.licenses[license.id] = license
        return license

    def update(self, license):
        self.licenses[license.id] = license
        return license

    def find_by_id(self, license_id):
        return self.licenses.get(license_id)

    def find_by_plugin_and_key(self, plugin_id, license_key):
        return next(
            (
                lic
                for lic in self.licenses.values()
                if lic.plugin_id == plugin_id and lic.license_key == license_key
            ),
            None,
        )

    def find_by_checkout_session(self, checkout_session_id, for_update=False):
        return next(
            (
                lic
                for lic in self.licenses.values()
                if lic.processor_checkout_session_id == checkout_session_id
            ),
            None,
        )

    def find_by_subscription(self, subscription_id, plugin_id=None, for_update=False):
        return next(
            (
                lic
                for lic in self.licenses.values()
                if lic.processor_subscription_id == subscription_id
                and (plugin_id is None or lic.plugin_id == plugin_id)
            ),
            None,
        )


class InMemoryEventLedger(EventLedger):
    """EventLedger over a dict."""

    def __init__(self):
        self.records: Dict[str, dict] = {}

    def record_if_new(self, event_id, event_type):
        if event_id in self.records:
            return False
        self.records[event_id] = {
            "event_type": event_type,
            "outcome": "",
            "license_id": None,
            "applied_at": datetime.now(timezone.utc),
        }
        return True

    def mark_outcome(self, event_id, outcome, license_id=None):
        self.records[event_id]["outcome"] = outcome
        self.records[event_id]["license_id"] = license_id

    def has_seen(self, event_id):
        return event_id in self.records

    def prune(self, older_than):
        stale = [k for k, v in self.records.items() if v["applied_at"] < older_than]
        for key in stale:
            del self.records[key]
        return len(stale)

    def count_older_than(self, older_than):
        return sum(1 for v in self.records.values() if v["applied_at"] < older_than)


class FakePaymentGateway(PaymentGateway):
    """PaymentGateway that records requests instead of calling the processor."""

    def __init__(self, subscription: Optional[SubscriptionSnapshot] = None, error=None):
        self.subscription = subscription
        self.error = error
        self.checkout_requests: List[CheckoutSessionRequest] = []
        self.subscription_lookups: List[str] = []

    async def create_checkout_session(self, request):
        if self.error:
            raise self.error
        self.checkout_requests.append(request)
        return CheckoutSession(
            session_id="cs_test_fake",
            session_url="https://checkout.stripe.com/c/pay/cs_test_fake",
        )

    async def retrieve_subscription(self, subscription_id, account_id=None):
        self.subscription_lookups.append(subscription_id)
        if self.error:
            raise self.error
        return self.subscription


class RecordingNotifier(LicenseNotifier):
    """LicenseNotifier that remembers what it was asked to send."""

    def __init__(self):
        self.sent = []

    def send_license_key(self, license_key, plugin_name, email):
        self.sent.append((license_key, plugin_name, email))


class RecordingEventBus(EventBus):
    """EventBus that remembers published events."""

    def __init__(self):
        self.published: List[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        self.published.append(event)

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        pass


async def run_inline(func, *args, **kwargs):
    """Atomic runner for tests without a database."""
    return func(*args, **kwargs)


# Processor payloads


class PayloadFactory:
    """Builds processor event payloads shaped like Stripe's."""

    def __init__(self):
        self._counter = 0

    def _envelope(self, event_type, obj, created=None, event_id=None):
        self._counter += 1
        return {
            "id": event_id or f"evt_test_{self._counter:04d}",
            "object": "event",
            "type": event_type,
            "created": created if created is not None else int(time.time()),
            "data": {"object": obj},
        }

    def checkout_completed(
        self,
        plugin_id,
        mode="payment",
        session_id="cs_test_0001",
        subscription=None,
        email="u@example.com",
        customer="cus_test_0001",
        **kwargs,
    ):
        obj = {
            "id": session_id,
            "object": "checkout.session",
            "mode": mode,
            "client_reference_id": str(plugin_id),
            "customer": customer,
            "customer_details": {"email": email},
            "metadata": {"plugin_id": str(plugin_id)},
            "subscription": subscription,
        }
        return self._envelope("checkout.session.completed", obj, **kwargs)

    def subscription(
        self,
        event_type,
        subscription_id="sub_test_0001",
        status="active",
        trial_end=None,
        current_period_end=None,
        **kwargs,
    ):
        obj = {
            "id": subscription_id,
            "object": "subscription",
            "status": status,
            "trial_end": trial_end,
            "current_period_end": current_period_end,
            "customer": "cus_test_0001",
        }
        return self._envelope(event_type, obj, **kwargs)

    def invoice(self, event_type, subscription_id="sub_test_0001", nested=False, **kwargs):
        obj = {"id": "in_test_0001", "object": "invoice", "customer": "cus_test_0001"}
        if nested:
            obj["parent"] = {"subscription_details": {"subscription": subscription_id}}
        else:
            obj["subscription"] = subscription_id
        return self._envelope(event_type, obj, **kwargs)


def _sign(payload: bytes, secret: str, timestamp: Optional[int] = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode() + payload
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


# Fixtures


@pytest.fixture(autouse=True)
def clear_cache():
    """Start every test with empty rate limit counters."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def payloads():
    """Fixture for processor payload builders."""
    return PayloadFactory()


@pytest.fixture
def sign_payload():
    """Fixture returning a Stripe-Signature header builder."""

    def sign(payload: bytes, secret: Optional[str] = None, timestamp: Optional[int] = None):
        return _sign(payload, secret or settings.STRIPE_WEBHOOK_SECRET, timestamp)

    return sign


@pytest.fixture
def encode():
    """Fixture serializing a payload to the raw body the processor sends."""

    def _encode(payload: dict) -> bytes:
        return json.dumps(payload).encode("utf-8")

    return _encode


@pytest.fixture
def sample_plugin():
    """Fixture for a sample Plugin entity."""
    return Plugin.create(
        name="Acme Tool",
        slug="acme-tool",
        one_time_price_id="price_one_time",
        recurring_price_id="price_recurring",
        trial_period_days=14,
    )


@pytest.fixture
def plugin_repository(sample_plugin):
    """Fixture for an in-memory PluginRepository holding the sample plugin."""
    return InMemoryPluginRepository([sample_plugin])


@pytest.fixture
def license_repository():
    """Fixture for an in-memory LicenseRepository."""
    return InMemoryLicenseRepository()


@pytest.fixture
def event_ledger():
    """Fixture for an in-memory EventLedger."""
    return InMemoryEventLedger()


@pytest.fixture
def payment_gateway():
    """Fixture for a fake PaymentGateway."""
    return FakePaymentGateway()


@pytest.fixture
def notifier():
    """Fixture for a recording LicenseNotifier."""
    return RecordingNotifier()


@pytest.fixture
def recording_bus():
    """Fixture for a recording EventBus."""
    return RecordingEventBus()


@pytest.fixture
def atomic_runner():
    """Fixture for an atomic runner that calls straight through."""
    return run_inline


@pytest.fixture
def sample_license(sample_plugin):
    """Fixture for an active, non-expiring License entity."""
    return License.create(
        plugin_id=sample_plugin.id,
        license_key="A" * 32,
        status=LicenseStatus.ACTIVE,
        email="u@example.com",
    )


@pytest.fixture
def db_plugin(db):
    """Fixture for a Plugin saved in database."""
    from plugins.infrastructure.models import Plugin as PluginModel

    return PluginModel.objects.create(
        name="Acme Tool",
        slug="acme-tool",
        one_time_price_id="price_one_time",
        recurring_price_id="price_recurring",
        trial_period_days=14,
    )


@pytest.fixture
def other_db_plugin(db):
    """Fixture for a second Plugin saved in database."""
    from plugins.infrastructure.models import Plugin as PluginModel

    return PluginModel.objects.create(
        name="Other Plugin",
        slug="other-plugin",
        one_time_price_id="price_other",
    )


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def utc_now():
    """Fixture for a fixed evaluation time."""
    return datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

