"""
Unit tests for the license state machine.
"""

import uuid
from datetime import datetime, timezone

import pytest

from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License
from licenses.domain.state_machine import IgnoreReason, LicenseStateMachine, TransitionAction
from payments.domain.processor_event import ProcessorEvent, SubscriptionSnapshot

T0 = 1_767_000_000
PERIOD_END = T0 + 30 * 86400
TRIAL_END = T0 + 14 * 86400


def at(timestamp):
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


@pytest.fixture
def plugin_id():
    """Fixture for a plugin id."""
    return uuid.uuid4()


@pytest.fixture
def subscribed_license(plugin_id):
    """Fixture for an active license tracking sub_test_0001."""
    return License.create(
        plugin_id=plugin_id,
        license_key="S" * 32,
        status=LicenseStatus.ACTIVE,
        expires_at=at(PERIOD_END),
        processor_subscription_id="sub_test_0001",
        last_event_at=at(T0),
    )


def event(payload):
    return ProcessorEvent.from_payload(payload)


class TestCheckoutCompleted:
    """Tests for checkout.session.completed decisions."""

    def test_one_time_creates_active_without_expiry(self, payloads, plugin_id):
        """Test a one-time purchase creates a lifetime license."""
        decision = LicenseStateMachine.decide(
            event(payloads.checkout_completed(plugin_id, mode="payment")), None
        )

        assert decision.action == TransitionAction.CREATE
        assert decision.status == LicenseStatus.ACTIVE
        assert decision.expires_at is None

    def test_one_time_replay_is_noop(self, payloads, plugin_id, subscribed_license):
        """Test a second delivery for the same session changes nothing."""
        decision = LicenseStateMachine.decide(
            event(payloads.checkout_completed(plugin_id, mode="payment")), subscribed_license
        )

        assert decision.action == TransitionAction.NOOP

    def test_subscription_trialing_creates_trial(self, payloads, plugin_id):
        """Test a trialing subscription creates a trial ending at trial_end."""
        snapshot = SubscriptionSnapshot("sub_test_0001", "trialing", trial_end=at(TRIAL_END))

        decision = LicenseStateMachine.decide(
            event(
                payloads.checkout_completed(
                    plugin_id, mode="subscription", subscription="sub_test_0001"
                )
            ),
            None,
            snapshot,
        )

        assert decision.action == TransitionAction.CREATE
        assert decision.status == LicenseStatus.TRIAL
        assert decision.expires_at == at(TRIAL_END)

    def test_subscription_active_creates_active(self, payloads, plugin_id):
        """Test a paid subscription creates an active license."""
        snapshot = SubscriptionSnapshot("sub_test_0001", "active")

        decision = LicenseStateMachine.decide(
            event(
                payloads.checkout_completed(
                    plugin_id, mode="subscription", subscription="sub_test_0001"
                )
            ),
            None,
            snapshot,
        )

        assert decision.status == LicenseStatus.ACTIVE
        assert decision.expires_at is None

    def test_subscription_unknown_state_creates_active(self, payloads, plugin_id):
        """Test creation falls back to active when the subscription state is unknown."""
        decision = LicenseStateMachine.decide(
            event(
                payloads.checkout_completed(
                    plugin_id, mode="subscription", subscription="sub_test_0001"
                )
            ),
            None,
            None,
        )

        assert decision.action == TransitionAction.CREATE
        assert decision.status == LicenseStatus.ACTIVE

    def test_subscription_without_reference_is_ignored(self, payloads, plugin_id):
        """Test a subscription checkout without a subscription id is ignored."""
        decision = LicenseStateMachine.decide(
            event(payloads.checkout_completed(plugin_id, mode="subscription")), None
        )

        assert decision.action == TransitionAction.IGNORE
        assert decision.reason == IgnoreReason.MISSING_REFERENCE

    def test_setup_mode_is_ignored(self, payloads, plugin_id):
        """Test checkout modes that sell nothing are ignored."""
        decision = LicenseStateMachine.decide(
            event(payloads.checkout_completed(plugin_id, mode="setup")), None
        )

        assert decision.reason == IgnoreReason.UNSUPPORTED_MODE


class TestSubscriptionChanges:
    """Tests for subscription and invoice decisions on an existing license."""

    @pytest.mark.parametrize(
        "status, expected",
        [
            ("active", LicenseStatus.ACTIVE),
            ("past_due", LicenseStatus.INACTIVE),
            ("canceled", LicenseStatus.CANCELED),
            ("unpaid", LicenseStatus.CANCELED),
        ],
    )
    def test_subscription_updated_maps_status_with_period_end(
        self, payloads, subscribed_license, status, expected
    ):
        """Test subscription status mapping and period-end expiry."""
        decision = LicenseStateMachine.decide(
            event(
                payloads.subscription(
                    "customer.subscription.updated",
                    status=status,
                    current_period_end=PERIOD_END + 86400,
                    created=T0 + 60,
                )
            ),
            subscribed_license,
        )

        assert decision.action == TransitionAction.UPDATE
        assert decision.status == expected
        assert decision.expires_at == at(PERIOD_END + 86400)

    def test_subscription_updated_trialing_uses_trial_end(self, payloads, subscribed_license):
        """Test trialing maps to trial expiring at trial_end."""
        decision = LicenseStateMachine.decide(
            event(
                payloads.subscription(
                    "customer.subscription.updated",
                    status="trialing",
                    trial_end=TRIAL_END,
                    current_period_end=PERIOD_END,
                    created=T0 + 60,
                )
            ),
            subscribed_license,
        )

        assert decision.status == LicenseStatus.TRIAL
        assert decision.expires_at == at(TRIAL_END)

    def test_subscription_updated_unmapped_status_is_ignored(self, payloads, subscribed_license):
        """Test statuses outside the mapping change nothing."""
        decision = LicenseStateMachine.decide(
            event(
                payloads.subscription(
                    "customer.subscription.updated", status="incomplete", created=T0 + 60
                )
            ),
            subscribed_license,
        )

        assert decision.reason == IgnoreReason.UNSUPPORTED_STATUS

    def test_subscription_deleted_cancels_keeping_expiry(self, payloads, subscribed_license):
        """Test deletion cancels and leaves expires_at alone."""
        decision = LicenseStateMachine.decide(
            event(payloads.subscription("customer.subscription.deleted", created=T0 + 60)),
            subscribed_license,
        )

        assert decision.status == LicenseStatus.CANCELED
        assert decision.expires_at == subscribed_license.expires_at

    def test_invoice_succeeded_activates(self, payloads, subscribed_license):
        """Test a paid invoice reactivates the license."""
        decision = LicenseStateMachine.decide(
            event(payloads.invoice("invoice.payment_succeeded", created=T0 + 60)),
            subscribed_license,
        )

        assert decision.status == LicenseStatus.ACTIVE
        assert decision.expires_at == subscribed_license.expires_at

    def test_invoice_failed_deactivates(self, payloads, subscribed_license):
        """Test a failed invoice makes the license inactive."""
        decision = LicenseStateMachine.decide(
            event(payloads.invoice("invoice.payment_failed", nested=True, created=T0 + 60)),
            subscribed_license,
        )

        assert decision.status == LicenseStatus.INACTIVE

    def test_event_without_license_is_orphan(self, payloads):
        """Test events for unknown subscriptions are ignored."""
        decision = LicenseStateMachine.decide(
            event(payloads.subscription("customer.subscription.deleted")), None
        )

        assert decision.reason == IgnoreReason.ORPHAN

    def test_invoice_without_subscription_is_ignored(self, payloads, subscribed_license):
        """Test one-off invoices do not touch licenses."""
        payload = payloads.invoice("invoice.payment_failed")
        payload["data"]["object"].pop("subscription")

        decision = LicenseStateMachine.decide(event(payload), subscribed_license)

        assert decision.reason == IgnoreReason.NOT_SUBSCRIPTION_LINKED

    def test_unknown_event_type_is_ignored(self, payloads, subscribed_license):
        """Test unrelated event types are acknowledged without effect."""
        decision = LicenseStateMachine.decide(
            event(payloads.subscription("customer.subscription.paused")), subscribed_license
        )

        assert decision.reason == IgnoreReason.UNKNOWN_TYPE


class TestOutOfOrderDelivery:
    """Tests for stale and terminal guards."""

    def test_older_event_is_stale(self, payloads, subscribed_license):
        """Test an event older than the last applied one is ignored."""
        decision = LicenseStateMachine.decide(
            event(payloads.invoice("invoice.payment_failed", created=T0 - 1)),
            subscribed_license,
        )

        assert decision.reason == IgnoreReason.STALE

    def test_equal_timestamp_applies(self, payloads, subscribed_license):
        """Test ties go to the later arrival."""
        decision = LicenseStateMachine.decide(
            event(payloads.invoice("invoice.payment_failed", created=T0)),
            subscribed_license,
        )

        assert decision.action == TransitionAction.UPDATE

    def test_ended_subscription_is_terminal(self, payloads, subscribed_license):
        """Test a late invoice cannot revive a license whose subscription ended."""
        canceled = subscribed_license.transition_to(
            LicenseStatus.CANCELED,
            subscribed_license.expires_at,
            at(T0 + 10),
            subscription_ended=True,
        )

        decision = LicenseStateMachine.decide(
            event(payloads.invoice("invoice.payment_succeeded", created=T0 + 20)),
            canceled,
        )

        assert decision.reason == IgnoreReason.TERMINAL

    def test_deleted_and_canceled_status_end_the_subscription(self, payloads, subscribed_license):
        """Test only a processor-side end marks the subscription as over."""
        deleted = LicenseStateMachine.decide(
            event(payloads.subscription("customer.subscription.deleted", created=T0 + 10)),
            subscribed_license,
        )
        canceled = LicenseStateMachine.decide(
            event(
                payloads.subscription(
                    "customer.subscription.updated", status="canceled", created=T0 + 10
                )
            ),
            subscribed_license,
        )
        unpaid = LicenseStateMachine.decide(
            event(
                payloads.subscription(
                    "customer.subscription.updated", status="unpaid", created=T0 + 10
                )
            ),
            subscribed_license,
        )

        assert deleted.ends_subscription is True
        assert canceled.ends_subscription is True
        assert unpaid.status == LicenseStatus.CANCELED
        assert unpaid.ends_subscription is False

    def test_unpaid_cancellation_recovers_on_payment(self, payloads, subscribed_license):
        """Test a later successful payment reactivates a license canceled as unpaid."""
        unpaid = subscribed_license.transition_to(
            LicenseStatus.CANCELED, subscribed_license.expires_at, at(T0 + 10)
        )

        decision = LicenseStateMachine.decide(
            event(payloads.invoice("invoice.payment_succeeded", created=T0 + 20)),
            unpaid,
        )

        assert decision.action == TransitionAction.UPDATE
        assert decision.status == LicenseStatus.ACTIVE

    def test_canceled_accepts_further_cancellation(self, payloads, subscribed_license):
        """Test cancel-to-cancel updates are still applied."""
        canceled = subscribed_license.transition_to(
            LicenseStatus.CANCELED, subscribed_license.expires_at, at(T0 + 10)
        )

        decision = LicenseStateMachine.decide(
            event(payloads.subscription("customer.subscription.deleted", created=T0 + 20)),
            canceled,
        )

        assert decision.action == TransitionAction.UPDATE
        assert decision.status == LicenseStatus.CANCELED

    def test_trial_then_deleted_ends_canceled(self, payloads, subscribed_license):
        """Test the trial-then-cancel sequence settles on canceled."""
        trial = subscribed_license.transition_to(
            LicenseStatus.TRIAL, at(TRIAL_END), at(T0 + 10)
        )

        decision = LicenseStateMachine.decide(
            event(payloads.subscription("customer.subscription.deleted", created=T0 + 20)),
            trial,
        )

        assert decision.status == LicenseStatus.CANCELED
        assert decision.expires_at == at(TRIAL_END)
