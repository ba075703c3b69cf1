# tests/test_billing.py

"""
Tests for the billing gate and the Stripe webhook.
"""

import json
from datetime import date
from unittest.mock import patch

import pytest
import stripe

from core.config import settings
from core.subscription_helpers import has_active_subscription, trial_is_open
from services.billing import apply_stripe_event
from tests.fakes import seed_user


TODAY = date(2026, 1, 15)


# -----------------------------------------------------
# Billing gate
# -----------------------------------------------------
@pytest.mark.parametrize("record,expected", [
    ({"subscription_status": "active", "trial_ends_at": None}, True),
    ({"subscription_status": "trialing", "trial_ends_at": None}, True),
    ({"subscription_status": "past_due", "trial_ends_at": "2026-01-20T00:00:00+00:00"}, True),
    ({"subscription_status": "canceled", "trial_ends_at": "2026-01-10T00:00:00+00:00"}, False),
    ({"subscription_status": None, "trial_ends_at": None}, False),
    (None, False),
])
def test_has_active_subscription(record, expected):
    assert has_active_subscription(record, today=TODAY) is expected


def test_trial_runs_through_last_day():
    assert trial_is_open("2026-01-15T23:59:00Z", today=TODAY)
    assert trial_is_open("2026-01-15T00:00:01+00:00", today=TODAY)
    assert not trial_is_open("2026-01-14T23:59:59+00:00", today=TODAY)
    assert not trial_is_open("not a date", today=TODAY)


def test_session_creates_user_with_trial(client, db, login):
    login("user-1", "pat@example.com", "Pat")

    response = client.post("/users/session")

    assert response.status_code == 200
    body = response.json()
    assert body["has_active_subscription"] is True
    assert body["user"]["subscription_status"] is None
    assert len(db.rows("users")) == 1

    # Second sign-in returns the same row
    client.post("/users/session")
    assert len(db.rows("users")) == 1


# -----------------------------------------------------
# Stripe events
# -----------------------------------------------------
def test_checkout_completed_activates_user(db):
    seed_user(db, "user-1", "pat@example.com", trial_days=-5)
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {"metadata": {"userId": "user-1"}, "subscription": "sub_123", "customer": "cus_9"}},
    }

    result = apply_stripe_event(event)

    assert result["status"] == "processed"
    user = db.rows("users", id="user-1")[0]
    assert user["subscription_status"] == "active"
    assert user["stripe_subscription_id"] == "sub_123"
    assert user["stripe_customer_id"] == "cus_9"
    assert has_active_subscription(user)


def test_subscription_deleted_cancels(db):
    seed_user(db, "user-1", "pat@example.com", trial_days=-5, subscription_status="active")
    db.tables["users"][0]["stripe_subscription_id"] = "sub_123"

    result = apply_stripe_event({"type": "customer.subscription.deleted", "data": {"object": {"id": "sub_123"}}})

    assert result["subscription_status"] == "canceled"
    assert not has_active_subscription(db.rows("users")[0])


def test_subscription_updated_copies_status(db):
    seed_user(db, "user-1", "pat@example.com", subscription_status="active")
    db.tables["users"][0]["stripe_subscription_id"] = "sub_123"

    apply_stripe_event({"type": "customer.subscription.updated", "data": {"object": {"id": "sub_123", "status": "past_due"}}})

    assert db.rows("users")[0]["subscription_status"] == "past_due"


def test_unknown_subscription_is_ignored(db):
    result = apply_stripe_event({"type": "customer.subscription.updated", "data": {"object": {"id": "sub_404", "status": "active"}}})

    assert result["status"] == "ignored"


def test_unhandled_event_type_is_ignored(db):
    assert apply_stripe_event({"type": "invoice.paid", "data": {"object": {}}})["status"] == "ignored"


# -----------------------------------------------------
# Webhook endpoint
# -----------------------------------------------------
def test_webhook_requires_signature(client, db):
    response = client.post("/webhooks/stripe", content=b"{}")

    assert response.status_code == 400
    assert response.json()["detail"] == "No signature provided"


def test_webhook_rejects_bad_signature(client, db):
    with patch.object(settings, "STRIPE_WEBHOOK_SECRET", "whsec_test"), \
         patch("routers.stripe_webhooks.construct_webhook_event",
               side_effect=stripe.SignatureVerificationError("bad", "t=1,v1=x")):
        response = client.post("/webhooks/stripe", content=b"{}", headers={"stripe-signature": "t=1,v1=x"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid signature"


def test_webhook_applies_verified_event(client, db):
    seed_user(db, "user-1", "pat@example.com", trial_days=-5)
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {"metadata": {"userId": "user-1"}, "subscription": "sub_123"}},
    }

    with patch.object(settings, "STRIPE_WEBHOOK_SECRET", "whsec_test"), \
         patch("routers.stripe_webhooks.construct_webhook_event", return_value=event):
        response = client.post("/webhooks/stripe", content=json.dumps(event), headers={"stripe-signature": "t=1,v1=ok"})

    assert response.status_code == 200
    assert response.json()["status"] == "processed"
    assert db.rows("users")[0]["subscription_status"] == "active"


def test_webhook_without_secret_fails_in_production(client, db):
    with patch.object(settings, "ENV", "production"), patch.object(settings, "STRIPE_WEBHOOK_SECRET", None):
        response = client.post("/webhooks/stripe", content=b"{}", headers={"stripe-signature": "t=1,v1=x"})

    assert response.status_code == 500
