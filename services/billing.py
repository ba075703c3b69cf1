# services/billing.py

"""
Applies Stripe webhook events to users.subscription_status, which in
turn drives the billing gate.
"""

from core.stripe_helpers import retrieve_subscription_status
from core.logging_config import logger
from services.users import update_subscription_status, find_user_id_by_subscription


HANDLED_EVENTS = (
    "checkout.session.completed",
    "customer.subscription.updated",
    "customer.subscription.deleted",
)


def apply_stripe_event(event: dict) -> dict:
    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}

    if event_type not in HANDLED_EVENTS:
        logger.info(f"Ignoring Stripe event {event_type}")
        return {"status": "ignored", "event": event_type}

    # -----------------------------------------------------
    # Checkout finished: the user id travels in metadata
    # -----------------------------------------------------
    if event_type == "checkout.session.completed":
        user_id = (obj.get("metadata") or {}).get("userId")
        subscription_id = obj.get("subscription")

        if not user_id or not subscription_id:
            logger.warning("checkout.session.completed without userId metadata or subscription")
            return {"status": "ignored", "reason": "missing_ids"}

        status = retrieve_subscription_status(subscription_id) or "active"
        updated = update_subscription_status(
            user_id,
            status,
            stripe_customer_id=obj.get("customer"),
            stripe_subscription_id=subscription_id,
        )
        return _result(event_type, user_id, status, updated)

    # -----------------------------------------------------
    # Subscription changes: resolve the user by subscription id
    # -----------------------------------------------------
    subscription_id = obj.get("id")
    user_id = find_user_id_by_subscription(subscription_id) if subscription_id else None

    if not user_id:
        logger.warning(f"{event_type}: no user for subscription {subscription_id}")
        return {"status": "ignored", "reason": "unknown_subscription"}

    if event_type == "customer.subscription.deleted":
        status = "canceled"
    else:
        status = obj.get("status") or "unknown"

    updated = update_subscription_status(user_id, status)
    return _result(event_type, user_id, status, updated)


def _result(event_type: str, user_id: str, status: str, updated: bool) -> dict:
    if updated:
        logger.info(f"{event_type}: user {user_id} subscription_status → {status}")
    else:
        logger.warning(f"{event_type}: user {user_id} not found")

    return {
        "status": "processed" if updated else "ignored",
        "event": event_type,
        "subscription_status": status,
    }
