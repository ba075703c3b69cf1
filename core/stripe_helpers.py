# core/stripe_helpers.py

from typing import Optional

import stripe
from fastapi import HTTPException

from core.config import settings
from core.logging_config import logger


def get_stripe_client():
    """Get the configured Stripe module."""
    if not settings.STRIPE_SECRET_KEY:
        raise HTTPException(500, "Stripe secret key not configured")

    stripe.api_key = settings.STRIPE_SECRET_KEY
    return stripe


def construct_webhook_event(payload: bytes, signature: str) -> dict:
    """
    Verify the Stripe-Signature header and parse the event.

    Raises:
        ValueError: malformed payload
        stripe.SignatureVerificationError: bad signature
    """
    return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)


def retrieve_subscription_status(subscription_id: str) -> Optional[str]:
    """
    Current status of a Stripe subscription, or None when Stripe is not
    configured or the lookup fails.
    """
    if not settings.STRIPE_SECRET_KEY:
        return None

    try:
        subscription = get_stripe_client().Subscription.retrieve(subscription_id)
        return subscription.status
    except stripe.StripeError as e:
        logger.error(f"Stripe API error retrieving subscription {subscription_id}: {e}")
        return None
