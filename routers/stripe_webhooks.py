# routers/stripe_webhooks.py

from fastapi import APIRouter, Request, HTTPException, Header
from typing import Optional
import json

import stripe

from core.config import settings
from core.logging_config import logger
from core.stripe_helpers import construct_webhook_event
from services.billing import apply_stripe_event

router = APIRouter(
    prefix="/webhooks",
    tags=["Webhooks"],
)


@router.post("/stripe")
async def handle_stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature")
):
    """
    Handle Stripe billing events:
    - checkout.session.completed
    - customer.subscription.updated
    - customer.subscription.deleted

    **Security:**
    - Requests without a Stripe-Signature header are rejected
    - The signature is verified with `STRIPE_WEBHOOK_SECRET` when it is set
    """
    body = await request.body()

    if not stripe_signature:
        raise HTTPException(400, "No signature provided")

    if settings.STRIPE_WEBHOOK_SECRET:
        try:
            construct_webhook_event(body, stripe_signature)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.error(f"Webhook signature verification failed: {e}")
            raise HTTPException(400, "Invalid signature")
    elif settings.ENV == "production":
        logger.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not set")
        raise HTTPException(500, "Webhook verification not configured")
    else:
        logger.warning("Stripe webhook secret not configured - signature verification disabled")

    try:
        event = json.loads(body.decode("utf-8"))
    except ValueError:
        raise HTTPException(400, "Invalid payload")

    logger.info(f"Received Stripe webhook event: {event.get('type')}")

    return apply_stripe_event(event)
