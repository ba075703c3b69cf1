# services/users.py

"""
User record store: one row per human identity, independent of company
membership. Rows are created on first sign-in and never deleted.
"""

from typing import Optional, Dict, Any

from core.config import settings
from core.supabase_client import get_supabase_client
from core.errors import handle_supabase_error, is_unique_violation
from core.utils import days_from_now_iso, utc_now_iso
from core.logging_config import logger, mask_email


USER_COLUMNS = "id, email, display_name, trial_ends_at, subscription_status, stripe_customer_id, stripe_subscription_id, created_at"


def get_user_record(user_id: str) -> Optional[Dict[str, Any]]:
    client = get_supabase_client()

    rows = (
        client.table("users")
        .select(USER_COLUMNS)
        .eq("id", user_id)
        .limit(1)
        .execute()
    ).data or []

    return rows[0] if rows else None


def ensure_user_record(user_id: str, email: str, display_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Return the user's row, creating it with a fresh trial window on first
    sign-in. Existing rows are returned unchanged.
    """
    existing = get_user_record(user_id)
    if existing:
        return existing

    client = get_supabase_client()

    record = {
        "id": user_id,
        "email": email,
        "display_name": display_name,
        "trial_ends_at": days_from_now_iso(settings.TRIAL_PERIOD_DAYS),
        "subscription_status": None,
        "created_at": utc_now_iso(),
    }

    try:
        rows = client.table("users").insert(record).execute().data or []
    except Exception as e:
        # Two first requests raced; the other one created the row
        if is_unique_violation(e):
            existing = get_user_record(user_id)
            if existing:
                return existing
        raise

    logger.info(f"Created user record for {mask_email(email)}")
    return rows[0] if rows else record


def update_profile(user_id: str, email: str, display_name: str) -> Dict[str, Any]:
    """
    Change the caller's display name. The row is created first when the
    user has never opened a session.
    """
    ensure_user_record(user_id, email)
    client = get_supabase_client()

    try:
        rows = (
            client.table("users")
            .update({"display_name": display_name, "updated_at": utc_now_iso()})
            .eq("id", user_id)
            .execute()
        ).data or []
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update profile")

    logger.info(f"Profile updated for {mask_email(email)}")
    return rows[0] if rows else get_user_record(user_id)


def update_subscription_status(
    user_id: str,
    status: str,
    stripe_customer_id: Optional[str] = None,
    stripe_subscription_id: Optional[str] = None,
) -> bool:
    """
    Only mutator used by billing webhooks.
    Returns False when no user row matched.
    """
    client = get_supabase_client()

    data = {
        "subscription_status": status,
        "stripe_customer_id": stripe_customer_id,
        "stripe_subscription_id": stripe_subscription_id,
        "updated_at": utc_now_iso(),
    }
    data = {k: v for k, v in data.items() if v is not None}

    rows = client.table("users").update(data).eq("id", user_id).execute().data or []
    return bool(rows)


def find_user_id_by_subscription(stripe_subscription_id: str) -> Optional[str]:
    client = get_supabase_client()

    rows = (
        client.table("users")
        .select("id")
        .eq("stripe_subscription_id", stripe_subscription_id)
        .limit(1)
        .execute()
    ).data or []

    return rows[0]["id"] if rows else None
