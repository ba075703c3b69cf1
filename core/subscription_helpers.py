# core/subscription_helpers.py

"""
Billing gate.

A user may mutate company resources while they have a paid subscription
(Stripe status active / trialing) or while their trial window is still
open. The gate is independent of the caller's company role.
"""

from typing import Optional, Dict, Any
from datetime import date
from fastapi import Depends, HTTPException

from dependencies.auth import get_current_user, get_employee_context, CurrentUser
from core.authorization import EmployeeContext
from services.users import ensure_user_record
from core.utils import parse_timestamp, utc_now
from core.logging_config import logger


ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")


def trial_is_open(trial_ends_at, today: Optional[date] = None) -> bool:
    """The trial runs through the whole of its last calendar day."""
    if not trial_ends_at:
        return False

    today = today or utc_now().date()

    try:
        ends = parse_timestamp(trial_ends_at).date()
    except ValueError:
        logger.warning(f"Unparseable trial_ends_at value: {trial_ends_at}")
        return False

    return ends >= today


def has_active_subscription(user_record: Optional[Dict[str, Any]], today: Optional[date] = None) -> bool:
    if not user_record:
        return False

    if user_record.get("subscription_status") in ACTIVE_SUBSCRIPTION_STATUSES:
        return True

    return trial_is_open(user_record.get("trial_ends_at"), today=today)


# -----------------------------------------------------
# FastAPI dependency
# -----------------------------------------------------
def requires_active_subscription(
    current_user: CurrentUser = Depends(get_current_user),
    context: EmployeeContext = Depends(get_employee_context),
) -> EmployeeContext:
    """
    Usage:
        @router.post("", dependencies=[Depends(requires_active_subscription)])

    The binding is resolved first so unbound callers get 404, not 402.
    The route's own get_employee_context reuses the cached result.
    """
    record = ensure_user_record(current_user.id, current_user.email, current_user.name)

    if not has_active_subscription(record):
        raise HTTPException(
            status_code=402,
            detail="An active subscription or trial is required",
        )

    return context
