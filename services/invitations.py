# services/invitations.py

"""
Invitation ledger: issuing, listing, revoking and accepting invitations.

An invitation is pending while accepted_at is null and expires_at is in
the future. Acceptance is a single-use transition guarded by a
conditional update, so of two concurrent joins with the same code exactly
one observes a claimed row.
"""

from typing import Optional

from fastapi import HTTPException

from core.config import settings
from core.supabase_client import get_supabase_client
from core.authorization import EmployeeContext, fetch_active_binding
from core.permission_helpers import ensure_same_company, require_capability
from core.permissions import EMPLOYEES_MANAGE, INVITABLE_ROLES
from core.errors import handle_supabase_error, is_unique_violation
from core.email_utils import send_invitation_email
from core.utils import (
    days_from_now_iso,
    format_employee_number,
    generate_invitation_code,
    normalize_email,
    normalize_invitation_code,
    parse_timestamp,
    utc_now,
    utc_now_iso,
)
from core.logging_config import logger, mask_email
from services.users import ensure_user_record
from models.enums import InvitationStatus


INVITATION_NOT_FOUND = "Invitation not found"
ALREADY_ACCEPTED = "Invitation has already been accepted"
INVITATION_EXPIRED = "Invitation has expired. Please request a new invitation."
ALREADY_BELONGS = "You already belong to a company"

CODE_ATTEMPTS = 5
EMPLOYEE_NUMBER_ATTEMPTS = 5

ACTIVE_BINDING_INDEX = "employees_one_active_binding_per_user"
EMPLOYEE_NUMBER_CONSTRAINT = "unique_employee_number_company"


def invitation_status(invitation: dict, now=None) -> str:
    if invitation.get("accepted_at"):
        return InvitationStatus.accepted.value
    now = now or utc_now()
    if parse_timestamp(invitation["expires_at"]) <= now:
        return InvitationStatus.expired.value
    return InvitationStatus.pending.value


# ============================================================
# ISSUE
# ============================================================
def create_invitation(context: EmployeeContext, company_id: str, email: str, role: str) -> dict:
    ensure_same_company(context, company_id)
    require_capability(context, EMPLOYEES_MANAGE)

    if role not in INVITABLE_ROLES:
        raise HTTPException(400, "Invalid role")

    email = normalize_email(email)
    client = get_supabase_client()
    now = utc_now_iso()

    # -----------------------------------------------------
    # Duplicate pending invitation for (company, email)
    # -----------------------------------------------------
    pending = (
        client.table("company_invitations")
        .select("id")
        .eq("company_id", company_id)
        .eq("email", email)
        .is_("accepted_at", "null")
        .gt("expires_at", now)
        .limit(1)
        .execute()
    ).data
    if pending:
        raise HTTPException(400, "User already has a pending invitation")

    # -----------------------------------------------------
    # Already an active member of this company
    # -----------------------------------------------------
    users = (
        client.table("users")
        .select("id")
        .eq("email", email)
        .limit(1)
        .execute()
    ).data
    if users:
        member = (
            client.table("employees")
            .select("id")
            .eq("user_id", users[0]["id"])
            .eq("company_id", company_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        ).data
        if member:
            raise HTTPException(400, "User is already a member of this company")

    company = (
        client.table("companies")
        .select("id, name")
        .eq("id", company_id)
        .limit(1)
        .execute()
    ).data
    if not company:
        raise HTTPException(404, "Company not found")
    company = company[0]

    # invited_by references users(id)
    ensure_user_record(context.user_id, context.email, context.name)

    invitation = _insert_invitation(client, {
        "company_id": company_id,
        "email": email,
        "role": role,
        "invited_by": context.user_id,
        "expires_at": days_from_now_iso(settings.INVITATION_EXPIRY_DAYS),
        "created_at": now,
    })

    logger.info(f"Invitation {invitation['id']} issued to {mask_email(email)} for company {company_id} as {role}")

    # -----------------------------------------------------
    # Best-effort notification; the invitation row stands regardless
    # -----------------------------------------------------
    email_sent = False
    try:
        email_sent = send_invitation_email(
            email=email,
            company_name=company["name"],
            invitation_code=invitation["invitation_code"],
            inviter_name=context.name or context.email or "Your team",
            role=role,
            expires_at=invitation["expires_at"],
        )
    except Exception as e:
        logger.error(f"Invitation email to {mask_email(email)} failed: {e}")

    return {"invitation": invitation, "emailSent": email_sent}


def _insert_invitation(client, data: dict) -> dict:
    """Insert with a fresh code, retrying on the global code constraint."""
    last_error = None
    for _ in range(CODE_ATTEMPTS):
        row = dict(data, invitation_code=generate_invitation_code())
        try:
            return client.table("company_invitations").insert(row).execute().data[0]
        except Exception as e:
            if not is_unique_violation(e, "invitation_code"):
                raise handle_supabase_error(e, "Failed to create invitation")
            last_error = e
            logger.warning("Invitation code collision, regenerating")

    raise handle_supabase_error(last_error, "Failed to create invitation")


# ============================================================
# LIST / REVOKE
# ============================================================
def list_invitations(context: EmployeeContext, company_id: str) -> list:
    ensure_same_company(context, company_id)
    require_capability(context, EMPLOYEES_MANAGE)

    client = get_supabase_client()
    rows = (
        client.table("company_invitations")
        .select("*")
        .eq("company_id", company_id)
        .order("created_at", desc=True)
        .execute()
    ).data or []

    now = utc_now()
    for row in rows:
        row["status"] = invitation_status(row, now)

    return rows


def revoke_invitation(context: EmployeeContext, company_id: str, invitation_id: str) -> dict:
    """Expire a pending invitation immediately."""
    ensure_same_company(context, company_id)
    require_capability(context, EMPLOYEES_MANAGE)

    client = get_supabase_client()
    rows = (
        client.table("company_invitations")
        .select("*")
        .eq("id", invitation_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    ).data
    if not rows:
        raise HTTPException(404, INVITATION_NOT_FOUND)

    if rows[0].get("accepted_at"):
        raise HTTPException(400, "Accepted invitations cannot be revoked")

    revoked = (
        client.table("company_invitations")
        .update({"expires_at": utc_now_iso()})
        .eq("id", invitation_id)
        .eq("company_id", company_id)
        .is_("accepted_at", "null")
        .execute()
    ).data
    if not revoked:
        raise HTTPException(400, ALREADY_ACCEPTED)

    logger.info(f"Invitation {invitation_id} revoked by employee {context.employee_id}")
    return {"success": True, "invitation_id": invitation_id}


# ============================================================
# ACCEPT (join company)
# ============================================================
def join_company(user_id: str, email: str, display_name: Optional[str], invitation_code: str) -> dict:
    code = normalize_invitation_code(invitation_code)
    if not code:
        raise HTTPException(400, "Invitation code is required")

    client = get_supabase_client()

    rows = (
        client.table("company_invitations")
        .select("*")
        .eq("invitation_code", code)
        .eq("email", normalize_email(email))
        .limit(1)
        .execute()
    ).data
    if not rows:
        raise HTTPException(404, INVITATION_NOT_FOUND)
    invitation = rows[0]

    if invitation.get("accepted_at"):
        raise HTTPException(400, ALREADY_ACCEPTED)

    if parse_timestamp(invitation["expires_at"]) <= utc_now():
        raise HTTPException(400, INVITATION_EXPIRED)

    ensure_user_record(user_id, email, display_name)

    if fetch_active_binding(client, user_id):
        raise HTTPException(400, ALREADY_BELONGS)

    company_rows = (
        client.table("companies")
        .select("id, name, slug, is_active, max_employees")
        .eq("id", invitation["company_id"])
        .limit(1)
        .execute()
    ).data
    if not company_rows or not company_rows[0].get("is_active"):
        raise HTTPException(400, "This company is no longer active")
    company = company_rows[0]

    # -----------------------------------------------------
    # Seat limit
    # -----------------------------------------------------
    seats = (
        client.table("employees")
        .select("id", count="exact")
        .eq("company_id", company["id"])
        .eq("is_active", True)
        .execute()
    )
    if (seats.count or 0) >= company["max_employees"]:
        raise HTTPException(400, "Company has reached its employee limit")

    # -----------------------------------------------------
    # 1) Claim: accepted_at null → now, at most once
    # -----------------------------------------------------
    claimed_at = utc_now_iso()
    claimed = (
        client.table("company_invitations")
        .update({"accepted_at": claimed_at})
        .eq("id", invitation["id"])
        .is_("accepted_at", "null")
        .gt("expires_at", claimed_at)
        .execute()
    ).data
    if not claimed:
        raise HTTPException(400, ALREADY_ACCEPTED)

    # -----------------------------------------------------
    # 2) Binding; release the claim if it cannot be created
    # -----------------------------------------------------
    try:
        employee = _insert_binding(client, company["id"], user_id, invitation["role"])
    except Exception as e:
        _release_claim(client, invitation["id"], claimed_at)
        if isinstance(e, HTTPException):
            raise
        if is_unique_violation(e, ACTIVE_BINDING_INDEX):
            raise HTTPException(400, ALREADY_BELONGS)
        raise handle_supabase_error(e, "Failed to join company")

    logger.info(f"User {user_id} joined company {company['id']} as {invitation['role']} via invitation {invitation['id']}")

    return {
        "company": {"id": company["id"], "name": company["name"], "slug": company["slug"]},
        "employee": employee,
    }


def _insert_binding(client, company_id: str, user_id: str, role: str) -> dict:
    total = (
        client.table("employees")
        .select("id", count="exact")
        .eq("company_id", company_id)
        .execute()
    ).count or 0

    sequence = total + 1
    for _ in range(EMPLOYEE_NUMBER_ATTEMPTS):
        try:
            return client.table("employees").insert({
                "company_id": company_id,
                "user_id": user_id,
                "employee_number": format_employee_number(sequence),
                "role": role,
                "site_assignments": [],
                "is_active": True,
                "created_at": utc_now_iso(),
            }).execute().data[0]
        except Exception as e:
            if not is_unique_violation(e, EMPLOYEE_NUMBER_CONSTRAINT):
                raise
            sequence += 1

    raise HTTPException(500, "Could not assign an employee number")


def _release_claim(client, invitation_id: str, claimed_at: str):
    try:
        client.table("company_invitations").update({"accepted_at": None}).eq("id", invitation_id).eq("accepted_at", claimed_at).execute()
        logger.warning(f"Released claim on invitation {invitation_id} after binding failed")
    except Exception as e:
        logger.error(f"Could not release claim on invitation {invitation_id}: {e}", exc_info=True)
