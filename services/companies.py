# services/companies.py

"""
Company provisioning and settings.

Creating a company also creates the caller's owner binding. The store
offers no multi-row transaction through PostgREST, so a failed binding
insert is compensated by deleting the new company row. When that delete
also fails the company is left without an owner; such orphans are found
and deactivated by reconcile_orphaned_companies().
"""

from datetime import timedelta
from typing import List

from fastapi import HTTPException

from core.config import settings
from core.supabase_client import get_supabase_client
from core.authorization import EmployeeContext, fetch_active_binding
from core.permission_helpers import ensure_same_company, require_capability
from core.permissions import COMPANY_SETTINGS, COMPANY_DELETE
from core.errors import handle_supabase_error, is_unique_violation
from core.utils import sanitize, is_valid_slug, utc_now, utc_now_iso, days_from_now_iso
from core.logging_config import logger
from services.users import ensure_user_record
from models.company import CompanyCreate, CompanyUpdate
from models.enums import CompanyRole, SubscriptionPlan


ALREADY_MEMBER = "You are already a member of a company. Each user can only belong to one company."
SLUG_TAKEN = "Company slug is already taken. Please choose another."

OWNER_EMPLOYEE_NUMBER = "OWNER001"

# Partial unique index: one active binding per user
ACTIVE_BINDING_INDEX = "employees_one_active_binding_per_user"
SLUG_CONSTRAINT = "companies_slug_key"


# ============================================================
# CREATE COMPANY (+ owner binding)
# ============================================================
def create_company(user_id: str, email: str, display_name: str, payload: CompanyCreate) -> dict:
    client = get_supabase_client()

    slug = payload.slug.strip()
    if not is_valid_slug(slug):
        raise HTTPException(400, "Slug may only contain lowercase letters, numbers and hyphens")

    # Employee rows reference users(id)
    ensure_user_record(user_id, email, display_name)

    # One user, one company
    if fetch_active_binding(client, user_id):
        raise HTTPException(400, ALREADY_MEMBER)

    existing = (
        client.table("companies")
        .select("id")
        .eq("slug", slug)
        .limit(1)
        .execute()
    ).data
    if existing:
        raise HTTPException(400, SLUG_TAKEN)

    company_data = sanitize({
        "name": payload.name,
        "slug": slug,
        "address": payload.address,
        "phone": payload.phone,
        "email": payload.email,
    })
    company_data.update({
        "subscription_plan": SubscriptionPlan.trial.value,
        "subscription_status": "active",
        "trial_ends_at": days_from_now_iso(settings.TRIAL_PERIOD_DAYS),
        "max_employees": settings.DEFAULT_MAX_EMPLOYEES,
        "max_sites": settings.DEFAULT_MAX_SITES,
        "is_active": True,
        "created_at": utc_now_iso(),
    })

    # Slug race: the unique constraint decides the winner
    try:
        company = client.table("companies").insert(company_data).execute().data[0]
    except Exception as e:
        if is_unique_violation(e):
            raise HTTPException(400, SLUG_TAKEN)
        raise handle_supabase_error(e, "Failed to create company")

    employee_data = {
        "company_id": company["id"],
        "user_id": user_id,
        "employee_number": OWNER_EMPLOYEE_NUMBER,
        "role": CompanyRole.owner.value,
        "site_assignments": [],
        "is_active": True,
        "created_at": utc_now_iso(),
    }

    try:
        employee = client.table("employees").insert(employee_data).execute().data[0]
    except Exception as e:
        rollback_company(client, company["id"])
        if is_unique_violation(e, ACTIVE_BINDING_INDEX):
            raise HTTPException(400, ALREADY_MEMBER)
        raise handle_supabase_error(e, "Failed to create company")

    logger.info(f"Company '{slug}' ({company['id']}) created by user {user_id}")

    return {"company": company, "employee": employee}


def rollback_company(client, company_id: str) -> bool:
    """
    Compensating delete after a failed owner binding insert.
    Never raises; a failure leaves an orphan for reconciliation.
    """
    try:
        client.table("companies").delete().eq("id", company_id).execute()
        logger.warning(f"Rolled back company {company_id} after owner binding failed")
        return True
    except Exception as e:
        logger.error(f"Rollback of company {company_id} failed, company is orphaned: {e}", exc_info=True)
        return False


# ============================================================
# READ / UPDATE / DEACTIVATE
# ============================================================
def get_company(context: EmployeeContext, company_id: str) -> dict:
    ensure_same_company(context, company_id)

    client = get_supabase_client()
    rows = (
        client.table("companies")
        .select("*")
        .eq("id", company_id)
        .limit(1)
        .execute()
    ).data

    if not rows:
        raise HTTPException(404, "Company not found")

    return rows[0]


def update_company(context: EmployeeContext, company_id: str, payload: CompanyUpdate) -> dict:
    ensure_same_company(context, company_id)
    require_capability(context, COMPANY_SETTINGS)

    update_data = sanitize(payload.model_dump(exclude_unset=True))
    if "name" in update_data and not update_data["name"]:
        raise HTTPException(400, "Company name is required")
    if not update_data:
        raise HTTPException(400, "No fields to update")

    update_data["updated_at"] = utc_now_iso()

    client = get_supabase_client()
    try:
        rows = (
            client.table("companies")
            .update(update_data)
            .eq("id", company_id)
            .execute()
        ).data
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update company")

    if not rows:
        raise HTTPException(404, "Company not found")

    logger.info(f"Company {company_id} settings updated by employee {context.employee_id}")
    return rows[0]


def deactivate_company(context: EmployeeContext, company_id: str) -> dict:
    """
    Soft delete. Every binding is deactivated with it so members are free
    to create or join another company; reports keep their attribution.
    """
    ensure_same_company(context, company_id)
    require_capability(context, COMPANY_DELETE)

    client = get_supabase_client()
    now = utc_now_iso()

    # Bindings before the company: if the second write fails the company
    # is an orphan and reconciliation deactivates it.
    try:
        released = (
            client.table("employees")
            .update({"is_active": False, "updated_at": now})
            .eq("company_id", company_id)
            .eq("is_active", True)
            .execute()
        ).data or []
    except Exception as e:
        raise handle_supabase_error(e, "Failed to deactivate company")

    try:
        client.table("companies").update({"is_active": False, "updated_at": now}).eq("id", company_id).execute()
    except Exception as e:
        logger.error(
            f"Company {company_id} lost its {len(released)} bindings but is still active; "
            "orphan reconciliation will deactivate it"
        )
        raise handle_supabase_error(e, "Failed to deactivate company")

    logger.warning(f"Company {company_id} deactivated by owner {context.user_id} ({len(released)} bindings released)")
    return {"success": True, "company_id": company_id, "employees_deactivated": len(released)}


# ============================================================
# RECONCILIATION (orphaned companies)
# ============================================================
def find_orphaned_companies(grace_minutes: int = None) -> List[dict]:
    """
    Active companies with zero active employee bindings.
    Companies younger than the grace window are skipped so a creation in
    progress is not mistaken for an orphan.
    """
    if grace_minutes is None:
        grace_minutes = settings.ORPHAN_GRACE_MINUTES

    client = get_supabase_client()
    cutoff = (utc_now() - timedelta(minutes=grace_minutes)).isoformat()

    companies = (
        client.table("companies")
        .select("id, name, slug, created_at")
        .eq("is_active", True)
        .lt("created_at", cutoff)
        .execute()
    ).data or []

    if not companies:
        return []

    bound = (
        client.table("employees")
        .select("company_id")
        .eq("is_active", True)
        .in_("company_id", [c["id"] for c in companies])
        .execute()
    ).data or []
    bound_ids = {row["company_id"] for row in bound}

    return [c for c in companies if c["id"] not in bound_ids]


def reconcile_orphaned_companies(grace_minutes: int = None) -> List[str]:
    """Deactivate orphaned companies; returns their ids."""
    orphans = find_orphaned_companies(grace_minutes)
    if not orphans:
        logger.info("Reconciliation: no orphaned companies")
        return []

    client = get_supabase_client()
    ids = [c["id"] for c in orphans]

    client.table("companies").update({
        "is_active": False,
        "updated_at": utc_now_iso(),
    }).in_("id", ids).execute()

    for company in orphans:
        logger.warning(f"Reconciliation: deactivated orphaned company '{company['slug']}' ({company['id']})")

    return ids
