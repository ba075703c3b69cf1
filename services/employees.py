# services/employees.py

from fastapi import HTTPException

from core.supabase_client import get_supabase_client
from core.authorization import EmployeeContext
from core.permission_helpers import ensure_same_company, require_capability, role_at_least
from core.permissions import EMPLOYEES_MANAGE
from core.errors import handle_supabase_error
from core.utils import utc_now_iso
from core.logging_config import logger
from models.employee import EmployeeUpdate
from models.enums import CompanyRole


PROFILE_COMPANY_COLUMNS = "id, name, slug, subscription_plan, subscription_status, trial_ends_at, is_active"


# ============================================================
# PROFILE
# ============================================================
def get_employee_profile(context: EmployeeContext) -> dict:
    client = get_supabase_client()

    employee = (
        client.table("employees")
        .select("*")
        .eq("id", context.employee_id)
        .eq("is_active", True)
        .limit(1)
        .execute()
    ).data
    if not employee:
        raise HTTPException(404, "Employee profile not found")

    company = (
        client.table("companies")
        .select(PROFILE_COMPANY_COLUMNS)
        .eq("id", context.company_id)
        .limit(1)
        .execute()
    ).data

    return {"employee": employee[0], "company": company[0] if company else None}


# ============================================================
# LIST
# ============================================================
def list_employees(context: EmployeeContext, company_id: str) -> list:
    ensure_same_company(context, company_id)
    require_capability(context, EMPLOYEES_MANAGE)

    client = get_supabase_client()
    employees = (
        client.table("employees")
        .select("*")
        .eq("company_id", company_id)
        .eq("is_active", True)
        .order("created_at")
        .execute()
    ).data or []

    user_ids = [e["user_id"] for e in employees if e.get("user_id")]
    users = {}
    if user_ids:
        rows = (
            client.table("users")
            .select("id, email, display_name")
            .in_("id", user_ids)
            .execute()
        ).data or []
        users = {u["id"]: u for u in rows}

    for employee in employees:
        user = users.get(employee.get("user_id"), {})
        employee["email"] = user.get("email")
        employee["display_name"] = user.get("display_name")

    return employees


def _get_company_employee(client, company_id: str, employee_id: str) -> dict:
    rows = (
        client.table("employees")
        .select("*")
        .eq("id", employee_id)
        .eq("company_id", company_id)
        .eq("is_active", True)
        .limit(1)
        .execute()
    ).data
    if not rows:
        raise HTTPException(404, "Employee not found")
    return rows[0]


def _ensure_can_manage(context: EmployeeContext, target: dict):
    """
    Nobody manages the owner; only the owner manages admins.
    """
    if target["role"] == CompanyRole.owner.value:
        raise HTTPException(403, "The company owner cannot be changed")
    if target["role"] == CompanyRole.admin.value and not role_at_least(context.role, CompanyRole.owner.value):
        raise HTTPException(403, "Insufficient permissions")


# ============================================================
# UPDATE (role / site assignments)
# ============================================================
def update_employee(context: EmployeeContext, company_id: str, employee_id: str, payload: EmployeeUpdate) -> dict:
    ensure_same_company(context, company_id)
    require_capability(context, EMPLOYEES_MANAGE)

    client = get_supabase_client()
    target = _get_company_employee(client, company_id, employee_id)
    _ensure_can_manage(context, target)

    update_data = {}

    if payload.role is not None:
        new_role = payload.role.value
        if new_role == CompanyRole.admin.value and not role_at_least(context.role, CompanyRole.owner.value):
            raise HTTPException(403, "Insufficient permissions")
        update_data["role"] = new_role

    if payload.site_assignments is not None:
        site_ids = list(dict.fromkeys(payload.site_assignments))
        if site_ids:
            known = (
                client.table("sites")
                .select("id")
                .eq("company_id", company_id)
                .eq("is_active", True)
                .in_("id", site_ids)
                .execute()
            ).data or []
            if len(known) != len(site_ids):
                raise HTTPException(400, "Unknown site in assignments")
        update_data["site_assignments"] = site_ids

    if not update_data:
        raise HTTPException(400, "No fields to update")

    update_data["updated_at"] = utc_now_iso()

    try:
        rows = (
            client.table("employees")
            .update(update_data)
            .eq("id", employee_id)
            .eq("company_id", company_id)
            .execute()
        ).data
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update employee")

    logger.info(f"Employee {employee_id} updated by {context.employee_id}: {sorted(update_data.keys())}")
    return rows[0] if rows else dict(target, **update_data)


# ============================================================
# DEACTIVATE
# ============================================================
def deactivate_employee(context: EmployeeContext, company_id: str, employee_id: str) -> dict:
    """
    Bindings are never hard-deleted so reports keep their attribution.
    """
    ensure_same_company(context, company_id)
    require_capability(context, EMPLOYEES_MANAGE)

    if employee_id == context.employee_id:
        raise HTTPException(400, "You cannot remove yourself from the company")

    client = get_supabase_client()
    target = _get_company_employee(client, company_id, employee_id)
    _ensure_can_manage(context, target)

    client.table("employees").update({
        "is_active": False,
        "updated_at": utc_now_iso(),
    }).eq("id", employee_id).eq("company_id", company_id).execute()

    logger.info(f"Employee {employee_id} deactivated by {context.employee_id}")
    return {"success": True, "employee_id": employee_id}
