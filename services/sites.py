# services/sites.py

from fastapi import HTTPException

from core.supabase_client import get_supabase_client
from core.authorization import EmployeeContext
from core.permission_helpers import can_access_site, has_capability, require_capability
from core.permissions import SITES_MANAGE
from core.errors import handle_supabase_error
from core.utils import sanitize, utc_now_iso
from core.logging_config import logger
from models.site import SiteCreate, SiteUpdate


SITE_NOT_FOUND = "Site not found"

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def _sort_sites(sites: list) -> list:
    return sorted(sites, key=lambda s: (PRIORITY_ORDER.get(s.get("priority"), 3), (s.get("name") or "").lower()))


# ============================================================
# LIST
# ============================================================
def list_sites(context: EmployeeContext) -> list:
    """
    Active company sites, high priority first.
    Employees only see the sites they are assigned to.
    """
    client = get_supabase_client()

    query = (
        client.table("sites")
        .select("*")
        .eq("company_id", context.company_id)
        .eq("is_active", True)
    )

    if not has_capability(context.role, SITES_MANAGE):
        if not context.site_assignments:
            return []
        query = query.in_("id", context.site_assignments)

    sites = query.execute().data or []
    return _sort_sites(sites)


# ============================================================
# GET
# ============================================================
def get_company_site(client, context: EmployeeContext, site_id: str) -> dict:
    """Active site of the caller's company, or 404."""
    rows = (
        client.table("sites")
        .select("*")
        .eq("id", site_id)
        .eq("company_id", context.company_id)
        .eq("is_active", True)
        .limit(1)
        .execute()
    ).data
    if not rows:
        raise HTTPException(404, SITE_NOT_FOUND)
    return rows[0]


def get_site(context: EmployeeContext, site_id: str) -> dict:
    # Unassigned sites are indistinguishable from missing ones
    if not can_access_site(context, site_id):
        raise HTTPException(404, SITE_NOT_FOUND)

    client = get_supabase_client()
    return get_company_site(client, context, site_id)


# ============================================================
# CREATE
# ============================================================
def create_site(context: EmployeeContext, payload: SiteCreate) -> dict:
    require_capability(context, SITES_MANAGE)

    client = get_supabase_client()

    company = (
        client.table("companies")
        .select("max_sites")
        .eq("id", context.company_id)
        .limit(1)
        .execute()
    ).data
    max_sites = company[0].get("max_sites") if company else None

    if max_sites is not None:
        existing = (
            client.table("sites")
            .select("id", count="exact")
            .eq("company_id", context.company_id)
            .eq("is_active", True)
            .execute()
        )
        if (existing.count or 0) >= max_sites:
            raise HTTPException(400, "Company has reached its site limit")

    site_data = sanitize(payload.model_dump(mode="json"))
    if not site_data.get("name") or not site_data.get("address"):
        raise HTTPException(400, "Name and address are required")

    site_data.update({
        "company_id": context.company_id,
        "is_active": True,
        "created_at": utc_now_iso(),
    })

    try:
        site = client.table("sites").insert(site_data).execute().data[0]
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create site")

    logger.info(f"Site {site['id']} created in company {context.company_id}")
    return site


# ============================================================
# UPDATE
# ============================================================
def update_site(context: EmployeeContext, site_id: str, payload: SiteUpdate) -> dict:
    client = get_supabase_client()
    get_company_site(client, context, site_id)
    require_capability(context, SITES_MANAGE)

    update_data = sanitize(payload.model_dump(mode="json", exclude_unset=True))
    for required in ("name", "address"):
        if required in update_data and not update_data[required]:
            raise HTTPException(400, "Name and address are required")
    if not update_data:
        raise HTTPException(400, "No fields to update")

    update_data["updated_at"] = utc_now_iso()

    try:
        rows = (
            client.table("sites")
            .update(update_data)
            .eq("id", site_id)
            .eq("company_id", context.company_id)
            .execute()
        ).data
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update site")

    if not rows:
        raise HTTPException(404, SITE_NOT_FOUND)

    return rows[0]


# ============================================================
# DELETE
# ============================================================
def delete_site(context: EmployeeContext, site_id: str) -> dict:
    """
    Soft delete when any report references the site, hard delete otherwise.
    """
    client = get_supabase_client()
    get_company_site(client, context, site_id)
    require_capability(context, SITES_MANAGE)

    referenced = (
        client.table("snow_removal_reports")
        .select("id")
        .eq("site_id", site_id)
        .limit(1)
        .execute()
    ).data

    if referenced:
        client.table("sites").update({
            "is_active": False,
            "updated_at": utc_now_iso(),
        }).eq("id", site_id).eq("company_id", context.company_id).execute()
        logger.info(f"Site {site_id} deactivated (has reports)")
        return {"success": True, "site_id": site_id, "deleted": "soft"}

    client.table("sites").delete().eq("id", site_id).eq("company_id", context.company_id).execute()
    logger.info(f"Site {site_id} deleted")
    return {"success": True, "site_id": site_id, "deleted": "hard"}
