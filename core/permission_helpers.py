from fastapi import Depends, HTTPException

from dependencies.auth import get_employee_context
from core.authorization import EmployeeContext
from core.permissions import ROLES, ROLE_PERMISSIONS, SITES_MANAGE


# -----------------------------------------------------
# Capability evaluation
# -----------------------------------------------------
def has_capability(role: str, capability: str) -> bool:
    """Unknown roles have no capabilities."""
    return capability in ROLE_PERMISSIONS.get(role, [])


def role_at_least(role: str, minimum: str) -> bool:
    if role not in ROLES:
        return False
    return ROLES.index(role) >= ROLES.index(minimum)


def require_capability(context: EmployeeContext, capability: str):
    """Raise 403 when the resolved role lacks `capability`."""
    if not has_capability(context.role, capability):
        raise HTTPException(status_code=403, detail="Insufficient permissions")


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_capability(capability: str):
    """
    Usage:
        @router.post("", dependencies=[Depends(requires_capability(SITES_MANAGE))])
    """

    def dependency(context: EmployeeContext = Depends(get_employee_context)):
        require_capability(context, capability)
        return context

    return dependency


# ============================================================
# TENANT SCOPING HELPERS
# ============================================================

def ensure_same_company(context: EmployeeContext, company_id: str, resource: str = "Company"):
    """
    Another tenant's id looks exactly like a missing one.
    """
    if not company_id or company_id != context.company_id:
        raise HTTPException(status_code=404, detail=f"{resource} not found")


def can_access_site(context: EmployeeContext, site_id: str) -> bool:
    """
    Site managers see every company site. Everyone else only sees the
    sites assigned to them; an empty assignment list means no sites.
    """
    if has_capability(context.role, SITES_MANAGE):
        return True
    return site_id in (context.site_assignments or [])
