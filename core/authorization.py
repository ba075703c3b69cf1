# core/authorization.py

"""
Authorization gate.

Resolves an authenticated user to their single active employee binding
(company + role + site assignments) and decides where page routes should
send users that are not yet bound to a company.

The resolved EmployeeContext is built once per request and passed into
every service call. Nothing here is cached between requests.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from core.supabase_client import get_supabase_client
from core.permissions import ROLES
from core.logging_config import logger


EMPLOYEE_COLUMNS = "id, user_id, company_id, role, site_assignments, employee_number, is_active"


# ============================================================
# Per-request employee context
# ============================================================
class EmployeeContext(BaseModel):
    employee_id: str
    user_id: str
    company_id: str
    role: str
    site_assignments: List[str] = Field(default_factory=list)
    employee_number: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


# ============================================================
# Binding lookup
# ============================================================
def fetch_active_binding(client, user_id: str) -> Optional[dict]:
    """
    Return the user's active employee row, or None.
    Store errors propagate; callers that must fail closed wrap this.
    """
    rows = (
        client.table("employees")
        .select(EMPLOYEE_COLUMNS)
        .eq("user_id", user_id)
        .eq("is_active", True)
        .limit(1)
        .execute()
    ).data or []

    return rows[0] if rows else None


def resolve_employee_binding(
    user_id: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
) -> Optional[EmployeeContext]:
    """
    Pure read: user id → EmployeeContext | None.

    Any lookup failure (store unavailable, malformed row, unknown role)
    is treated as "no binding" so the caller denies access instead of
    granting it.
    """
    try:
        client = get_supabase_client()
        if client is None:
            raise RuntimeError("Supabase client not configured")
        row = fetch_active_binding(client, user_id)
    except Exception as e:
        logger.error(f"Employee binding lookup failed for user {user_id}: {e}", exc_info=True)
        return None

    if not row:
        return None

    role = row.get("role")
    if role not in ROLES:
        logger.error(f"Employee {row.get('id')} has unrecognised role '{role}'")
        return None

    return EmployeeContext(
        employee_id=row["id"],
        user_id=user_id,
        company_id=row["company_id"],
        role=role,
        site_assignments=row.get("site_assignments") or [],
        employee_number=row.get("employee_number"),
        email=email,
        name=name,
    )


# ============================================================
# Page route guard
# ============================================================
DASHBOARD_PATH = "/dashboard"
ONBOARDING_PATH = "/onboarding"

# Exact matches
PUBLIC_PATHS = {"/", "/terms", "/privacy"}

# Prefix matches
PUBLIC_PREFIXES = ("/login", "/logout", "/signup", "/auth", "/api/auth", "/health", "/webhooks")
ONBOARDING_PREFIXES = ("/onboarding", "/join")


def _matches_prefix(path: str, prefixes) -> bool:
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def route_guard(path: str, context: Optional[EmployeeContext]) -> Optional[str]:
    """
    Return the path the client must be redirected to, or None to proceed.

    - public / auth routes always proceed
    - unbound users are sent to onboarding from every other route
    - bound users are sent to the dashboard from onboarding routes
    """
    path = "/" + (path or "").split("?", 1)[0].strip("/")

    if path in PUBLIC_PATHS or _matches_prefix(path, PUBLIC_PREFIXES):
        return None

    if _matches_prefix(path, ONBOARDING_PREFIXES):
        return DASHBOARD_PATH if context else None

    if context is None:
        return ONBOARDING_PATH

    return None
