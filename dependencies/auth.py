from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.supabase_client import get_supabase_client
from core.authorization import EmployeeContext, resolve_employee_binding


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (identity only, company comes from the binding)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


# ============================================================
# AUTH DECODING (Supabase: validates the session token)
# ============================================================
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:

    # Same response for "no token", "bad token" and "unknown account"
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials or not credentials.credentials:
        raise unauthorized

    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate token via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(credentials.credentials)
    except Exception:
        raise unauthorized

    if not auth_resp or not auth_resp.user or not auth_resp.user.email:
        raise unauthorized

    auth_user = auth_resp.user
    metadata = auth_user.user_metadata or {}

    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email.lower(),
        name=metadata.get("full_name") or metadata.get("name"),
    )


# ============================================================
# EMPLOYEE CONTEXT (authorization gate for API routes)
# ============================================================
def get_employee_context(
    current_user: CurrentUser = Depends(get_current_user),
) -> EmployeeContext:
    """
    Resolve the caller's active employee binding.
    Unbound callers get 404, not 403: absence is not a permission failure.
    """
    context = resolve_employee_binding(
        current_user.id,
        email=current_user.email,
        name=current_user.name,
    )
    if context is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    return context


# ============================================================
# CAPABILITY CHECK (DELEGATES TO permission_helpers)
# ============================================================
def requires_capability(capability: str):
    """
    Thin wrapper so routes can import from dependencies.auth.
    Real RBAC logic lives in core.permission_helpers.
    """
    from core.permission_helpers import requires_capability as checker
    return checker(capability)
