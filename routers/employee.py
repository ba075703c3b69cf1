# routers/employee.py

from fastapi import APIRouter, Depends, Query

from dependencies.auth import get_current_user, get_employee_context, CurrentUser
from core.authorization import EmployeeContext, resolve_employee_binding, route_guard
from services.employees import get_employee_profile

router = APIRouter(
    prefix="/employee",
    tags=["Employee"],
)


# -----------------------------------------------------
# GET /employee/profile
# -----------------------------------------------------
@router.get("/profile")
def employee_profile(context: EmployeeContext = Depends(get_employee_context)):
    return get_employee_profile(context)


# -----------------------------------------------------
# GET /employee/route-guard?path=/sites
# Where should the front end send this user for `path`?
# -----------------------------------------------------
@router.get("/route-guard")
def employee_route_guard(
    path: str = Query(..., description="Page route the user is navigating to"),
    current_user: CurrentUser = Depends(get_current_user),
):
    context = resolve_employee_binding(current_user.id, email=current_user.email, name=current_user.name)
    redirect = route_guard(path, context)

    return {
        "path": path,
        "bound": context is not None,
        "role": context.role if context else None,
        "company_id": context.company_id if context else None,
        "redirect": redirect,
    }
