# routers/sites.py

from fastapi import APIRouter, Depends

from dependencies.auth import get_employee_context
from core.authorization import EmployeeContext
from core.subscription_helpers import requires_active_subscription
from models.site import SiteCreate, SiteUpdate
from services import sites as site_service

router = APIRouter(
    prefix="/sites",
    tags=["Sites"],
)


@router.get("")
def list_sites(context: EmployeeContext = Depends(get_employee_context)):
    """Employees only see their assigned sites."""
    return {"sites": site_service.list_sites(context)}


@router.get("/{site_id}")
def get_site(site_id: str, context: EmployeeContext = Depends(get_employee_context)):
    return {"site": site_service.get_site(context, site_id)}


@router.post("", status_code=201, dependencies=[Depends(requires_active_subscription)])
def create_site(payload: SiteCreate, context: EmployeeContext = Depends(get_employee_context)):
    return {"success": True, "site": site_service.create_site(context, payload)}


@router.put("/{site_id}", dependencies=[Depends(requires_active_subscription)])
def update_site(site_id: str, payload: SiteUpdate, context: EmployeeContext = Depends(get_employee_context)):
    return {"success": True, "site": site_service.update_site(context, site_id, payload)}


@router.delete("/{site_id}", dependencies=[Depends(requires_active_subscription)])
def delete_site(site_id: str, context: EmployeeContext = Depends(get_employee_context)):
    return site_service.delete_site(context, site_id)
