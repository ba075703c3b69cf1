# routers/companies.py

from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user, get_employee_context, CurrentUser
from core.authorization import EmployeeContext
from core.subscription_helpers import requires_active_subscription
from core.rate_limiter import limit_mutation
from models.company import CompanyCreate, CompanyUpdate, JoinCompanyRequest
from models.employee import EmployeeUpdate
from models.invitation import InvitationCreate
from services import companies as company_service
from services import employees as employee_service
from services import invitations as invitation_service

router = APIRouter(
    prefix="/companies",
    tags=["Companies"],
)


# ============================================================
# CREATE COMPANY (onboarding, not billing gated)
# ============================================================
@router.post("/create", status_code=201)
def create_company(
    payload: CompanyCreate,
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Create a company and make the caller its owner.
    One user can belong to one company.
    """
    limit_mutation(current_user.id, "companies:create")

    result = company_service.create_company(
        current_user.id,
        current_user.email,
        current_user.name,
        payload,
    )
    return {"success": True, **result}


# ============================================================
# JOIN COMPANY (accept invitation)
# ============================================================
@router.post("/join")
def join_company(
    payload: JoinCompanyRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    limit_mutation(current_user.id, "companies:join")

    result = invitation_service.join_company(
        current_user.id,
        current_user.email,
        current_user.name,
        payload.invitationCode,
    )
    return {"success": True, "companyName": result["company"]["name"], **result}


# ============================================================
# COMPANY SETTINGS
# ============================================================
@router.get("/{company_id}")
def get_company(
    company_id: str,
    context: EmployeeContext = Depends(get_employee_context),
):
    return {"company": company_service.get_company(context, company_id)}


@router.put("/{company_id}", dependencies=[Depends(requires_active_subscription)])
def update_company(
    company_id: str,
    payload: CompanyUpdate,
    context: EmployeeContext = Depends(get_employee_context),
):
    return {"success": True, "company": company_service.update_company(context, company_id, payload)}


@router.delete("/{company_id}")
def deactivate_company(
    company_id: str,
    context: EmployeeContext = Depends(get_employee_context),
):
    """Owner only. Not billing gated so a lapsed owner can still shut down."""
    return company_service.deactivate_company(context, company_id)


# ============================================================
# EMPLOYEES
# ============================================================
@router.get("/{company_id}/employees")
def list_employees(
    company_id: str,
    context: EmployeeContext = Depends(get_employee_context),
):
    return {"employees": employee_service.list_employees(context, company_id)}


@router.patch(
    "/{company_id}/employees/{employee_id}",
    dependencies=[Depends(requires_active_subscription)],
)
def update_employee(
    company_id: str,
    employee_id: str,
    payload: EmployeeUpdate,
    context: EmployeeContext = Depends(get_employee_context),
):
    return {"success": True, "employee": employee_service.update_employee(context, company_id, employee_id, payload)}


@router.delete(
    "/{company_id}/employees/{employee_id}",
    dependencies=[Depends(requires_active_subscription)],
)
def deactivate_employee(
    company_id: str,
    employee_id: str,
    context: EmployeeContext = Depends(get_employee_context),
):
    return employee_service.deactivate_employee(context, company_id, employee_id)


# ============================================================
# INVITATIONS
# ============================================================
@router.get("/{company_id}/invitations")
def list_invitations(
    company_id: str,
    context: EmployeeContext = Depends(get_employee_context),
):
    return {"invitations": invitation_service.list_invitations(context, company_id)}


@router.post(
    "/{company_id}/invitations",
    status_code=201,
    dependencies=[Depends(requires_active_subscription)],
)
def create_invitation(
    company_id: str,
    payload: InvitationCreate,
    context: EmployeeContext = Depends(get_employee_context),
):
    """
    Admin / owner only. Returns the invitation code so it can be relayed
    by hand when the email could not be delivered (emailSent=false).
    """
    limit_mutation(context.user_id, "invitations:create")

    result = invitation_service.create_invitation(
        context,
        company_id,
        payload.email,
        payload.role.value,
    )
    return {"success": True, **result}


@router.delete(
    "/{company_id}/invitations/{invitation_id}",
    dependencies=[Depends(requires_active_subscription)],
)
def revoke_invitation(
    company_id: str,
    invitation_id: str,
    context: EmployeeContext = Depends(get_employee_context),
):
    return invitation_service.revoke_invitation(context, company_id, invitation_id)
