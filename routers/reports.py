# routers/reports.py

from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response

from dependencies.auth import get_employee_context, requires_capability
from core.authorization import EmployeeContext
from core.subscription_helpers import requires_active_subscription
from core.permissions import DATA_EXPORT
from models.enums import ReportStatus
from models.report import ReportCreate, ReportUpdate
from services import reports as report_service
from services.report_export import export_reports, export_filename
from services.report_print import print_report

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


# ============================================================
# LIST
# ============================================================
@router.get("")
def list_reports(
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD (inclusive)"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD (inclusive)"),
    site_id: Optional[str] = None,
    is_draft: Optional[bool] = None,
    admin: bool = Query(False, description="All company reports (managers and above)"),
    context: EmployeeContext = Depends(get_employee_context),
):
    reports = report_service.list_reports(
        context,
        start_date=start_date,
        end_date=end_date,
        site_id=site_id,
        is_draft=is_draft,
        admin_view=admin,
    )
    return {"reports": reports}


# ============================================================
# EXPORT (declared before /{report_id})
# ============================================================
@router.get("/export")
def export_reports_csv(
    search: Optional[str] = None,
    site: Optional[str] = None,
    employee: Optional[str] = None,
    status: Optional[ReportStatus] = None,
    method: Optional[str] = None,
    dateFrom: Optional[str] = None,
    dateTo: Optional[str] = None,
    context: EmployeeContext = Depends(requires_capability(DATA_EXPORT)),
):
    content = export_reports(
        context,
        search=search,
        site=site,
        employee=employee,
        status=status.value if status else None,
        method=method,
        date_from=dateFrom,
        date_to=dateTo,
    )

    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename()}"',
            "Cache-Control": "no-cache",
        },
    )


# ============================================================
# SINGLE REPORT
# ============================================================
@router.post("", status_code=201, dependencies=[Depends(requires_active_subscription)])
def create_report(payload: ReportCreate, context: EmployeeContext = Depends(get_employee_context)):
    """
    Weather fields left empty are filled from an observed reading when the
    site has coordinates. `weather_auto_filled` is false when no reading
    was available.
    """
    return {"success": True, **report_service.create_report(context, payload)}


@router.get("/{report_id}")
def get_report(report_id: str, context: EmployeeContext = Depends(get_employee_context)):
    return {"report": report_service.get_report(context, report_id)}


@router.get("/{report_id}/print", response_class=HTMLResponse)
def print_report_html(
    report_id: str,
    context: EmployeeContext = Depends(requires_capability(DATA_EXPORT)),
):
    """Printable HTML of one company report (managers and above)."""
    content, filename = print_report(context, report_id)

    return HTMLResponse(
        content=content,
        headers={
            "Content-Disposition": f'inline; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )


@router.put("/{report_id}", dependencies=[Depends(requires_active_subscription)])
def update_report(report_id: str, payload: ReportUpdate, context: EmployeeContext = Depends(get_employee_context)):
    return {"success": True, "report": report_service.update_report(context, report_id, payload)}


@router.delete("/{report_id}", dependencies=[Depends(requires_active_subscription)])
def delete_report(report_id: str, context: EmployeeContext = Depends(get_employee_context)):
    return report_service.delete_report(context, report_id)
