# services/reports.py

from typing import Optional

from fastapi import HTTPException

from core.supabase_client import get_supabase_client
from core.authorization import EmployeeContext
from core.permission_helpers import can_access_site, has_capability
from core.permissions import REPORTS_VIEW_ALL
from core.errors import handle_supabase_error, is_unique_violation
from core.utils import sanitize, utc_now_iso
from core.logging_config import logger
from models.report import ReportCreate, ReportUpdate
from services.sites import get_company_site, SITE_NOT_FOUND
from services.weather import get_weather, WeatherUnavailableError


REPORT_NOT_FOUND = "Report not found"
DAILY_REPORT_CONSTRAINT = "unique_daily_report"

# Drafts may be incomplete; submitted reports may not
REQUIRED_ON_SUBMIT = (
    "dispatched_for",
    "start_time",
    "conditions_upon_arrival",
    "follow_up_plans",
    "precipitation_type",
    "snow_removal_method",
)


def _ensure_complete(report: dict):
    missing = [field for field in REQUIRED_ON_SUBMIT if report.get(field) in (None, "")]
    if missing:
        raise HTTPException(400, f"Cannot submit an incomplete report. Missing: {', '.join(missing)}")


def _scoped_query(client, context: EmployeeContext):
    """Company reports; employees only see their own."""
    query = (
        client.table("snow_removal_reports")
        .select("*")
        .eq("company_id", context.company_id)
    )
    if not has_capability(context.role, REPORTS_VIEW_ALL):
        query = query.eq("employee_id", context.employee_id)
    return query


def _get_report(client, context: EmployeeContext, report_id: str) -> dict:
    rows = _scoped_query(client, context).eq("id", report_id).limit(1).execute().data
    if not rows:
        raise HTTPException(404, REPORT_NOT_FOUND)
    return rows[0]


def _get_own_report(client, context: EmployeeContext, report_id: str) -> dict:
    """
    Reports are edited and deleted only by their author, whatever the
    role. Anyone else's report is reported as not found.
    """
    rows = (
        client.table("snow_removal_reports")
        .select("*")
        .eq("id", report_id)
        .eq("company_id", context.company_id)
        .eq("employee_id", context.employee_id)
        .limit(1)
        .execute()
    ).data
    if not rows:
        raise HTTPException(404, REPORT_NOT_FOUND)
    return rows[0]


# ============================================================
# LIST / GET
# ============================================================
def list_reports(
    context: EmployeeContext,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    site_id: Optional[str] = None,
    is_draft: Optional[bool] = None,
    admin_view: bool = False,
) -> list:
    if admin_view and not has_capability(context.role, REPORTS_VIEW_ALL):
        raise HTTPException(403, "Insufficient permissions")

    client = get_supabase_client()
    query = _scoped_query(client, context)

    if start_date:
        query = query.gte("date", start_date)
    if end_date:
        query = query.lte("date", end_date)
    if site_id:
        query = query.eq("site_id", site_id)
    if is_draft is not None:
        query = query.eq("is_draft", is_draft)

    query = query.order("date", desc=True).order("created_at", desc=True)
    return query.execute().data or []


def get_report(context: EmployeeContext, report_id: str) -> dict:
    client = get_supabase_client()
    return _get_report(client, context, report_id)


# ============================================================
# CREATE
# ============================================================
def _auto_fill_weather(site: dict, payload: ReportCreate, data: dict) -> bool:
    """
    Fill empty weather fields from an observed reading.
    When no reading is available the report records that explicitly.
    """
    try:
        weather = get_weather(site["latitude"], site["longitude"], payload.date)
    except WeatherUnavailableError as e:
        logger.info(f"No weather for site {site['id']} on {payload.date}: {e}")
        data["weather_data"] = {"api_source": "unavailable", "reason": str(e)}
        return False

    filled = {
        "air_temperature": weather["temperature"],
        "daytime_high": weather["daytime_high"],
        "daytime_low": weather["daytime_low"],
        "snowfall_accumulation_cm": weather["snowfall"],
        "precipitation_type": weather["conditions"],
        "conditions_upon_arrival": weather["conditions"],
        "temperature_trend": weather["trend"],
    }
    for field, value in filled.items():
        if data.get(field) is None and value is not None:
            data[field] = value

    data["weather_data"] = {
        "api_source": weather["api_source"],
        "temperature": weather["temperature"],
        "precipitation": weather["precipitation"],
        "wind_speed": weather["wind_speed"],
        "conditions": weather["conditions"],
        "forecast_confidence": weather["forecast_confidence"],
    }
    return True


def create_report(context: EmployeeContext, payload: ReportCreate) -> dict:
    if not can_access_site(context, payload.site_id):
        raise HTTPException(404, SITE_NOT_FOUND)

    client = get_supabase_client()
    site = get_company_site(client, context, payload.site_id)

    data = sanitize(payload.model_dump(mode="json", exclude_none=True))

    weather_auto_filled = False
    has_form_weather = payload.air_temperature is not None or payload.weather_data
    if site.get("latitude") is not None and site.get("longitude") is not None and not has_form_weather:
        weather_auto_filled = _auto_fill_weather(site, payload, data)

    now = utc_now_iso()
    data.update({
        "company_id": context.company_id,
        "employee_id": context.employee_id,
        "operator": context.name or context.email or "Unknown",
        "site_name": site["name"],
        "created_at": now,
        "updated_at": now,
    })
    if not payload.is_draft:
        _ensure_complete(data)
        data["submitted_at"] = now

    try:
        report = client.table("snow_removal_reports").insert(data).execute().data[0]
    except Exception as e:
        if is_unique_violation(e, DAILY_REPORT_CONSTRAINT):
            raise HTTPException(400, "A report already exists for this site and date")
        raise handle_supabase_error(e, "Failed to create report")

    logger.info(f"Report {report['id']} created by employee {context.employee_id} for site {site['id']}")
    return {"report": report, "weather_auto_filled": weather_auto_filled}


# ============================================================
# UPDATE / DELETE (own drafts only)
# ============================================================
def update_report(context: EmployeeContext, report_id: str, payload: ReportUpdate) -> dict:
    client = get_supabase_client()
    report = _get_own_report(client, context, report_id)

    if not report.get("is_draft"):
        raise HTTPException(403, "Can only update draft reports")

    update_data = sanitize(payload.model_dump(mode="json", exclude_unset=True))
    if not update_data:
        raise HTTPException(400, "No fields to update")

    now = utc_now_iso()
    update_data["updated_at"] = now
    if update_data.get("is_draft") is False:
        _ensure_complete(dict(report, **update_data))
        update_data["submitted_at"] = now

    try:
        rows = (
            client.table("snow_removal_reports")
            .update(update_data)
            .eq("id", report_id)
            .eq("company_id", context.company_id)
            .eq("employee_id", context.employee_id)
            .eq("is_draft", True)
            .execute()
        ).data
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update report")

    # Submitted by a concurrent request in the meantime
    if not rows:
        raise HTTPException(403, "Can only update draft reports")

    return rows[0]


def delete_report(context: EmployeeContext, report_id: str) -> dict:
    client = get_supabase_client()
    report = _get_own_report(client, context, report_id)

    if not report.get("is_draft"):
        raise HTTPException(403, "Can only delete draft reports")

    (
        client.table("snow_removal_reports")
        .delete()
        .eq("id", report_id)
        .eq("company_id", context.company_id)
        .eq("employee_id", context.employee_id)
        .eq("is_draft", True)
        .execute()
    )

    logger.info(f"Draft report {report_id} deleted by employee {context.employee_id}")
    return {"success": True, "report_id": report_id}
