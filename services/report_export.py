# services/report_export.py

"""
CSV export of company reports for spreadsheet tools.

The column set and order are a compatibility contract with existing
spreadsheets; append new columns at the end only.
"""

import csv
import io
import re
from typing import Optional

from fastapi import HTTPException

from core.supabase_client import get_supabase_client
from core.authorization import EmployeeContext
from core.permission_helpers import require_capability
from core.permissions import DATA_EXPORT
from core.utils import parse_timestamp, utc_now
from core.logging_config import logger


# Excel needs the BOM to detect UTF-8
UTF8_BOM = "\ufeff"

EXPORT_HEADERS = [
    "Date",
    "Site Name",
    "Site Address",
    "Site Priority",
    "Site Size (sqft)",
    "Employee Number",
    "Employee Name",
    "Employee Email",
    "Operator",
    "Status",
    "Dispatched For",
    "Start Time",
    "Finish Time",
    "Air Temperature (°C)",
    "Daytime High (°C)",
    "Daytime Low (°C)",
    "Temperature Trend",
    "Snowfall (cm)",
    "Precipitation Type",
    "Conditions on Arrival",
    "Snow Removal Method",
    "Follow Up Plans",
    "Truck",
    "Tractor",
    "Handwork",
    "Salt Used (kg)",
    "Deicing Material (kg)",
    "Salt Alternative (kg)",
    "GPS Latitude",
    "GPS Longitude",
    "GPS Accuracy (m)",
    "Comments",
    "Created At",
    "Updated At",
    "Submitted At",
    "Company Name",
    "Company Address",
    "Company Phone",
    "Company Email",
]


# -----------------------------------------------------
# Cell formatting
# -----------------------------------------------------
def format_capitalized(value: Optional[str]) -> str:
    """lightSnow -> light Snow"""
    if not value:
        return ""
    return re.sub(r"([A-Z])", r" \1", value).strip()


def format_timestamp(value) -> str:
    if not value:
        return ""
    return parse_timestamp(value).strftime("%Y-%m-%d %H:%M:%S")


def clean_cell(value) -> str:
    """None -> "", newlines collapse to a space."""
    if value is None:
        return ""
    text = str(value).strip()
    return text.replace("\r\n", " ").replace("\n", " ")


def export_filename(now=None) -> str:
    now = now or utc_now()
    return f"snow-removal-reports-{now.strftime('%Y-%m-%d-%H%M')}.csv"


# -----------------------------------------------------
# Data loading
# -----------------------------------------------------
def _by_id(client, table: str, columns: str, ids) -> dict:
    ids = [i for i in set(ids) if i]
    if not ids:
        return {}
    rows = client.table(table).select(columns).in_("id", ids).execute().data or []
    return {row["id"]: row for row in rows}


def load_export_rows(
    context: EmployeeContext,
    search: Optional[str] = None,
    site: Optional[str] = None,
    employee: Optional[str] = None,
    status: Optional[str] = None,
    method: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    report_id: Optional[str] = None,
) -> list:
    """Reports joined with their site, employee, user and company."""
    client = get_supabase_client()

    query = (
        client.table("snow_removal_reports")
        .select("*")
        .eq("company_id", context.company_id)
    )

    if report_id:
        query = query.eq("id", report_id)
    if site:
        query = query.eq("site_id", site)
    if employee:
        query = query.eq("employee_id", employee)
    if status == "draft":
        query = query.eq("is_draft", True)
    elif status == "submitted":
        query = query.eq("is_draft", False)
    if method:
        query = query.eq("snow_removal_method", method)
    if date_from:
        query = query.gte("date", date_from)
    if date_to:
        query = query.lte("date", date_to)

    reports = query.order("date", desc=True).order("created_at", desc=True).execute().data or []
    if not reports:
        return []

    sites = _by_id(client, "sites", "id, name, address, priority, size_sqft", [r.get("site_id") for r in reports])
    employees = _by_id(client, "employees", "id, employee_number, user_id", [r.get("employee_id") for r in reports])
    users = _by_id(client, "users", "id, display_name, email", [e.get("user_id") for e in employees.values()])

    company = (
        client.table("companies")
        .select("name, address, phone, email")
        .eq("id", context.company_id)
        .limit(1)
        .execute()
    ).data
    company = company[0] if company else {}

    rows = []
    for report in reports:
        emp = employees.get(report.get("employee_id"), {})
        rows.append({
            "report": report,
            "site": sites.get(report.get("site_id"), {}),
            "employee": emp,
            "user": users.get(emp.get("user_id"), {}),
            "company": company,
        })

    if search:
        needle = search.lower()
        rows = [row for row in rows if _matches_search(row, needle)]

    return rows


def _matches_search(row: dict, needle: str) -> bool:
    fields = [
        row["site"].get("name"),
        row["report"].get("operator"),
        row["employee"].get("employee_number"),
        row["report"].get("site_name"),
        row["user"].get("display_name"),
    ]
    return any(needle in f.lower() for f in fields if f)


# -----------------------------------------------------
# CSV rendering
# -----------------------------------------------------
def report_to_cells(row: dict) -> list:
    r, site, emp, user, company = row["report"], row["site"], row["employee"], row["user"], row["company"]

    return [
        (r.get("date") or "")[:10],
        site.get("name") or r.get("site_name"),
        site.get("address"),
        site.get("priority"),
        site.get("size_sqft"),
        emp.get("employee_number"),
        user.get("display_name"),
        user.get("email"),
        r.get("operator"),
        "Draft" if r.get("is_draft") else "Submitted",
        r.get("dispatched_for"),
        r.get("start_time"),
        r.get("finish_time"),
        r.get("air_temperature"),
        r.get("daytime_high"),
        r.get("daytime_low"),
        format_capitalized(r.get("temperature_trend")),
        r.get("snowfall_accumulation_cm"),
        format_capitalized(r.get("precipitation_type")),
        format_capitalized(r.get("conditions_upon_arrival")),
        format_capitalized(r.get("snow_removal_method")),
        format_capitalized(r.get("follow_up_plans")),
        r.get("truck"),
        r.get("tractor"),
        r.get("handwork"),
        r.get("salt_used_kg"),
        r.get("deicing_material_kg"),
        r.get("salt_alternative_kg"),
        r.get("gps_latitude"),
        r.get("gps_longitude"),
        r.get("gps_accuracy"),
        r.get("comments"),
        format_timestamp(r.get("created_at")),
        format_timestamp(r.get("updated_at")),
        format_timestamp(r.get("submitted_at")),
        company.get("name"),
        company.get("address"),
        company.get("phone"),
        company.get("email"),
    ]


def render_csv(rows: list) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(EXPORT_HEADERS)
    for row in rows:
        writer.writerow([clean_cell(cell) for cell in report_to_cells(row)])

    return UTF8_BOM + buffer.getvalue()


def export_reports(context: EmployeeContext, **filters) -> str:
    """Managers and above only. 404 when nothing matches."""
    require_capability(context, DATA_EXPORT)

    rows = load_export_rows(context, **filters)
    if not rows:
        raise HTTPException(404, "No reports found to export")

    logger.info(f"Exporting {len(rows)} reports for company {context.company_id}")
    return render_csv(rows)
