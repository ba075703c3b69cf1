# services/report_print.py

"""
Printable single-report view. Browsers print it or save it as PDF; the
API itself does not render PDFs.
"""

import re
from html import escape

from fastapi import HTTPException

from core.authorization import EmployeeContext
from core.permission_helpers import require_capability
from core.permissions import DATA_EXPORT
from core.utils import parse_timestamp
from core.logging_config import logger
from services.report_export import format_capitalized, format_timestamp, load_export_rows
from services.reports import REPORT_NOT_FOUND


STYLE = """
body { font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; color: #333; }
.header { text-align: center; border-bottom: 2px solid #2563eb; margin-bottom: 24px; padding-bottom: 16px; }
.company { font-size: 14px; color: #666; }
h1 { font-size: 24px; color: #1e40af; margin: 10px 0; }
.badge { padding: 4px 12px; border-radius: 20px; font-size: 12px; font-weight: bold; text-transform: uppercase; }
.draft { background: #fef3c7; color: #92400e; }
.submitted { background: #d1fae5; color: #065f46; }
section { border: 1px solid #e5e7eb; border-radius: 8px; padding: 12px 16px; margin-bottom: 20px; }
h2 { font-size: 18px; border-bottom: 1px solid #d1d5db; padding-bottom: 4px; }
th { text-align: left; padding: 4px 16px 4px 0; color: #4b5563; }
.comments { background: #f9fafb; border-left: 4px solid #6b7280; padding: 12px; }
footer { text-align: center; font-size: 12px; color: #9ca3af; margin-top: 32px; }
@media print { section { break-inside: avoid; } }
"""


def _text(value, suffix: str = "", empty: str = "Not recorded") -> str:
    if value is None or value == "":
        return empty
    return escape(f"{value}{suffix}")


def _section(title: str, items: list) -> str:
    rows = "".join(f"<tr><th>{escape(label)}</th><td>{value}</td></tr>" for label, value in items)
    return f"<section><h2>{escape(title)}</h2><table>{rows}</table></section>"


def print_filename(row: dict) -> str:
    report, site = row["report"], row["site"]
    site_name = re.sub(r"[^a-zA-Z0-9]", "-", site.get("name") or report.get("site_name") or "unknown")
    return f"snow-report-{site_name}-{(report.get('date') or '')[:10]}.html"


def render_report_html(row: dict) -> str:
    r, site, emp, user, company = row["report"], row["site"], row["employee"], row["user"], row["company"]

    site_name = site.get("name") or r.get("site_name") or "Unknown site"
    day = parse_timestamp(r["date"])
    status = "draft" if r.get("is_draft") else "submitted"

    sections = [
        _section("Basic Information", [
            ("Date", escape(day.strftime("%B %d, %Y"))),
            ("Site", _text(site_name)),
            ("Site Address", _text(site.get("address"))),
            ("Priority", _text(format_capitalized(site.get("priority")))),
            ("Operator", _text(r.get("operator"))),
            ("Employee", _text(user.get("display_name") or user.get("email"))),
            ("Employee Number", _text(emp.get("employee_number"))),
            ("Dispatched For", _text(r.get("dispatched_for"), empty="Not set")),
            ("Start Time", _text(r.get("start_time"), empty="Not set")),
            ("Finish Time", _text(r.get("finish_time"), empty="Not set")),
        ]),
        _section("Weather Conditions", [
            ("Air Temperature", _text(r.get("air_temperature"), "°C")),
            ("Daytime High", _text(r.get("daytime_high"), "°C")),
            ("Daytime Low", _text(r.get("daytime_low"), "°C")),
            ("Temperature Trend", _text(format_capitalized(r.get("temperature_trend")))),
            ("Precipitation Type", _text(format_capitalized(r.get("precipitation_type")))),
            ("Conditions on Arrival", _text(format_capitalized(r.get("conditions_upon_arrival")))),
            ("Snowfall Accumulation", _text(r.get("snowfall_accumulation_cm"), " cm")),
        ]),
        _section("Work Details", [
            ("Snow Removal Method", _text(format_capitalized(r.get("snow_removal_method")))),
            ("Follow Up Plans", _text(format_capitalized(r.get("follow_up_plans")))),
            ("Truck", _text(r.get("truck"))),
            ("Tractor", _text(r.get("tractor"))),
            ("Handwork", _text(r.get("handwork"))),
        ]),
        _section("Material Usage", [
            ("Salt Used", _text(r.get("salt_used_kg"), " kg")),
            ("Deicing Material", _text(r.get("deicing_material_kg"), " kg")),
            ("Salt Alternative", _text(r.get("salt_alternative_kg"), " kg")),
        ]),
    ]

    if r.get("gps_latitude") is not None and r.get("gps_longitude") is not None:
        sections.append(_section("GPS Location", [
            ("Coordinates", escape(f"{r['gps_latitude']}, {r['gps_longitude']}")),
            ("Accuracy", _text(r.get("gps_accuracy"), " m")),
        ]))

    if r.get("comments"):
        sections.append(
            f'<section><h2>Comments</h2><div class="comments">{escape(r["comments"])}</div></section>'
        )

    sections.append(_section("Report Metadata", [
        ("Created", _text(format_timestamp(r.get("created_at")))),
        ("Updated", _text(format_timestamp(r.get("updated_at")))),
        ("Submitted", _text(format_timestamp(r.get("submitted_at")), empty="Not submitted")),
    ]))

    contact = " | ".join(escape(v) for v in (company.get("phone"), company.get("email")) if v)

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>Snow Removal Report - {escape(site_name)}</title>
<style>{STYLE}</style>
</head>
<body>
<div class="header">
<div class="company">{escape(company.get("name") or "Snow Removal Company")}<br>{escape(company.get("address") or "")}<br>{contact}</div>
<h1>Snow Removal Report</h1>
<div>{escape(site_name)} - {escape(day.strftime("%A, %B %d, %Y"))}</div>
<p><span class="badge {status}">{status.capitalize()}</span></p>
</div>
{"".join(sections)}
<footer>Generated by SlipCheck</footer>
</body>
</html>
"""


def print_report(context: EmployeeContext, report_id: str) -> tuple:
    """
    Managers and above; any report of their own company.
    Returns (html, filename). Other tenants' reports are 404.
    """
    require_capability(context, DATA_EXPORT)

    rows = load_export_rows(context, report_id=report_id)
    if not rows:
        raise HTTPException(404, REPORT_NOT_FOUND)

    logger.info(f"Report {report_id} rendered for printing by employee {context.employee_id}")
    return render_report_html(rows[0]), print_filename(rows[0])
