# Overview: Flask API routes for reports and exports; admin only.

"""
Reporting routes.

SECURITY: VIEW_REPORTS for every JSON report; EXPORT_REPORTS for the
PDF and Excel downloads.
"""

from flask import Blueprint, request, send_file

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..responses import success
from ..services import beverage_service, export_service, report_service
from ..time_utils import parse_iso_date, today

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")

MAX_REPORT_DAYS = 365


def _days_arg(default: int = 30) -> int:
    days = request.args.get("days", default, type=int)
    if days < 1 or days > MAX_REPORT_DAYS:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "days", "message": f"days must be between 1 and {MAX_REPORT_DAYS}"}],
        )
    return days


def _limit_arg(default: int = 10) -> int:
    return min(max(request.args.get("limit", default, type=int), 1), 100)


def _date_arg(name: str):
    try:
        return parse_iso_date(request.args.get(name))
    except ValueError:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": name, "message": f"{name} must be YYYY-MM-DD"}],
        )


@reports_bp.get("/dashboard")
@require_auth
@require_permission("VIEW_REPORTS")
def dashboard_route():
    return success(report_service.get_dashboard_stats(), "Dashboard statistics retrieved")


@reports_bp.get("/popular")
@require_auth
@require_permission("VIEW_REPORTS")
def popular_route():
    data = report_service.get_popular_beverages(
        _limit_arg(),
        start_date=_date_arg("start_date"),
        end_date=_date_arg("end_date"),
    )
    return success({"popularBeverages": data}, "Popular beverages retrieved")


@reports_bp.get("/inventory")
@require_auth
@require_permission("VIEW_REPORTS")
def inventory_route():
    return success(
        {"inventoryData": beverage_service.get_inventory_status()},
        "Inventory report retrieved",
    )


@reports_bp.get("/consumption")
@require_auth
@require_permission("VIEW_REPORTS")
def consumption_route():
    data = report_service.get_consumption_trends(_days_arg())
    return success({"consumptionData": data}, "Consumption trends retrieved")


@reports_bp.get("/employee-stats")
@require_auth
@require_permission("VIEW_REPORTS")
def employee_stats_route():
    return success(
        {"employeeStats": report_service.get_employee_stats()},
        "Employee statistics retrieved",
    )


@reports_bp.get("/top-consumers")
@require_auth
@require_permission("VIEW_REPORTS")
def top_consumers_route():
    return success(
        {"topConsumers": report_service.get_top_consumers(_limit_arg())},
        "Top consumers retrieved",
    )


@reports_bp.get("/fast-moving")
@require_auth
@require_permission("VIEW_REPORTS")
def fast_moving_route():
    return success(
        {"fastMovingItems": report_service.get_fast_moving_items(_limit_arg())},
        "Fast moving items retrieved",
    )


@reports_bp.get("/employee-activity")
@require_auth
@require_permission("VIEW_REPORTS")
def employee_activity_route():
    return success(
        {"activityData": report_service.get_employee_activity(_days_arg())},
        "Employee activity retrieved",
    )


@reports_bp.get("/daily-logins")
@require_auth
@require_permission("VIEW_REPORTS")
def daily_logins_route():
    return success(
        {"loginStats": report_service.get_daily_login_stats(_days_arg())},
        "Daily login statistics retrieved",
    )


@reports_bp.get("/online-users")
@require_auth
@require_permission("VIEW_REPORTS")
def online_users_route():
    users = report_service.get_online_users()
    return success({"onlineUsers": users, "count": len(users)}, "Online users retrieved")


@reports_bp.get("/stock-flow")
@require_auth
@require_permission("VIEW_REPORTS")
def stock_flow_route():
    data = report_service.get_stock_flow(
        beverage_id=request.args.get("beverage_id", type=int),
        days=_days_arg(),
    )
    return success({"stockFlow": data}, "Stock flow retrieved")


@reports_bp.get("/inventory-turnover")
@require_auth
@require_permission("VIEW_REPORTS")
def turnover_route():
    return success(
        {"turnoverData": report_service.get_inventory_turnover(_days_arg())},
        "Inventory turnover retrieved",
    )


@reports_bp.get("/analytics")
@require_auth
@require_permission("VIEW_REPORTS")
def analytics_route():
    return success(
        report_service.get_comprehensive_analytics(_days_arg()),
        "Analytics retrieved",
    )


# -- exports --

@reports_bp.get("/export/pdf")
@require_auth
@require_permission("EXPORT_REPORTS")
def export_pdf_route():
    """Download the day's orders as PDF. Query: date=YYYY-MM-DD (default today)."""
    day = _date_arg("date") or today()
    buffer = export_service.render_orders_pdf(day)
    return send_file(
        buffer,
        mimetype=export_service.PDF_MIMETYPE,
        as_attachment=True,
        download_name=export_service.pdf_filename(day),
    )


@reports_bp.get("/export/excel")
@require_auth
@require_permission("EXPORT_REPORTS")
def export_excel_route():
    day = _date_arg("date") or today()
    buffer = export_service.render_orders_workbook(day)
    return send_file(
        buffer,
        mimetype=export_service.XLSX_MIMETYPE,
        as_attachment=True,
        download_name=export_service.excel_filename(day),
    )
