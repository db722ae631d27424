# Overview: Renders a day's orders as downloadable PDF and Excel reports.

from __future__ import annotations

from collections import Counter
from datetime import date
from io import BytesIO
from xml.sax.saxutils import escape

from flask import current_app
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..constants import OrderStatus
from ..models import Order
from . import report_service

PDF_MIMETYPE = "application/pdf"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

REPORT_TITLE = "Beverage System Report"
SHEET_TITLE = "Orders Report"
SHEET_COLUMNS = (
    ("Order ID", 10),
    ("Employee", 24),
    ("Department", 18),
    ("Beverage", 22),
    ("Category", 12),
    ("Cup Size", 10),
    ("Sugar", 8),
    ("Status", 12),
    ("Date", 12),
)
HEADER_FILL = "E0E0E0"


def pdf_filename(day: date) -> str:
    return f"report-{day.isoformat()}.pdf"


def excel_filename(day: date) -> str:
    return f"report-{day.isoformat()}.xlsx"


def _summary(orders: list[Order]) -> dict:
    counts = Counter(o.status for o in orders)
    return {
        "total": len(orders),
        "pending": counts.get(OrderStatus.PENDING.value, 0),
        "fulfilled": counts.get(OrderStatus.FULFILLED.value, 0),
        "cancelled": counts.get(OrderStatus.CANCELLED.value, 0),
    }


def _employee_name(order: Order) -> str:
    return order.employee.full_name if order.employee else "Unknown"


def _department(order: Order) -> str:
    if order.employee and order.employee.department:
        return order.employee.department
    return "N/A"


def _beverage_name(order: Order) -> str:
    return order.beverage.name if order.beverage else "Unknown"


def _order_line(index: int, order: Order) -> str:
    return (
        f"{index}. {_employee_name(order)} ({_department(order)}) - "
        f"{_beverage_name(order)} [{order.cup_size}, {order.sugar_quantity} sugar] - {order.status}"
    )


def render_orders_pdf(day: date) -> BytesIO:
    """Title, summary counts, then one line per order."""
    orders = report_service.get_orders_for_day(day)
    summary = _summary(orders)

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.6 * inch,
        leftMargin=0.6 * inch,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
        title=REPORT_TITLE,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=20,
        alignment=TA_CENTER,
        spaceAfter=12,
    )

    elements = [
        Paragraph(REPORT_TITLE, title_style),
        Paragraph(f"Date: {day.isoformat()}", styles["Normal"]),
        Spacer(1, 0.2 * inch),
    ]

    summary_table = Table(
        [
            ["Total Orders", summary["total"]],
            ["Pending", summary["pending"]],
            ["Fulfilled", summary["fulfilled"]],
            ["Cancelled", summary["cancelled"]],
        ],
        colWidths=[2 * inch, 1.2 * inch],
    )
    summary_table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#" + HEADER_FILL)),
    ]))
    elements.append(summary_table)
    elements.append(Spacer(1, 0.3 * inch))

    elements.append(Paragraph("Orders", styles["Heading2"]))
    if not orders:
        elements.append(Paragraph("No orders for this date.", styles["Normal"]))
    for i, order in enumerate(orders, start=1):
        elements.append(Paragraph(escape(_order_line(i, order)), styles["Normal"]))

    doc.build(elements)
    buffer.seek(0)

    current_app.logger.info("PDF report rendered for %s (%s orders)", day, summary["total"])
    return buffer


def render_orders_workbook(day: date) -> BytesIO:
    orders = report_service.get_orders_for_day(day)

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append([name for name, _ in SHEET_COLUMNS])
    header_font = Font(bold=True)
    header_fill = PatternFill(start_color=HEADER_FILL, end_color=HEADER_FILL, fill_type="solid")
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill

    for idx, (_, width) in enumerate(SHEET_COLUMNS, start=1):
        ws.column_dimensions[ws.cell(row=1, column=idx).column_letter].width = width

    for order in orders:
        ws.append([
            order.id,
            _employee_name(order),
            _department(order),
            _beverage_name(order),
            order.beverage.category if order.beverage else "",
            order.cup_size,
            order.sugar_quantity,
            order.status,
            order.order_date.isoformat() if order.order_date else "",
        ])

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    current_app.logger.info("Excel report rendered for %s (%s orders)", day, len(orders))
    return buffer
