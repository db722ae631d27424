# Overview: Flask API routes for orders operations; parses input and returns JSON responses.

"""
Order routes.

SECURITY: All routes require authentication.
- Placing, listing and cancelling one's own orders requires PLACE_ORDER
- Listing everyone's orders requires VIEW_ALL_ORDERS
- Fulfilling (and status changes) require FULFILL_ORDERS
"""

from flask import Blueprint, g, request

from ..constants import OrderStatus
from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..models import Order
from ..responses import created, paginated, success
from ..services import order_service
from ..time_utils import parse_iso_date
from ..validation import ORDER_POLICY, enforce_rules_order, parse_order_status, validate_payload

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _date_arg(name: str):
    try:
        return parse_iso_date(request.args.get(name))
    except ValueError:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": name, "message": f"{name} must be YYYY-MM-DD"}],
        )


def _status_arg() -> str | None:
    status = request.args.get("status") or None
    if status is not None:
        parse_order_status(status)
    return status


def _dump(orders: list[Order]) -> list[dict]:
    return [o.to_dict() for o in orders]


@orders_bp.get("")
@require_auth
@require_permission("VIEW_ALL_ORDERS")
def list_orders_route():
    """
    List every order.

    Query params:
    - status, date: plain list
    - page, limit: paginated form, which also accepts employee_id,
      start_date and end_date
    """
    status = _status_arg()
    on_date = _date_arg("date")
    page = request.args.get("page", type=int)
    limit = request.args.get("limit", type=int)

    if page is None and limit is None:
        orders = order_service.list_orders(status=status, on_date=on_date)
        return success(_dump(orders), "Orders retrieved")

    orders, meta = order_service.list_orders_paginated(
        page,
        limit,
        status=status,
        employee_id=request.args.get("employee_id", type=int),
        on_date=on_date,
        start_date=_date_arg("start_date"),
        end_date=_date_arg("end_date"),
    )
    return paginated(_dump(orders), meta, "Orders retrieved")


@orders_bp.get("/today")
@require_auth
@require_permission("VIEW_ALL_ORDERS")
def today_orders_route():
    orders = order_service.list_today_orders(status=_status_arg())
    return success(_dump(orders), "Today's orders retrieved")


@orders_bp.get("/my-history")
@require_auth
@require_permission("PLACE_ORDER")
def my_history_route():
    orders = order_service.list_employee_history(g.current_user.id)
    return success(_dump(orders), "Order history retrieved")


@orders_bp.get("/my-today")
@require_auth
@require_permission("PLACE_ORDER")
def my_today_route():
    orders = order_service.list_employee_today(g.current_user.id)
    return success(_dump(orders), "Today's orders retrieved")


@orders_bp.get("/daily-limit")
@require_auth
@require_permission("PLACE_ORDER")
def daily_limit_route():
    return success(order_service.daily_limit_status(g.current_user.id), "Daily limit status")


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    order = order_service.get_order_for_user(order_id, g.current_user)
    return success(order.to_dict(), "Order retrieved")


@orders_bp.post("")
@require_auth
@require_permission("PLACE_ORDER")
def create_order_route():
    """
    Body: {"beverage_id": int, "cup_size"?, "sugar_quantity"?, "add_ons"?: [str], "remarks"?}
    """
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Order, payload=payload, policy=ORDER_POLICY, partial=False)
    enforce_rules_order(patch)

    order = order_service.create_order(g.current_user, patch)
    return created(order.to_dict(), "Order placed successfully")


@orders_bp.put("/<int:order_id>")
@require_auth
@require_permission("FULFILL_ORDERS")
def update_order_status_route(order_id: int):
    """Body: {"status": "fulfilled" | "cancelled"}"""
    payload = request.get_json(silent=True) or {}
    status = parse_order_status(payload.get("status"))

    order = order_service.update_order_status(order_id, status, g.current_user)
    return success(order.to_dict(), f"Order {status}")


@orders_bp.patch("/<int:order_id>/fulfill")
@require_auth
@require_permission("FULFILL_ORDERS")
def fulfill_order_route(order_id: int):
    order = order_service.fulfill_order(order_id, g.current_user)
    return success(order.to_dict(), f"Order {OrderStatus.FULFILLED.value}")


@orders_bp.patch("/<int:order_id>/cancel")
@require_auth
@require_permission("PLACE_ORDER")
def cancel_order_route(order_id: int):
    order = order_service.cancel_order(order_id, g.current_user)
    return success(order.to_dict(), f"Order {OrderStatus.CANCELLED.value}")
