# Overview: Builds order and stock notifications and hands them to the hub.

from __future__ import annotations

from flask import current_app

from ..models import Beverage, Order
from .notification_hub import (
    ADMINS_ROOM,
    OFFICE_BOYS_ROOM,
    NotificationHub,
    user_room,
)
from office_beverages.time_utils import to_utc_z, utcnow

HUB_EXTENSION_KEY = "notification_hub"


def get_hub() -> NotificationHub | None:
    return current_app.extensions.get(HUB_EXTENSION_KEY)


def _notification(type_: str, title: str, message: str, **extra) -> dict:
    payload = {
        "type": type_,
        "title": title,
        "message": message,
    }
    payload.update(extra)
    payload["timestamp"] = to_utc_z(utcnow())
    return payload


def _publish(room: str, payload: dict) -> int:
    """
    Broadcast without letting a hub failure reach the caller.

    The triggering database work is already committed at this point.
    """
    hub = get_hub()
    if hub is None or not hub.is_running:
        return 0
    try:
        return hub.publish(room, payload)
    except Exception:
        current_app.logger.exception("Failed to publish %s notification to %s", payload.get("type"), room)
        return 0


def _employee_name(order: Order) -> str:
    return order.employee.full_name if order.employee else "An employee"


def _beverage_name(order: Order) -> str:
    return order.beverage.name if order.beverage else "beverage"


def notify_new_order(order: Order) -> int:
    payload = _notification(
        "new_order",
        "New order",
        f"{_employee_name(order)} ordered {_beverage_name(order)}",
        order={
            "id": order.id,
            "employee_name": order.employee.full_name if order.employee else None,
            "beverage_name": order.beverage.name if order.beverage else None,
            "cup_size": order.cup_size,
            "sugar_quantity": order.sugar_quantity,
            "add_ons": list(order.add_ons or []),
            "remarks": order.remarks,
            "created_at": to_utc_z(order.created_at),
        },
    )
    return _publish(OFFICE_BOYS_ROOM, payload)


def notify_order_fulfilled(order: Order) -> int:
    payload = _notification(
        "order_fulfilled",
        "Your order is ready",
        f"Your {_beverage_name(order)} is ready",
        order={
            "id": order.id,
            "beverage_name": order.beverage.name if order.beverage else None,
            "fulfilled_at": to_utc_z(order.fulfilled_at),
        },
    )
    return _publish(user_room(order.employee_id), payload)


def notify_order_cancelled(order: Order, cancelled_by: int) -> int:
    """
    Always tell the owner. When someone other than the owner cancelled,
    the fulfillment staff room hears about it as well.
    """
    order_info = {
        "id": order.id,
        "beverage_name": order.beverage.name if order.beverage else None,
    }
    payload = _notification(
        "order_cancelled",
        "Order cancelled",
        f"Order for {_beverage_name(order)} was cancelled",
        order=order_info,
    )
    delivered = _publish(user_room(order.employee_id), payload)

    if cancelled_by != order.employee_id:
        staff_payload = _notification(
            "order_cancelled",
            "Order cancelled",
            f"Order by {_employee_name(order)} for {_beverage_name(order)} was cancelled",
            order=order_info,
        )
        delivered += _publish(OFFICE_BOYS_ROOM, staff_payload)

    return delivered


def notify_low_stock(beverage: Beverage) -> int:
    payload = _notification(
        "low_stock",
        "Low stock alert",
        f"Stock is low: {beverage.name} ({beverage.stock_quantity} left)",
        beverage={
            "id": beverage.id,
            "name": beverage.name,
            "current_stock": beverage.stock_quantity,
            "min_stock": beverage.min_stock_alert,
        },
    )
    return _publish(ADMINS_ROOM, payload)
