# Overview: Service-layer operations for orders; daily limit, fulfillment and cancellation.

"""
Order Service

Order placement enforces the per-employee daily limit. Fulfillment and
cancellation are compare-and-set transitions out of "pending", so two
concurrent requests for the same order cannot both succeed.

Fulfillment runs as a single database transaction:
    pending -> fulfilled, stock - 1 (clamped at 0), order_deduction row
The notification broadcast happens only after the commit.
"""

from __future__ import annotations

from datetime import date

from flask import current_app

from ..constants import ACTIVE_ORDER_STATUSES, OrderStatus, TransactionType
from ..errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Order, User
from ..permissions import role_has_permission
from . import beverage_service, inventory_service, notification_service
from .concurrency import compare_and_set, lock_for_update
from .pagination import paginate_query
from office_beverages.time_utils import day_bounds, today, utcnow

def max_orders_per_day() -> int:
    return current_app.config["MAX_ORDERS_PER_DAY"]


def count_orders_for_day(employee_id: int, day: date | None = None) -> int:
    """Orders that count toward the limit: pending or fulfilled on that day."""
    start, end = day_bounds(day or today())
    return (
        db.session.query(Order)
        .filter(
            Order.employee_id == employee_id,
            Order.order_date >= start,
            Order.order_date < end,
            Order.status.in_(ACTIVE_ORDER_STATUSES),
        )
        .count()
    )


def daily_limit_status(employee_id: int) -> dict:
    limit = max_orders_per_day()
    count = count_orders_for_day(employee_id)
    return {
        "canOrder": count < limit,
        "ordersToday": count,
        "remaining": max(limit - count, 0),
        "limit": limit,
    }


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


def get_order_for_user(order_id: int, user: User) -> Order:
    """Staff may read any order; employees only their own."""
    order = get_order(order_id)
    if order.employee_id != user.id and not role_has_permission(user.role, "VIEW_ALL_ORDERS"):
        raise AuthorizationError("You can only view your own orders")
    return order


def create_order(employee: User, patch: dict) -> Order:
    """
    Place an order for employee from a validated patch.

    Raises:
        ConflictError: daily limit reached
        NotFoundError: beverage does not exist
        ValidationError: beverage inactive or out of stock
    """
    # Serialize concurrent submissions by the same employee
    lock_for_update(db.session.query(User).filter(User.id == employee.id)).first()

    limit = max_orders_per_day()
    if count_orders_for_day(employee.id) >= limit:
        raise ConflictError(f"You have reached your daily order limit ({limit} orders per day)")

    beverage = beverage_service.get_beverage(patch["beverage_id"])
    if not beverage.is_active:
        raise ValidationError("Beverage is not available")
    if beverage.stock_quantity <= 0:
        raise ValidationError("Beverage is out of stock")

    order = Order(
        employee_id=employee.id,
        beverage_id=beverage.id,
        order_date=today(),
        cup_size=patch.get("cup_size") or "small",
        sugar_quantity=patch.get("sugar_quantity") or "none",
        add_ons=patch.get("add_ons") or [],
        remarks=patch.get("remarks") or None,
        status=OrderStatus.PENDING.value,
    )
    db.session.add(order)
    db.session.commit()

    current_app.logger.info(
        "Order %s created by %s for %s", order.id, employee.username, beverage.name
    )

    notification_service.notify_new_order(order)
    return order


def fulfill_order(order_id: int, actor: User) -> Order:
    order = get_order(order_id)
    if order.beverage_id is None and order.status == OrderStatus.PENDING.value:
        raise ValidationError("Beverage is not available")
    now = utcnow()

    if not compare_and_set(
        Order,
        order.id,
        expected={"status": OrderStatus.PENDING.value},
        values={"status": OrderStatus.FULFILLED.value, "fulfilled_by": actor.id, "fulfilled_at": now},
    ):
        db.session.rollback()
        order = get_order(order_id)
        raise ConflictError(f"Order is already {order.status}")

    beverage = beverage_service.apply_stock_delta(order.beverage_id, -1)
    inventory_service.record_transaction(
        beverage_id=order.beverage_id,
        transaction_type=TransactionType.ORDER_DEDUCTION.value,
        quantity=-1,
        reason="Order fulfillment",
        order_id=order.id,
        performed_by=actor.id,
    )
    db.session.commit()
    db.session.refresh(order)

    current_app.logger.info(
        "Order %s fulfilled by %s; %s stock now %s",
        order.id, actor.username, beverage.name, beverage.stock_quantity,
    )

    notification_service.notify_order_fulfilled(order)
    beverage_service.notify_if_low(beverage)
    return order


def cancel_order(order_id: int, actor: User) -> Order:
    """
    Cancel a pending order. Owners may cancel their own orders; staff with
    FULFILL_ORDERS may cancel anyone's.
    """
    order = get_order(order_id)
    if order.employee_id != actor.id and not role_has_permission(actor.role, "FULFILL_ORDERS"):
        raise AuthorizationError("You can only cancel your own orders")

    if not compare_and_set(
        Order,
        order.id,
        expected={"status": OrderStatus.PENDING.value},
        values={"status": OrderStatus.CANCELLED.value},
    ):
        db.session.rollback()
        order = get_order(order_id)
        raise ConflictError(f"Order is already {order.status}")

    db.session.commit()
    db.session.refresh(order)

    current_app.logger.info("Order %s cancelled by %s", order.id, actor.username)

    notification_service.notify_order_cancelled(order, cancelled_by=actor.id)
    return order


def update_order_status(order_id: int, status: str, actor: User) -> Order:
    if status == OrderStatus.FULFILLED.value:
        return fulfill_order(order_id, actor)
    if status == OrderStatus.CANCELLED.value:
        return cancel_order(order_id, actor)

    # Nothing moves back to pending
    get_order(order_id)
    raise ValidationError("Status must be fulfilled or cancelled")


def _filtered(
    *,
    status: str | None = None,
    employee_id: int | None = None,
    on_date: date | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
):
    query = db.session.query(Order)
    if status:
        query = query.filter(Order.status == status)
    if employee_id is not None:
        query = query.filter(Order.employee_id == employee_id)
    if on_date is not None:
        start, end = day_bounds(on_date)
        query = query.filter(Order.order_date >= start, Order.order_date < end)
    else:
        if start_date is not None:
            query = query.filter(Order.order_date >= start_date)
        if end_date is not None:
            query = query.filter(Order.order_date <= end_date)
    return query.order_by(Order.order_date.desc(), Order.created_at.desc(), Order.id.desc())


def list_orders(*, status: str | None = None, on_date: date | None = None) -> list[Order]:
    return _filtered(status=status, on_date=on_date).all()


def list_orders_paginated(
    page: int | None = None,
    limit: int | None = None,
    **filters,
) -> tuple[list[Order], dict]:
    return paginate_query(_filtered(**filters), page, limit)


def list_today_orders(status: str | None = None) -> list[Order]:
    return _filtered(status=status, on_date=today()).all()


def list_employee_history(employee_id: int) -> list[Order]:
    return _filtered(employee_id=employee_id).all()


def list_employee_today(employee_id: int) -> list[Order]:
    return _filtered(employee_id=employee_id, on_date=today()).all()
