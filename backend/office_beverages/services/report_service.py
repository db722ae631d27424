# Overview: Service-layer operations for reports; read-only aggregates over orders, stock and sessions.

"""
Reporting Service

All reports are computed on demand with SQL aggregates. Nothing here writes.
Day windows are calendar days: "last N days" starts at the beginning of the
day N days ago.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import case, func

from ..constants import OrderStatus, TransactionType
from ..extensions import db
from ..models import Beverage, InventoryTransaction, Order, User, UserSession
from . import beverage_service, session_service
from office_beverages.time_utils import day_bounds, days_ago, to_iso_date, to_utc_z, today

FAST_MOVING_WINDOW_DAYS = 7
TOP_CONSUMERS_WINDOW_DAYS = 30


def _day_str(value) -> str | None:
    """func.date() yields str on SQLite and date elsewhere."""
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _window_start(days: int):
    return days_ago(days)


def get_dashboard_stats() -> dict:
    start, end = day_bounds(today())
    daily_orders = (
        db.session.query(Order)
        .filter(Order.order_date >= start, Order.order_date < end)
        .count()
    )
    counts = beverage_service.get_stock_counts()
    return {
        "dailyOrdersCount": daily_orders,
        "outOfStockCount": counts["outOfStock"],
        "lowStockCount": counts["lowStock"],
        "totalBeverages": counts["total"],
    }


def get_popular_beverages(
    limit: int = 10,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[dict]:
    count_col = func.count(Order.id)
    query = (
        db.session.query(Order.beverage_id, count_col, Beverage.name, Beverage.category)
        .outerjoin(Beverage, Beverage.id == Order.beverage_id)
    )
    if start_date and end_date:
        query = query.filter(Order.order_date >= start_date, Order.order_date <= end_date)
    rows = (
        query.group_by(Order.beverage_id, Beverage.name, Beverage.category)
        .order_by(count_col.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "beverage_id": beverage_id,
            "count": count,
            "beverage": {
                "id": beverage_id,
                "name": name or "Unknown",
                "category": category or "other",
            },
        }
        for beverage_id, count, name, category in rows
    ]


def get_consumption_trends(days: int = 30) -> list[dict]:
    count_col = func.count(Order.id)
    rows = (
        db.session.query(Order.order_date, count_col)
        .filter(Order.order_date >= _window_start(days))
        .group_by(Order.order_date)
        .order_by(Order.order_date.asc())
        .all()
    )
    return [{"order_date": to_iso_date(d), "count": c} for d, c in rows]


def _status_count(status: OrderStatus):
    return func.sum(case((Order.status == status.value, 1), else_=0))


def get_employee_stats() -> list[dict]:
    total_col = func.count(Order.id)
    rows = (
        db.session.query(
            User,
            total_col,
            _status_count(OrderStatus.FULFILLED),
            _status_count(OrderStatus.CANCELLED),
            _status_count(OrderStatus.PENDING),
            func.max(Order.order_date),
        )
        .join(Order, Order.employee_id == User.id)
        .group_by(User.id)
        .order_by(total_col.desc(), User.full_name.asc())
        .all()
    )
    return [
        {
            "employee_id": user.id,
            "employee": user.summary(),
            "totalOrders": total,
            "fulfilledOrders": fulfilled or 0,
            "cancelledOrders": cancelled or 0,
            "pendingOrders": pending or 0,
            "lastOrderDate": to_iso_date(last_date),
        }
        for user, total, fulfilled, cancelled, pending, last_date in rows
    ]


def get_top_consumers(limit: int = 10) -> list[dict]:
    count_col = func.count(Order.id)
    rows = (
        db.session.query(User, count_col)
        .join(Order, Order.employee_id == User.id)
        .filter(
            Order.order_date >= _window_start(TOP_CONSUMERS_WINDOW_DAYS),
            Order.status != OrderStatus.CANCELLED.value,
        )
        .group_by(User.id)
        .order_by(count_col.desc(), User.full_name.asc())
        .limit(limit)
        .all()
    )
    return [
        {"employee_id": user.id, "employee": user.summary(), "orderCount": count}
        for user, count in rows
    ]


def get_fast_moving_items(limit: int = 10) -> list[dict]:
    count_col = func.count(Order.id)
    rows = (
        db.session.query(Beverage, count_col)
        .join(Order, Order.beverage_id == Beverage.id)
        .filter(
            Order.order_date >= _window_start(FAST_MOVING_WINDOW_DAYS),
            Order.status == OrderStatus.FULFILLED.value,
        )
        .group_by(Beverage.id)
        .order_by(count_col.desc(), Beverage.name.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "beverage_id": beverage.id,
            "beverage": {
                "name": beverage.name,
                "category": beverage.category,
                "stock_quantity": beverage.stock_quantity,
                "min_stock_alert": beverage.min_stock_alert,
            },
            "orderCount": count,
            "dailyAverage": round(count / FAST_MOVING_WINDOW_DAYS, 2),
        }
        for beverage, count in rows
    ]


def get_employee_activity(days: int = 30) -> list[dict]:
    """Per-user session totals for logins inside the window."""
    session_count = func.count(UserSession.id)
    active_count = func.sum(case((UserSession.is_active.is_(True), 1), else_=0))
    rows = (
        db.session.query(
            User,
            session_count,
            active_count,
            func.sum(UserSession.session_duration),
            func.avg(UserSession.session_duration),
            func.max(UserSession.login_time),
            func.max(UserSession.logout_time),
        )
        .join(UserSession, UserSession.user_id == User.id)
        .filter(UserSession.login_time >= _window_start(days))
        .group_by(User.id)
        .order_by(session_count.desc(), User.full_name.asc())
        .all()
    )
    return [
        {
            "user_id": user.id,
            "user": {**user.summary(), "role": user.role},
            "totalSessions": total,
            "activeSessions": active or 0,
            "totalDuration": total_minutes or 0,
            "avgDuration": round(float(avg_minutes), 1) if avg_minutes is not None else 0,
            "lastLogin": to_utc_z(last_login),
            "lastLogout": to_utc_z(last_logout),
        }
        for user, total, active, total_minutes, avg_minutes, last_login, last_logout in rows
    ]


def get_daily_login_stats(days: int = 30) -> list[dict]:
    day_col = func.date(UserSession.login_time)
    rows = (
        db.session.query(
            day_col,
            func.count(UserSession.id),
            func.count(func.distinct(UserSession.user_id)),
        )
        .filter(UserSession.login_time >= _window_start(days))
        .group_by(day_col)
        .order_by(day_col.asc())
        .all()
    )
    return [
        {"date": _day_str(day), "loginCount": logins, "uniqueUserCount": unique}
        for day, logins, unique in rows
    ]


def get_online_users() -> list[dict]:
    return [
        {
            "session_id": s.id,
            "login_time": to_utc_z(s.login_time),
            "ip_address": s.ip_address,
            "user": {**s.user.summary(), "role": s.user.role} if s.user else None,
        }
        for s in session_service.get_active_sessions()
    ]


def get_stock_flow(beverage_id: int | None = None, days: int = 30) -> list[dict]:
    """Daily inbound and outbound units from the transaction ledger."""
    day_col = func.date(InventoryTransaction.created_at)
    qty = InventoryTransaction.quantity
    tx_type = InventoryTransaction.transaction_type

    def _sum_type(t: TransactionType):
        return func.sum(case((tx_type == t.value, qty), else_=0))

    query = (
        db.session.query(
            day_col,
            func.sum(case((qty > 0, qty), else_=0)),
            func.sum(case((qty < 0, -qty), else_=0)),
            _sum_type(TransactionType.STOCK_IN),
            _sum_type(TransactionType.STOCK_OUT),
            _sum_type(TransactionType.ORDER_DEDUCTION),
            _sum_type(TransactionType.ADJUSTMENT),
        )
        .filter(InventoryTransaction.created_at >= _window_start(days))
    )
    if beverage_id is not None:
        query = query.filter(InventoryTransaction.beverage_id == beverage_id)

    rows = query.group_by(day_col).order_by(day_col.asc()).all()
    return [
        {
            "date": _day_str(day),
            "inbound": inbound or 0,
            "outbound": outbound or 0,
            "net": (inbound or 0) - (outbound or 0),
            "byType": {
                TransactionType.STOCK_IN.value: stock_in or 0,
                TransactionType.STOCK_OUT.value: stock_out or 0,
                TransactionType.ORDER_DEDUCTION.value: deductions or 0,
                TransactionType.ADJUSTMENT.value: adjustments or 0,
            },
        }
        for day, inbound, outbound, stock_in, stock_out, deductions, adjustments in rows
    ]


def get_inventory_turnover(days: int = 30) -> list[dict]:
    """
    Units consumed in the window against the average of opening and
    current stock. Opening stock is current stock minus the window's net.
    """
    qty = InventoryTransaction.quantity
    movement = (
        db.session.query(
            InventoryTransaction.beverage_id.label("beverage_id"),
            func.sum(case((qty < 0, -qty), else_=0)).label("consumed"),
            func.sum(case((qty > 0, qty), else_=0)).label("received"),
        )
        .filter(InventoryTransaction.created_at >= _window_start(days))
        .group_by(InventoryTransaction.beverage_id)
        .subquery()
    )
    rows = (
        db.session.query(Beverage, movement.c.consumed, movement.c.received)
        .outerjoin(movement, movement.c.beverage_id == Beverage.id)
        .order_by(Beverage.name.asc())
        .all()
    )

    result = []
    for beverage, consumed, received in rows:
        consumed = consumed or 0
        received = received or 0
        current = beverage.stock_quantity
        opening = max(current - (received - consumed), 0)
        average_stock = (opening + current) / 2
        daily_usage = consumed / days if days else 0
        result.append({
            "beverage_id": beverage.id,
            "name": beverage.name,
            "category": beverage.category,
            "currentStock": current,
            "unitsConsumed": consumed,
            "unitsReceived": received,
            "averageStock": round(average_stock, 1),
            "turnoverRate": round(consumed / average_stock, 2) if average_stock else 0,
            "dailyUsage": round(daily_usage, 2),
            "daysOfStockLeft": round(current / daily_usage, 1) if daily_usage else None,
        })
    result.sort(key=lambda r: r["turnoverRate"], reverse=True)
    return result


def get_comprehensive_analytics(days: int = 30) -> dict:
    return {
        "dashboard": get_dashboard_stats(),
        "popularBeverages": get_popular_beverages(),
        "consumptionTrends": get_consumption_trends(days),
        "employeeStats": get_employee_stats(),
        "topConsumers": get_top_consumers(),
        "fastMovingItems": get_fast_moving_items(),
        "employeeActivity": get_employee_activity(days),
        "dailyLogins": get_daily_login_stats(days),
        "stockFlow": get_stock_flow(days=days),
        "inventoryTurnover": get_inventory_turnover(days),
        "periodDays": days,
    }


def get_orders_for_day(day: date) -> list[Order]:
    start, end = day_bounds(day)
    return (
        db.session.query(Order)
        .filter(Order.order_date >= start, Order.order_date < end)
        .order_by(Order.created_at.asc(), Order.id.asc())
        .all()
    )
