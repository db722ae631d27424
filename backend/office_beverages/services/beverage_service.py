# Overview: Service-layer operations for beverages; catalog CRUD and stock levels.

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..constants import StockStatus, TransactionType
from ..errors import NotFoundError
from ..extensions import db
from ..models import Beverage, compute_stock_status
from . import notification_service
from .concurrency import clamped_add
from .pagination import paginate_query

BEVERAGE_MUTABLE_FIELDS = {
    "name", "category", "description", "image_url", "stock_quantity",
    "unit", "min_stock_alert", "unit_price", "caffeine_level", "is_active",
}


def _low_stock_clause():
    return db.and_(
        Beverage.stock_quantity > 0,
        Beverage.stock_quantity <= Beverage.min_stock_alert,
    )


def _stock_status_clause(stock_status: str):
    if stock_status == StockStatus.OUT_OF_STOCK.value:
        return Beverage.stock_quantity <= 0
    if stock_status == StockStatus.LOW_STOCK.value:
        return _low_stock_clause()
    return Beverage.stock_quantity > Beverage.min_stock_alert


def get_beverage(beverage_id: int) -> Beverage:
    beverage = db.session.get(Beverage, beverage_id)
    if not beverage:
        raise NotFoundError("Beverage not found")
    return beverage


def list_beverages(*, category: str | None = None, active_only: bool = False) -> list[Beverage]:
    query = db.session.query(Beverage)
    if category:
        query = query.filter(Beverage.category == category)
    if active_only:
        query = query.filter(Beverage.is_active.is_(True))
    return query.order_by(Beverage.name.asc(), Beverage.id.asc()).all()


def list_beverages_paginated(
    page: int | None = None,
    limit: int | None = None,
    *,
    category: str | None = None,
    is_active: bool | None = None,
    caffeine_level: str | None = None,
    stock_status: str | None = None,
) -> tuple[list[Beverage], dict]:
    query = db.session.query(Beverage)
    if category:
        query = query.filter(Beverage.category == category)
    if is_active is not None:
        query = query.filter(Beverage.is_active.is_(is_active))
    if caffeine_level:
        query = query.filter(Beverage.caffeine_level == caffeine_level)
    if stock_status:
        query = query.filter(_stock_status_clause(stock_status))
    query = query.order_by(Beverage.name.asc(), Beverage.id.asc())
    return paginate_query(query, page, limit)


def search_beverages(term: str) -> list[Beverage]:
    pattern = f"%{term.strip()}%"
    return (
        db.session.query(Beverage)
        .filter(Beverage.name.ilike(pattern))
        .order_by(Beverage.name.asc())
        .all()
    )


def create_beverage(patch: dict) -> Beverage:
    beverage = Beverage()
    for k, v in patch.items():
        if k in BEVERAGE_MUTABLE_FIELDS:
            setattr(beverage, k, v)

    db.session.add(beverage)
    db.session.commit()

    current_app.logger.info("Beverage created: %s (id=%s)", beverage.name, beverage.id)
    return beverage


def update_beverage(beverage_id: int, patch: dict, *, actor_id: int | None = None) -> Beverage:
    """
    Apply a validated patch. A changed stock_quantity is recorded as an
    adjustment transaction for the difference.
    """
    from . import inventory_service

    beverage = get_beverage(beverage_id)
    previous_stock = beverage.stock_quantity

    for k, v in patch.items():
        if k in BEVERAGE_MUTABLE_FIELDS:
            setattr(beverage, k, v)

    delta = beverage.stock_quantity - previous_stock
    if delta:
        inventory_service.record_transaction(
            beverage_id=beverage.id,
            transaction_type=TransactionType.ADJUSTMENT.value,
            quantity=delta,
            reason="Manual stock edit",
            performed_by=actor_id,
        )

    db.session.commit()

    if delta:
        notify_if_low(beverage)
    return beverage


def delete_beverage(beverage_id: int) -> None:
    beverage = get_beverage(beverage_id)
    db.session.delete(beverage)
    db.session.commit()
    current_app.logger.info("Beverage deleted: id=%s", beverage_id)


def apply_stock_delta(beverage_id: int, delta: int) -> Beverage:
    """
    Add delta to stock in one UPDATE, clamped at zero. Does not commit.

    Returns the refreshed beverage.
    """
    result = db.session.execute(
        update(Beverage)
        .where(Beverage.id == beverage_id)
        .values(stock_quantity=clamped_add(Beverage.stock_quantity, delta))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError("Beverage not found")

    beverage = db.session.get(Beverage, beverage_id)
    db.session.refresh(beverage)
    return beverage


def notify_if_low(beverage: Beverage) -> None:
    if beverage.stock_status != StockStatus.IN_STOCK.value:
        notification_service.notify_low_stock(beverage)


def _inventory_row(beverage: Beverage) -> dict:
    return {
        "id": beverage.id,
        "name": beverage.name,
        "category": beverage.category,
        "stock_quantity": beverage.stock_quantity,
        "min_stock_alert": beverage.min_stock_alert,
        "unit": beverage.unit,
        "is_active": beverage.is_active,
        "status": compute_stock_status(beverage.stock_quantity, beverage.min_stock_alert),
    }


def get_inventory_status() -> list[dict]:
    beverages = db.session.query(Beverage).order_by(Beverage.name.asc()).all()
    return [_inventory_row(b) for b in beverages]


def get_low_stock_beverages() -> list[Beverage]:
    return (
        db.session.query(Beverage)
        .filter(_low_stock_clause())
        .order_by(Beverage.stock_quantity.asc(), Beverage.name.asc())
        .all()
    )


def get_out_of_stock_beverages() -> list[Beverage]:
    return (
        db.session.query(Beverage)
        .filter(Beverage.stock_quantity <= 0)
        .order_by(Beverage.name.asc())
        .all()
    )


def get_stock_counts() -> dict:
    total = db.session.query(Beverage).count()
    out_of_stock = db.session.query(Beverage).filter(Beverage.stock_quantity <= 0).count()
    low_stock = db.session.query(Beverage).filter(_low_stock_clause()).count()
    return {
        "total": total,
        "outOfStock": out_of_stock,
        "lowStock": low_stock,
        "inStock": total - out_of_stock - low_stock,
    }
