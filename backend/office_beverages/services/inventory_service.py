# Overview: Service-layer operations for inventory; stock movements and the append-only ledger.

"""
Inventory Service

Every stock change writes one InventoryTransaction. Transactions record the
requested signed quantity; the stock column itself never drops below zero.
"""

from __future__ import annotations

from flask import current_app

from ..constants import TransactionType
from ..errors import ValidationError
from ..extensions import db
from ..models import InventoryTransaction
from . import beverage_service
from .pagination import paginate_query


def record_transaction(
    *,
    beverage_id: int,
    transaction_type: str,
    quantity: int,
    reason: str | None = None,
    order_id: int | None = None,
    performed_by: int | None = None,
) -> InventoryTransaction:
    """Stage a transaction row in the current session. Does not commit."""
    if quantity == 0:
        raise ValidationError("Transaction quantity cannot be zero")
    if transaction_type not in TransactionType.values():
        raise ValidationError(f"Invalid transaction type: {transaction_type}")

    tx = InventoryTransaction(
        beverage_id=beverage_id,
        transaction_type=transaction_type,
        quantity=quantity,
        reason=reason,
        order_id=order_id,
        performed_by=performed_by,
    )
    db.session.add(tx)
    return tx


def adjust_stock(
    beverage_id: int,
    quantity: int,
    *,
    reason: str | None = None,
    performed_by: int | None = None,
) -> dict:
    """
    Add (quantity > 0) or remove (quantity < 0) stock.

    Records stock_in or stock_out accordingly. Returns the updated beverage
    and the transaction.
    """
    if quantity == 0:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "quantity", "message": "Quantity cannot be zero"}],
        )

    # Existence check raises NotFoundError before any write
    beverage_service.get_beverage(beverage_id)

    beverage = beverage_service.apply_stock_delta(beverage_id, quantity)
    tx = record_transaction(
        beverage_id=beverage_id,
        transaction_type=(
            TransactionType.STOCK_IN.value if quantity > 0 else TransactionType.STOCK_OUT.value
        ),
        quantity=quantity,
        reason=reason or ("Stock added" if quantity > 0 else "Stock removed"),
        performed_by=performed_by,
    )
    db.session.commit()

    current_app.logger.info(
        "Stock adjusted for %s by %+d -> %s (user=%s)",
        beverage.name, quantity, beverage.stock_quantity, performed_by,
    )

    beverage_service.notify_if_low(beverage)

    return {
        "beverage": beverage.to_dict(),
        "transaction": tx.to_dict(),
    }


def list_transactions(
    page: int | None = None,
    limit: int | None = None,
    *,
    beverage_id: int | None = None,
    transaction_type: str | None = None,
    performed_by: int | None = None,
) -> tuple[list[InventoryTransaction], dict]:
    query = db.session.query(InventoryTransaction)
    if beverage_id is not None:
        query = query.filter(InventoryTransaction.beverage_id == beverage_id)
    if transaction_type:
        query = query.filter(InventoryTransaction.transaction_type == transaction_type)
    if performed_by is not None:
        query = query.filter(InventoryTransaction.performed_by == performed_by)
    query = query.order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
    return paginate_query(query, page, limit)
