# Overview: Flask API routes for the beverage catalog and inventory.

"""
Beverage and inventory routes.

SECURITY: All routes require authentication.
- Catalog reads require VIEW_BEVERAGES
- Catalog writes require MANAGE_BEVERAGES
- Inventory reads require VIEW_INVENTORY, stock adjustments ADJUST_INVENTORY
"""

from flask import Blueprint, g, request

from ..constants import BeverageCategory, CaffeineLevel, StockStatus, TransactionType
from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..models import Beverage
from ..responses import created, paginated, success
from ..services import beverage_service, inventory_service
from ..validation import BEVERAGE_POLICY, require_int, validate_payload

beverages_bp = Blueprint("beverages", __name__, url_prefix="/api/beverages")


def _choice_arg(name: str, allowed: list[str]) -> str | None:
    value = request.args.get(name) or None
    if value is not None and value not in allowed:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": name, "message": f"Invalid {name}; expected one of: {', '.join(allowed)}"}],
        )
    return value


def _bool_arg(name: str) -> bool | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return raw.lower() in ("1", "true", "yes")


@beverages_bp.get("")
@require_auth
@require_permission("VIEW_BEVERAGES")
def list_beverages_route():
    """
    List beverages.

    Query params:
    - category, active_only: plain list
    - page, limit: switch to the paginated form, which also accepts
      is_active, caffeine_level and stock_status (in | low | out)
    """
    category = _choice_arg("category", BeverageCategory.values())
    page = request.args.get("page", type=int)
    limit = request.args.get("limit", type=int)

    if page is None and limit is None:
        beverages = beverage_service.list_beverages(
            category=category,
            active_only=bool(_bool_arg("active_only")),
        )
        return success([b.to_dict() for b in beverages], "Beverages retrieved")

    beverages, meta = beverage_service.list_beverages_paginated(
        page,
        limit,
        category=category,
        is_active=_bool_arg("is_active"),
        caffeine_level=_choice_arg("caffeine_level", CaffeineLevel.values()),
        stock_status=_choice_arg("stock_status", StockStatus.values()),
    )
    return paginated([b.to_dict() for b in beverages], meta, "Beverages retrieved")


@beverages_bp.get("/search")
@require_auth
@require_permission("VIEW_BEVERAGES")
def search_beverages_route():
    term = (request.args.get("q") or "").strip()
    if not term:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "q", "message": "Search term is required"}],
        )
    beverages = beverage_service.search_beverages(term)
    return success([b.to_dict() for b in beverages], "Search results")


@beverages_bp.get("/<int:beverage_id>")
@require_auth
@require_permission("VIEW_BEVERAGES")
def get_beverage_route(beverage_id: int):
    return success(beverage_service.get_beverage(beverage_id).to_dict(), "Beverage retrieved")


@beverages_bp.post("")
@require_auth
@require_permission("MANAGE_BEVERAGES")
def create_beverage_route():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Beverage, payload=payload, policy=BEVERAGE_POLICY, partial=False)
    beverage = beverage_service.create_beverage(patch)
    return created(beverage.to_dict(), "Beverage created successfully")


@beverages_bp.put("/<int:beverage_id>")
@require_auth
@require_permission("MANAGE_BEVERAGES")
def update_beverage_route(beverage_id: int):
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Beverage, payload=payload, policy=BEVERAGE_POLICY, partial=True)
    beverage = beverage_service.update_beverage(beverage_id, patch, actor_id=g.current_user.id)
    return success(beverage.to_dict(), "Beverage updated successfully")


@beverages_bp.delete("/<int:beverage_id>")
@require_auth
@require_permission("MANAGE_BEVERAGES")
def delete_beverage_route(beverage_id: int):
    beverage_service.delete_beverage(beverage_id)
    return success(message="Beverage deleted successfully")


# -- inventory --

@beverages_bp.get("/inventory/status")
@require_auth
@require_permission("VIEW_INVENTORY")
def inventory_status_route():
    return success(beverage_service.get_inventory_status(), "Inventory status retrieved")


@beverages_bp.get("/inventory/low-stock")
@require_auth
@require_permission("VIEW_INVENTORY")
def low_stock_route():
    beverages = beverage_service.get_low_stock_beverages()
    return success([b.to_dict() for b in beverages], "Low stock beverages retrieved")


@beverages_bp.get("/inventory/out-of-stock")
@require_auth
@require_permission("VIEW_INVENTORY")
def out_of_stock_route():
    beverages = beverage_service.get_out_of_stock_beverages()
    return success([b.to_dict() for b in beverages], "Out of stock beverages retrieved")


@beverages_bp.get("/inventory/counts")
@require_auth
@require_permission("VIEW_INVENTORY")
def stock_counts_route():
    return success(beverage_service.get_stock_counts(), "Stock counts retrieved")


@beverages_bp.get("/inventory/transactions")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_transactions_route():
    """
    Paginated stock ledger, newest first.

    Query params: page, limit, beverage_id, transaction_type, performed_by
    """
    transactions, meta = inventory_service.list_transactions(
        request.args.get("page", type=int),
        request.args.get("limit", type=int),
        beverage_id=request.args.get("beverage_id", type=int),
        transaction_type=_choice_arg("transaction_type", TransactionType.values()),
        performed_by=request.args.get("performed_by", type=int),
    )
    return paginated([t.to_dict() for t in transactions], meta, "Transactions retrieved")


@beverages_bp.post("/<int:beverage_id>/adjust-stock")
@require_auth
@require_permission("ADJUST_INVENTORY")
def adjust_stock_route(beverage_id: int):
    """
    Body: {"quantity": int (non-zero, negative removes), "reason": str?}
    """
    payload = request.get_json(silent=True) or {}
    quantity = require_int(payload.get("quantity"), "quantity")
    reason = payload.get("reason")
    if reason is not None and not isinstance(reason, str):
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "reason", "message": "Reason must be a string"}],
        )

    result = inventory_service.adjust_stock(
        beverage_id,
        quantity,
        reason=(reason or "").strip() or None,
        performed_by=g.current_user.id,
    )
    return success(result, "Stock adjusted successfully")
