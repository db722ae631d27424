# Overview: Flask API routes for the caller's favorite beverages.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_permission
from ..responses import created, success
from ..services import favorite_service
from ..validation import require_int

favorites_bp = Blueprint("favorites", __name__, url_prefix="/api/favorites")


def _beverage_id_from_body() -> int:
    payload = request.get_json(silent=True) or {}
    return require_int(payload.get("beverageId"), "beverageId")


@favorites_bp.get("")
@require_auth
@require_permission("MANAGE_FAVORITES")
def list_favorites_route():
    return success(
        favorite_service.get_favorites_with_details(g.current_user.id),
        "Favorites retrieved",
    )


@favorites_bp.get("/count")
@require_auth
@require_permission("MANAGE_FAVORITES")
def favorites_count_route():
    return success(favorite_service.get_favorites_count(g.current_user.id), "Favorites count")


@favorites_bp.get("/beverage-ids")
@require_auth
@require_permission("MANAGE_FAVORITES")
def favorite_ids_route():
    ids = favorite_service.get_favorite_beverage_ids(g.current_user.id)
    return success({"beverageIds": ids}, "Favorite beverage IDs retrieved")


@favorites_bp.get("/most-favorited")
@require_auth
@require_permission("VIEW_BEVERAGES")
def most_favorited_route():
    limit = min(max(request.args.get("limit", 10, type=int), 1), 50)
    return success(favorite_service.get_most_favorited(limit), "Most favorited beverages")


@favorites_bp.get("/check/<int:beverage_id>")
@require_auth
@require_permission("MANAGE_FAVORITES")
def check_favorite_route(beverage_id: int):
    is_fav = favorite_service.is_favorite(g.current_user.id, beverage_id)
    return success({"isFavorite": is_fav, "beverageId": beverage_id}, "Favorite status")


@favorites_bp.post("/toggle")
@require_auth
@require_permission("MANAGE_FAVORITES")
def toggle_favorite_route():
    result = favorite_service.toggle_favorite(g.current_user.id, _beverage_id_from_body())
    return success(result, result["message"])


@favorites_bp.post("")
@require_auth
@require_permission("MANAGE_FAVORITES")
def add_favorite_route():
    result = favorite_service.add_favorite(g.current_user.id, _beverage_id_from_body())
    return created(result, result["message"])


@favorites_bp.delete("/<int:beverage_id>")
@require_auth
@require_permission("MANAGE_FAVORITES")
def remove_favorite_route(beverage_id: int):
    result = favorite_service.remove_favorite(g.current_user.id, beverage_id)
    return success(result, result["message"])
