# Overview: Flask API routes for beverage ratings.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_permission
from ..responses import success
from ..services import rating_service
from ..validation import parse_rating_payload

ratings_bp = Blueprint("ratings", __name__, url_prefix="/api/ratings")


@ratings_bp.post("")
@require_auth
@require_permission("RATE_BEVERAGES")
def upsert_rating_route():
    """
    Create or replace the caller's rating.

    Body: {"beverageId": int, "rating": 1-5, "review"?: str, "isAnonymous"?: bool}
    """
    data = parse_rating_payload(request.get_json(silent=True) or {})
    result = rating_service.upsert_rating(g.current_user.id, data)
    return success(result, "Rating saved successfully")


@ratings_bp.get("/my-ratings")
@require_auth
@require_permission("RATE_BEVERAGES")
def my_ratings_route():
    ratings = rating_service.get_employee_ratings(g.current_user.id)
    return success([r.to_dict() for r in ratings], "Your ratings retrieved")


@ratings_bp.get("/top-rated")
@require_auth
@require_permission("VIEW_BEVERAGES")
def top_rated_route():
    limit = min(max(request.args.get("limit", 10, type=int), 1), 50)
    return success(rating_service.get_top_rated(limit), "Top rated beverages retrieved")


@ratings_bp.get("/statistics")
@require_auth
@require_permission("VIEW_BEVERAGES")
def statistics_route():
    return success(rating_service.get_statistics(), "Rating statistics retrieved")


@ratings_bp.get("/beverage/<int:beverage_id>")
@require_auth
@require_permission("VIEW_BEVERAGES")
def beverage_ratings_route(beverage_id: int):
    return success(rating_service.get_beverage_ratings(beverage_id), "Beverage ratings retrieved")


@ratings_bp.get("/beverage/<int:beverage_id>/my-rating")
@require_auth
@require_permission("RATE_BEVERAGES")
def my_rating_route(beverage_id: int):
    rating = rating_service.find_rating(g.current_user.id, beverage_id)
    return success(
        {"rating": rating.to_dict() if rating else None},
        "Your rating retrieved",
    )


@ratings_bp.get("/beverage/<int:beverage_id>/details")
@require_auth
@require_permission("VIEW_BEVERAGES")
def beverage_details_route(beverage_id: int):
    data = rating_service.get_beverage_with_rating(beverage_id, g.current_user.id)
    return success(data, "Beverage details retrieved")


@ratings_bp.delete("/beverage/<int:beverage_id>")
@require_auth
@require_permission("RATE_BEVERAGES")
def delete_rating_route(beverage_id: int):
    result = rating_service.delete_rating(g.current_user.id, beverage_id)
    return success(result, "Rating deleted successfully")
