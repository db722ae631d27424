# Overview: Service-layer operations for favorites; per-employee beverage bookmarks.

from __future__ import annotations

from sqlalchemy import func

from ..errors import NotFoundError
from ..extensions import db
from ..models import Beverage, Favorite
from . import beverage_service


def _find(employee_id: int, beverage_id: int) -> Favorite | None:
    return (
        db.session.query(Favorite)
        .filter_by(employee_id=employee_id, beverage_id=beverage_id)
        .first()
    )


def is_favorite(employee_id: int, beverage_id: int) -> bool:
    return _find(employee_id, beverage_id) is not None


def toggle_favorite(employee_id: int, beverage_id: int) -> dict:
    """Flip membership. Two toggles leave the list as it started."""
    beverage = beverage_service.get_beverage(beverage_id)

    existing = _find(employee_id, beverage_id)
    if existing:
        db.session.delete(existing)
        now_favorite = False
        message = "Removed from favorites"
    else:
        db.session.add(Favorite(employee_id=employee_id, beverage_id=beverage_id))
        now_favorite = True
        message = "Added to favorites"
    db.session.commit()

    return {
        "isFavorite": now_favorite,
        "message": message,
        "beverage": {
            "id": beverage.id,
            "name": beverage.name,
            "category": beverage.category,
        },
    }


def add_favorite(employee_id: int, beverage_id: int) -> dict:
    """Idempotent: adding an existing favorite returns it unchanged."""
    beverage_service.get_beverage(beverage_id)

    favorite = _find(employee_id, beverage_id)
    if favorite is None:
        favorite = Favorite(employee_id=employee_id, beverage_id=beverage_id)
        db.session.add(favorite)
        db.session.commit()

    return {"message": "Added to favorites", "favorite": favorite.to_dict()}


def remove_favorite(employee_id: int, beverage_id: int) -> dict:
    favorite = _find(employee_id, beverage_id)
    if favorite is None:
        raise NotFoundError("Favorite not found")

    db.session.delete(favorite)
    db.session.commit()
    return {"message": "Removed from favorites"}


def get_favorites_with_details(employee_id: int) -> dict:
    favorites = (
        db.session.query(Favorite)
        .filter(Favorite.employee_id == employee_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )
    valid = [f.to_dict() for f in favorites if f.beverage is not None]
    return {"count": len(valid), "favorites": valid}


def get_favorite_beverage_ids(employee_id: int) -> list[int]:
    rows = (
        db.session.query(Favorite.beverage_id)
        .filter(Favorite.employee_id == employee_id)
        .all()
    )
    return [row[0] for row in rows]


def get_favorites_count(employee_id: int) -> dict:
    count = db.session.query(Favorite).filter(Favorite.employee_id == employee_id).count()
    return {"count": count, "employeeId": employee_id}


def get_most_favorited(limit: int = 10) -> list[dict]:
    count_col = func.count(Favorite.id)
    rows = (
        db.session.query(Beverage, count_col)
        .join(Favorite, Favorite.beverage_id == Beverage.id)
        .group_by(Beverage.id)
        .order_by(count_col.desc(), Beverage.name.asc())
        .limit(limit)
        .all()
    )
    return [
        {"beverage_id": beverage.id, "beverage": beverage.summary(), "favoriteCount": count}
        for beverage, count in rows
    ]
