# Overview: Service-layer operations for ratings; upsert, aggregates and rankings.

from __future__ import annotations

from sqlalchemy import func

from ..errors import NotFoundError
from ..extensions import db
from ..models import Beverage, Rating
from . import beverage_service

TOP_RATED_MIN_RATINGS = 3


def _round1(value) -> float:
    return round(float(value), 1) if value is not None else 0


def get_average_rating(beverage_id: int) -> dict:
    avg, total = (
        db.session.query(func.avg(Rating.rating), func.count(Rating.id))
        .filter(Rating.beverage_id == beverage_id)
        .one()
    )
    if not total:
        return {"averageRating": 0, "totalRatings": 0}
    return {"averageRating": _round1(avg), "totalRatings": total}


def get_distribution(beverage_id: int) -> dict:
    rows = (
        db.session.query(Rating.rating, func.count(Rating.id))
        .filter(Rating.beverage_id == beverage_id)
        .group_by(Rating.rating)
        .all()
    )
    distribution = {str(star): 0 for star in range(5, 0, -1)}
    for star, count in rows:
        distribution[str(star)] = count
    return distribution


def find_rating(employee_id: int, beverage_id: int) -> Rating | None:
    return (
        db.session.query(Rating)
        .filter_by(employee_id=employee_id, beverage_id=beverage_id)
        .first()
    )


def upsert_rating(employee_id: int, data: dict) -> dict:
    """
    Create or overwrite the caller's rating for a beverage.

    One row per (employee, beverage); a second submission replaces the
    score, review and anonymity flag.
    """
    beverage_id = data["beverage_id"]
    beverage_service.get_beverage(beverage_id)

    rating = find_rating(employee_id, beverage_id)
    if rating is None:
        rating = Rating(employee_id=employee_id, beverage_id=beverage_id)
        db.session.add(rating)

    rating.rating = data["rating"]
    rating.review = data.get("review")
    rating.is_anonymous = bool(data.get("is_anonymous"))
    db.session.commit()

    return {
        "rating": rating.to_dict(),
        "averageRating": get_average_rating(beverage_id),
    }


def get_employee_ratings(employee_id: int) -> list[Rating]:
    return (
        db.session.query(Rating)
        .filter(Rating.employee_id == employee_id)
        .order_by(Rating.updated_at.desc(), Rating.id.desc())
        .all()
    )


def get_beverage_ratings(beverage_id: int) -> dict:
    beverage = beverage_service.get_beverage(beverage_id)
    ratings = (
        db.session.query(Rating)
        .filter(Rating.beverage_id == beverage_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .all()
    )
    average = get_average_rating(beverage_id)
    return {
        "beverage": beverage.to_dict(),
        "ratings": [r.to_dict(hide_author=r.is_anonymous) for r in ratings],
        "averageRating": average["averageRating"],
        "totalRatings": average["totalRatings"],
        "distribution": get_distribution(beverage_id),
    }


def delete_rating(employee_id: int, beverage_id: int) -> dict:
    rating = find_rating(employee_id, beverage_id)
    if rating is None:
        raise NotFoundError("Rating not found")

    db.session.delete(rating)
    db.session.commit()

    return {
        "message": "Rating deleted successfully",
        "averageRating": get_average_rating(beverage_id),
    }


def get_top_rated(limit: int = 10) -> list[dict]:
    """Beverages with at least 3 ratings, best average first, then most rated."""
    avg_col = func.avg(Rating.rating)
    count_col = func.count(Rating.id)
    rows = (
        db.session.query(Beverage, avg_col, count_col)
        .join(Rating, Rating.beverage_id == Beverage.id)
        .group_by(Beverage.id)
        .having(count_col >= TOP_RATED_MIN_RATINGS)
        .order_by(avg_col.desc(), count_col.desc(), Beverage.name.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "beverage_id": beverage.id,
            "beverage": beverage.summary(),
            "averageRating": _round1(avg),
            "totalRatings": count,
        }
        for beverage, avg, count in rows
    ]


def get_statistics() -> dict:
    total, avg, highest, lowest = db.session.query(
        func.count(Rating.id),
        func.avg(Rating.rating),
        func.max(Rating.rating),
        func.min(Rating.rating),
    ).one()

    return {
        "totalRatings": total or 0,
        "averageRating": _round1(avg) if total else 0,
        "highestRating": highest or 0,
        "lowestRating": lowest or 0,
        "topRatedBeverages": get_top_rated(5),
    }


def get_beverage_with_rating(beverage_id: int, employee_id: int | None = None) -> dict:
    beverage = beverage_service.get_beverage(beverage_id)
    average = get_average_rating(beverage_id)

    user_rating = None
    if employee_id is not None:
        mine = find_rating(employee_id, beverage_id)
        if mine:
            user_rating = {"rating": mine.rating, "review": mine.review}

    data = beverage.to_dict()
    data.update({
        "averageRating": average["averageRating"],
        "totalRatings": average["totalRatings"],
        "userRating": user_rating,
    })
    return data
