# Overview: Success envelopes shared by every blueprint.

from __future__ import annotations

from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def success(data: Any = None, message: str = "Success", status_code: int = 200):
    body: dict = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body, status_code


def created(data: Any = None, message: str = "Resource created successfully"):
    return success(data, message, 201)


def normalize_paging(page: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp page >= 1 and 1 <= limit <= MAX_LIMIT."""
    page = max(page or DEFAULT_PAGE, 1)
    limit = min(max(limit or DEFAULT_LIMIT, 1), MAX_LIMIT)
    return page, limit


def pagination_meta(page: int, limit: int, total_items: int) -> dict:
    total_pages = (total_items + limit - 1) // limit if total_items > 0 else 0
    return {
        "page": page,
        "limit": limit,
        "totalItems": total_items,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def paginated(items: list, pagination: dict, message: str = "Success"):
    return {
        "success": True,
        "message": message,
        "data": items,
        "pagination": pagination,
    }, 200
