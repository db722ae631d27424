# Overview: Offset pagination shared by the listing services.

from __future__ import annotations

from ..responses import normalize_paging, pagination_meta


def paginate_query(query, page: int | None, limit: int | None) -> tuple[list, dict]:
    """
    Run an ordered query for one page.

    Returns (rows, pagination) where pagination carries page, limit,
    totalItems, totalPages, hasNextPage and hasPrevPage.
    """
    page, limit = normalize_paging(page, limit)
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, pagination_meta(page, limit, total)
