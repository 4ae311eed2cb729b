"""
Pagination helpers for order listings
"""

import math

from .models import Pagination

MIN_LIMIT = 1
MAX_LIMIT = 100


def clamp_limit(limit, max_limit: int = MAX_LIMIT) -> int:
    """Clamp a requested page size into [1, max_limit]"""
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return MIN_LIMIT
    return max(MIN_LIMIT, min(limit, max_limit))


def clamp_page(page) -> int:
    try:
        page = int(page)
    except (TypeError, ValueError):
        return 1
    return max(1, page)


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Pagination metadata; has_next/has_previous derive from page and total_pages"""
    total = max(0, int(total))
    total_pages = math.ceil(total / limit) if limit else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )
