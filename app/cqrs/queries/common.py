from __future__ import annotations

import math

from app.core.errors import BadRequestError


def page_offset(page: int, limit: int) -> int:
    if page < 1:
        raise BadRequestError("Page must be >= 1")
    if limit < 1:
        raise BadRequestError("Limit must be positive")
    return (page - 1) * limit


def page_payload(data: list, page: int, limit: int, total_items: int) -> dict:
    return {
        "data": data,
        "current_page": page,
        "total_pages": math.ceil(total_items / limit) if total_items else 0,
        "total_items": total_items,
    }
