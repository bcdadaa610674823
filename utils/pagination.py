"""Pagination helpers."""

from __future__ import annotations

import math
from typing import Iterable


def total_pages(count: int, limit: int) -> int:
    return math.ceil(count / limit) if limit > 0 else 0


def paginated_payload(items: Iterable, count: int, page: int, limit: int, key: str = "posts") -> dict:
    """Shape a page of already-serialized items for a JSON response."""

    return {
        key: list(items),
        "count": count,
        "page": page,
        "limit": limit,
        "totalPages": total_pages(count, limit),
    }
