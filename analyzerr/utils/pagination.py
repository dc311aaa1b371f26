"""
Pagination helpers for library analysis endpoints
"""

from collections.abc import Sequence
from typing import Any, Literal, TypeVar

T = TypeVar("T")

AnalysisType = Literal["size", "quality", "content"]

DEFAULT_PAGE_SIZES: dict[str, int] = {
    "size": 25,
    "quality": 50,
    "content": 50,
}
MAX_PAGE_SIZE = 500
LIMIT_ALL = -1


def validate_pagination_params(
    limit: int | None = None, offset: int | None = None, analysis_type: AnalysisType = "size"
) -> tuple[int, int]:
    """Normalize limit/offset, keeping the LIMIT_ALL sentinel intact"""
    if limit is None:
        limit = DEFAULT_PAGE_SIZES.get(analysis_type, DEFAULT_PAGE_SIZES["size"])
    elif limit != LIMIT_ALL:
        limit = max(1, min(int(limit), MAX_PAGE_SIZE))

    offset = max(0, int(offset or 0))
    return limit, offset


def paginate(items: Sequence[T], offset: int = 0, limit: int = LIMIT_ALL) -> list[T]:
    """Slice a sequence; LIMIT_ALL returns every item"""
    if limit == LIMIT_ALL:
        return list(items)
    return list(items[offset:offset + limit])


def create_pagination_meta(offset: int, limit: int, total: int) -> dict[str, Any]:
    has_more = False if limit == LIMIT_ALL else offset + limit < total
    return {
        "offset": offset,
        "limit": limit,
        "total": total,
        "has_more": has_more,
    }
