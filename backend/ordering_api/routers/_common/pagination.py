"""
Limit/offset pagination for list endpoints.

Usage:
    @router.get("/sessions")
    def list_sessions(pagination: Pagination = Depends(get_pagination), ...):
        rows = repo.find_all(SessionFilters(limit=pagination.limit, offset=pagination.offset))
        return PaginatedResponse(items=rows, pagination=pagination, total=count).to_dict()
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Query

from shared.config.constants import Limits


@dataclass(frozen=True)
class Pagination:
    limit: int
    offset: int

    @property
    def page(self) -> int:
        """1-based page number."""
        return self.offset // self.limit + 1

    def meta(self, total: int) -> dict[str, Any]:
        return {
            "limit": self.limit,
            "offset": self.offset,
            "page": self.page,
            "total": total,
            "pages": -(-total // self.limit),
            "has_next": self.offset + self.limit < total,
            "has_prev": self.offset > 0,
        }


def get_pagination(
    limit: int = Query(
        default=Limits.DEFAULT_PAGE_SIZE,
        ge=1,
        le=Limits.MAX_PAGE_SIZE,
        description="Maximum number of sessions to return",
    ),
    offset: int = Query(default=0, ge=0, description="Number of sessions to skip"),
) -> Pagination:
    """FastAPI dependency; bounds are enforced by the Query validators (422 otherwise)."""
    return Pagination(limit=limit, offset=offset)


@dataclass
class PaginatedResponse:
    items: list[Any]
    pagination: Pagination
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {"items": self.items, "pagination": self.pagination.meta(self.total)}
