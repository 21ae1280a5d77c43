"""
Common utilities shared across routers.
"""

from .pagination import Pagination, PaginatedResponse, get_pagination

__all__ = [
    "Pagination",
    "PaginatedResponse",
    "get_pagination",
]
