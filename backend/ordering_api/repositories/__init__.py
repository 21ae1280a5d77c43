"""
Repository Pattern implementation.
Centralizes data access with guaranteed eager loading.

Usage:
    from ordering_api.repositories import TableSessionRepository, SessionFilters

    repo = TableSessionRepository(db)
    sessions = repo.find_all(SessionFilters(is_paid=False))
    record = repo.find_open_by_table(2)
"""

from .base import BaseRepository, RepositoryFilters
from .table_session import SessionFilters, TableSessionRepository

__all__ = [
    "BaseRepository",
    "RepositoryFilters",
    "SessionFilters",
    "TableSessionRepository",
]
