"""
Base Repository.

Queries always go through _select(), which attaches the subclass's eager
loading options, so mapped aggregates never trigger lazy loads.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from shared.config.constants import Limits


ModelT = TypeVar("ModelT")


@dataclass
class RepositoryFilters:
    """Pagination shared by every list query; subclasses add entity filters."""

    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0

    def __post_init__(self):
        self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.offset = max(0, self.offset)


class BaseRepository(ABC, Generic[ModelT]):
    """
    Read helpers over one mapped class.

    Subclasses set `model` and implement _load_options(); they override
    _default_order() and _apply_filters() when the defaults do not fit.
    """

    model: ClassVar[type[Any]]

    def __init__(self, db: Session):
        self._db = db

    @abstractmethod
    def _load_options(self) -> list[Any]:
        """selectinload/joinedload options applied to every query."""

    def _default_order(self) -> list[Any]:
        return [self.model.id.desc()]

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        return query

    def _select(self) -> Select:
        return select(self.model).options(*self._load_options())

    def _all(self, query: Select) -> Sequence[ModelT]:
        return self._db.execute(query).scalars().unique().all()

    def find_all(self, filters: RepositoryFilters | None = None) -> Sequence[ModelT]:
        """One page of rows matching the filters, in default order."""
        filters = filters or RepositoryFilters()
        query = self._apply_filters(self._select(), filters)
        query = query.order_by(*self._default_order()).offset(filters.offset).limit(filters.limit)
        return self._all(query)

    def find_by_id(self, entity_id: int) -> ModelT | None:
        return self._db.scalar(self._select().where(self.model.id == entity_id))

    def count(self, filters: RepositoryFilters | None = None) -> int:
        """Rows matching the filters, ignoring pagination."""
        query = select(func.count()).select_from(self.model)
        query = self._apply_filters(query, filters or RepositoryFilters())
        return self._db.scalar(query) or 0
