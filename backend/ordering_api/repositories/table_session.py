"""
Table Session Repository - persistence gateway for the session aggregate.

Loads rows with their tab lines and submissions in one round of queries,
maps them to the domain aggregate and writes an updated aggregate back.
Every save touches the parent row so its version column is checked and
bumped; a concurrent writer makes the flush fail with StaleDataError.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import Select, select
from sqlalchemy.orm import selectinload

from ordering_api.models import (
    OrderSubmissionRecord,
    SessionLineRecord,
    SubmissionItemRecord,
    TableSessionRecord,
)
from ordering_api.services.domain.aggregate import LineItem, OrderSubmission, TableSession
from .base import BaseRepository, RepositoryFilters


@dataclass
class SessionFilters(RepositoryFilters):
    """Filters specific to table sessions."""

    table_number: int | None = None
    is_paid: bool | None = None
    # Receipt issued, payment not yet recorded
    awaiting_payment: bool | None = None


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite returns naive datetimes; everything is stored in UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class TableSessionRepository(BaseRepository[TableSessionRecord]):
    """
    Repository for table sessions.

    Every query eager-loads the tab lines and the submissions with their
    items. Lists are newest first.
    """

    model = TableSessionRecord

    def _load_options(self) -> list:
        return [
            selectinload(TableSessionRecord.lines),
            selectinload(TableSessionRecord.submissions).selectinload(OrderSubmissionRecord.items),
        ]

    def _default_order(self) -> list:
        return [TableSessionRecord.created_at.desc(), TableSessionRecord.id.desc()]

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, SessionFilters):
            return query

        if filters.table_number is not None:
            query = query.where(TableSessionRecord.table_number == filters.table_number)

        if filters.is_paid is not None:
            query = query.where(TableSessionRecord.is_paid.is_(filters.is_paid))

        if filters.awaiting_payment is True:
            query = query.where(
                TableSessionRecord.is_paid.is_(False),
                TableSessionRecord.receipt_number.is_not(None),
            )
        elif filters.awaiting_payment is False:
            query = query.where(
                (TableSessionRecord.is_paid.is_(True))
                | (TableSessionRecord.receipt_number.is_(None))
            )

        return query

    # =========================================================================
    # Lookups
    # =========================================================================

    def find_open_by_table(self, table_number: int) -> TableSessionRecord | None:
        """The unpaid session of a table, if any."""
        query = self._select().where(
            TableSessionRecord.table_number == table_number,
            TableSessionRecord.is_paid.is_(False),
        )
        return self._db.scalar(query)

    def find_last_paid_by_table(self, table_number: int) -> TableSessionRecord | None:
        """Most recently paid session of a table."""
        query = (
            self._select()
            .where(
                TableSessionRecord.table_number == table_number,
                TableSessionRecord.is_paid.is_(True),
            )
            .order_by(TableSessionRecord.paid_at.desc(), TableSessionRecord.id.desc())
            .limit(1)
        )
        return self._db.scalar(query)

    def find_unpaid(self) -> Sequence[TableSessionRecord]:
        """Every unpaid session, by table number."""
        query = (
            self._select()
            .where(TableSessionRecord.is_paid.is_(False))
            .order_by(TableSessionRecord.table_number)
        )
        return self._all(query)

    def find_paid_between(self, start: datetime, end: datetime) -> Sequence[TableSessionRecord]:
        """Sessions paid within [start, end). Rows only, no eager loading."""
        query = select(TableSessionRecord).where(
            TableSessionRecord.is_paid.is_(True),
            TableSessionRecord.paid_at >= start,
            TableSessionRecord.paid_at < end,
        )
        return self._db.execute(query).scalars().all()

    # =========================================================================
    # Mapping
    # =========================================================================

    @staticmethod
    def to_aggregate(record: TableSessionRecord) -> TableSession:
        """Build the domain aggregate from a loaded row."""
        return TableSession(
            id=record.id,
            table_number=record.table_number,
            is_occupied=record.is_occupied,
            is_paid=record.is_paid,
            has_promotional_initial_order=record.has_promotional_initial_order,
            has_promotional_item=record.has_promotional_item,
            grand_total_cents=record.grand_total_cents,
            receipt_number=record.receipt_number,
            receipt_issued_at=_as_utc(record.receipt_issued_at),
            paid_at=_as_utc(record.paid_at),
            created_at=_as_utc(record.created_at),
            version=record.version,
            lines=[_line_from_row(row) for row in record.lines],
            submissions=[
                OrderSubmission(
                    id=row.id,
                    submission_number=row.submission_number,
                    status=row.status,
                    submission_total_cents=row.submission_total_cents,
                    created_at=_as_utc(row.created_at),
                    items=[_item_from_row(item) for item in row.items],
                )
                for row in record.submissions
            ],
        )

    def add(self, session: TableSession) -> TableSessionRecord:
        """Stage a new session row (flushed on commit)."""
        record = TableSessionRecord(table_number=session.table_number)
        if session.created_at is not None:
            record.created_at = session.created_at
        self._db.add(record)
        self.apply(record, session)
        return record

    def apply(self, record: TableSessionRecord, session: TableSession) -> None:
        """
        Write the aggregate onto its row.

        Tab lines are matched by id and submissions by number; both are
        append-only, so rows are only ever updated or added.
        """
        now = datetime.now(timezone.utc)

        record.is_occupied = session.is_occupied
        record.is_paid = session.is_paid
        record.has_promotional_initial_order = session.has_promotional_initial_order
        record.has_promotional_item = session.has_promotional_item
        record.grand_total_cents = session.grand_total_cents
        record.receipt_number = session.receipt_number
        record.receipt_issued_at = session.receipt_issued_at
        record.paid_at = session.paid_at
        # Forces the versioned UPDATE even when only children changed
        record.updated_at = now

        rows_by_id = {row.id: row for row in record.lines if row.id is not None}
        for position, line in enumerate(session.lines):
            row = rows_by_id.get(line.id) if line.id is not None else None
            if row is None:
                row = SessionLineRecord(position=position)
                record.lines.append(row)
            _line_to_row(line, row)

        existing = {row.submission_number: row for row in record.submissions}
        for submission in session.submissions:
            row = existing.get(submission.submission_number)
            if row is None:
                row = OrderSubmissionRecord(
                    submission_number=submission.submission_number,
                    submission_total_cents=submission.submission_total_cents,
                    items=[
                        _item_to_row(item, position)
                        for position, item in enumerate(submission.items)
                    ],
                )
                if submission.created_at is not None:
                    row.created_at = submission.created_at
                record.submissions.append(row)
            row.status = submission.status


def _line_from_row(row: SessionLineRecord) -> LineItem:
    return LineItem(
        id=row.id,
        name=row.name,
        unit_price_cents=row.unit_price_cents,
        quantity=row.quantity,
        category=row.category,
        description=row.description,
        menu_item_id=row.menu_item_id,
        is_promotional=row.is_promotional,
        selected_flavors=list(row.selected_flavors or []),
        flavor_history=[list(entry) for entry in (row.flavor_history or [])],
        original_quantity=row.original_quantity,
        sequence_number=row.sequence_number,
        flavor_status=row.flavor_status,
    )


def _line_to_row(line: LineItem, row: SessionLineRecord) -> None:
    row.name = line.name
    row.unit_price_cents = line.unit_price_cents
    row.quantity = line.quantity
    row.category = line.category
    row.description = line.description
    row.menu_item_id = line.menu_item_id
    row.is_promotional = line.is_promotional
    row.selected_flavors = list(line.selected_flavors)
    row.flavor_history = [list(entry) for entry in line.flavor_history]
    row.original_quantity = line.original_quantity
    row.sequence_number = line.sequence_number
    row.flavor_status = line.flavor_status


def _item_from_row(row: SubmissionItemRecord) -> LineItem:
    return LineItem(
        id=row.id,
        name=row.name,
        unit_price_cents=row.unit_price_cents,
        quantity=row.quantity,
        category=row.category,
        description=row.description,
        menu_item_id=row.menu_item_id,
        is_promotional=row.is_promotional,
        selected_flavors=list(row.selected_flavors or []),
        original_quantity=row.original_quantity,
        sequence_number=row.sequence_number,
    )


def _item_to_row(item: LineItem, position: int) -> SubmissionItemRecord:
    return SubmissionItemRecord(
        position=position,
        name=item.name,
        unit_price_cents=item.unit_price_cents,
        quantity=item.quantity,
        category=item.category,
        description=item.description,
        menu_item_id=item.menu_item_id,
        is_promotional=item.is_promotional,
        selected_flavors=list(item.selected_flavors),
        original_quantity=item.original_quantity,
        sequence_number=item.sequence_number,
    )
