"""
Table Session Domain Service.

Application layer over the session aggregate. Every mutating operation is
one read-modify-write: load the row, apply a pure domain function, write the
aggregate back and commit with a version check. A lost race is retried on a
fresh read a bounded number of times before surfacing as a conflict.
"""

from collections.abc import Callable, Sequence

from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.config.settings import Settings, get_settings
from shared.infrastructure.db import atomic_commit
from shared.utils.exceptions import (
    ConcurrencyError,
    ConflictError,
    OpenSessionNotFoundError,
    SessionNotFoundError,
    SessionPaidError,
    ValidationError,
)
from shared.utils.validators import validate_table_number
from ordering_api.models import TableSessionRecord
from ordering_api.repositories.table_session import SessionFilters, TableSessionRepository
from ordering_api.services.domain import order_merge, receipts, session_state
from ordering_api.services.domain.aggregate import LineItem, TableSession
from ordering_api.services.domain.receipts import ReceiptResult

logger = get_logger(__name__)


class TableSessionService:
    """
    Domain service for table session operations.

    Usage:
        service = TableSessionService(db)
        session = service.create_or_update_session(2, items)
        receipt = service.issue_receipt(2)
    """

    def __init__(self, db: Session, settings: Settings | None = None):
        self._db = db
        self._repo = TableSessionRepository(db)
        self._settings = settings or get_settings()

    # =========================================================================
    # Queries
    # =========================================================================

    def get_session(
        self,
        table_number: int | None = None,
        session_id: int | None = None,
    ) -> TableSession | None:
        """
        Find a session by id, or the open session of a table.

        Returns None when nothing matches.
        """
        if session_id is not None:
            record = self._repo.find_by_id(session_id)
        elif table_number is not None:
            validate_table_number(table_number, self._settings.table_numbers)
            record = self._repo.find_open_by_table(table_number)
        else:
            raise ValidationError("A table number or a session id is required")

        return self._repo.to_aggregate(record) if record is not None else None

    def list_sessions(self, filters: SessionFilters | None = None) -> list[TableSession]:
        """List sessions, newest first."""
        records = self._repo.find_all(filters or SessionFilters())
        return [self._repo.to_aggregate(record) for record in records]

    def count_sessions(self, filters: SessionFilters | None = None) -> int:
        return self._repo.count(filters or SessionFilters())

    # =========================================================================
    # Commands
    # =========================================================================

    def create_or_update_session(
        self,
        table_number: int,
        items: Sequence[LineItem],
    ) -> TableSession:
        """
        Open a session for a vacant table or merge into the open one.

        Raises:
            UnknownTableError: Table not configured
            ValidationError: Invalid batch
            ConflictError: Session awaiting payment, or retries exhausted
        """
        validate_table_number(table_number, self._settings.table_numbers)

        def mutate() -> TableSessionRecord:
            record = self._repo.find_open_by_table(table_number)
            current = (
                self._repo.to_aggregate(record)
                if record is not None
                else order_merge.new_session(table_number)
            )
            updated, _ = order_merge.merge_submission(
                current, items, match_key=self._settings.line_match_key
            )
            if record is None:
                return self._repo.add(updated)
            self._repo.apply(record, updated)
            return record

        session = self._run_atomic("create_or_update_session", mutate)
        submission = session.submissions[-1]
        logger.info(
            "Order submitted",
            table_number=table_number,
            session_id=session.id,
            submission_number=submission.submission_number,
            item_count=len(submission.items),
            submission_total_cents=submission.submission_total_cents,
            grand_total_cents=session.grand_total_cents,
        )
        return session

    def advance_submission_status(
        self,
        session_id: int,
        submission_number: int,
        target: str,
    ) -> TableSession:
        """Move one submission forward in its workflow."""

        def mutate() -> TableSessionRecord:
            record = self._require(session_id)
            updated = session_state.advance_submission_status(
                self._repo.to_aggregate(record), submission_number, target
            )
            self._repo.apply(record, updated)
            return record

        session = self._run_atomic("advance_submission_status", mutate)
        logger.info(
            "Submission status updated",
            session_id=session_id,
            submission_number=submission_number,
            status=target,
        )
        return session

    def advance_flavor_status(self, session_id: int, line_id: int, target: str) -> TableSession:
        """Move the promotional line's flavor track forward."""

        def mutate() -> TableSessionRecord:
            record = self._require(session_id)
            updated = session_state.advance_flavor_status(
                self._repo.to_aggregate(record), line_id, target
            )
            self._repo.apply(record, updated)
            return record

        session = self._run_atomic("advance_flavor_status", mutate)
        logger.info(
            "Flavor status updated",
            session_id=session_id,
            line_id=line_id,
            flavor_status=target,
        )
        return session

    def issue_receipt(self, table_number: int) -> ReceiptResult:
        """
        Issue (or return the already issued) receipt for a table's open session.

        Raises:
            OpenSessionNotFoundError: Table was never paid and has no open session
            SessionPaidError: Table's last session is paid and nothing new was ordered
            ConflictError: No open submissions
        """
        validate_table_number(table_number, self._settings.table_numbers)

        def mutate() -> TableSessionRecord:
            record = self._repo.find_open_by_table(table_number)
            if record is None:
                paid = self._repo.find_last_paid_by_table(table_number)
                if paid is not None:
                    raise SessionPaidError(paid.id, table_number=table_number)
                raise OpenSessionNotFoundError(table_number)
            # A new number per attempt; collisions fail the unique index and retry
            updated = receipts.issue_receipt(
                self._repo.to_aggregate(record), receipts.generate_receipt_number()
            )
            self._repo.apply(record, updated)
            return record

        session = self._run_atomic("issue_receipt", mutate)
        logger.info(
            "Receipt issued",
            table_number=table_number,
            session_id=session.id,
            receipt_number=session.receipt_number,
            grand_total_cents=session.grand_total_cents,
        )
        return ReceiptResult.from_session(session)

    def mark_table_paid(self, table_number: int) -> ReceiptResult:
        """
        Record payment for a table and vacate it.

        A retry after the table was already vacated returns the frozen
        receipt of its most recent paid session.

        Raises:
            OpenSessionNotFoundError: Table was never paid and has no open session
            ConflictError: Receipt not yet issued
        """
        validate_table_number(table_number, self._settings.table_numbers)

        if self._repo.find_open_by_table(table_number) is None:
            paid = self._repo.find_last_paid_by_table(table_number)
            if paid is None:
                raise OpenSessionNotFoundError(table_number)
            logger.info(
                "Payment already recorded",
                table_number=table_number,
                session_id=paid.id,
                receipt_number=paid.receipt_number,
            )
            return ReceiptResult.from_session(self._repo.to_aggregate(paid))

        def mutate() -> TableSessionRecord:
            record = self._repo.find_open_by_table(table_number)
            if record is None:
                # Paid by a concurrent request between the check and this attempt
                record = self._repo.find_last_paid_by_table(table_number)
                if record is None:
                    raise OpenSessionNotFoundError(table_number)
                return record
            updated = receipts.mark_paid(self._repo.to_aggregate(record))
            self._repo.apply(record, updated)
            return record

        session = self._run_atomic("mark_table_paid", mutate)
        logger.info(
            "Table paid",
            table_number=table_number,
            session_id=session.id,
            receipt_number=session.receipt_number,
            grand_total_cents=session.grand_total_cents,
        )
        return ReceiptResult.from_session(session)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require(self, session_id: int) -> TableSessionRecord:
        record = self._repo.find_by_id(session_id)
        if record is None:
            raise SessionNotFoundError(session_id)
        return record

    def _run_atomic(self, operation: str, mutate: Callable[[], TableSessionRecord]) -> TableSession:
        """
        Run mutate() and commit, retrying on ConcurrencyError with a fresh read.

        Domain errors roll back and propagate untouched.
        """
        attempts = max(1, self._settings.write_max_retries)
        for attempt in range(1, attempts + 1):
            try:
                record = mutate()
            except Exception:
                self._db.rollback()
                raise

            try:
                atomic_commit(self._db, operation)
            except ConcurrencyError as exc:
                logger.warning(
                    "Concurrent update detected, retrying",
                    operation=operation,
                    attempt=attempt,
                    max_attempts=attempts,
                    reason=exc.reason,
                )
                continue

            record_id = record.id
            return self._repo.to_aggregate(self._repo.find_by_id(record_id))

        raise ConflictError(
            "The table was updated by another request; please refresh and try again",
            operation=operation,
            attempts=attempts,
        )
