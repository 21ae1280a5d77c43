"""
Dashboard Domain Service.

Staff overview of the dining room: kitchen load, table board, orders past
their preparation target and today's revenue in the restaurant's timezone.
"""

from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from shared.config.constants import SubmissionStatus
from shared.config.logging import get_logger
from shared.config.settings import Settings, get_settings
from shared.utils.schemas import DashboardOutput, OverdueSubmissionOutput, TableBoardOutput
from ordering_api.repositories.table_session import TableSessionRepository
from ordering_api.services.domain.pricing import from_cents

logger = get_logger(__name__)


class DashboardService:
    """Read-only aggregation over open and recently paid sessions."""

    def __init__(self, db: Session, settings: Settings | None = None):
        self._db = db
        self._repo = TableSessionRepository(db)
        self._settings = settings or get_settings()

    def business_day(self, now: datetime) -> tuple[datetime, datetime]:
        """UTC bounds [start, end) of the local business day containing now."""
        tz = ZoneInfo(self._settings.business_timezone)
        local_day = now.astimezone(tz).date()
        start = datetime.combine(local_day, time.min, tzinfo=tz)
        end = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
        return start.astimezone(timezone.utc), end.astimezone(timezone.utc)

    def summary(self, now: datetime | None = None) -> DashboardOutput:
        now = now or datetime.now(timezone.utc)
        target = timedelta(minutes=self._settings.prep_target_minutes)

        open_sessions = [self._repo.to_aggregate(r) for r in self._repo.find_unpaid()]

        active_submissions = 0
        completed_submissions = 0
        overdue: list[OverdueSubmissionOutput] = []
        for session in open_sessions:
            for submission in session.submissions:
                if submission.status == SubmissionStatus.COMPLETED:
                    completed_submissions += 1
                if submission.status not in SubmissionStatus.ACTIVE:
                    continue
                active_submissions += 1
                if submission.created_at is None:
                    continue
                elapsed = now - submission.created_at
                if elapsed >= target:
                    overdue.append(
                        OverdueSubmissionOutput(
                            session_id=session.id,
                            table_number=session.table_number,
                            submission_number=submission.submission_number,
                            status=submission.status,
                            elapsed_minutes=int(elapsed.total_seconds() // 60),
                        )
                    )

        by_table = {session.table_number: session for session in open_sessions}
        tables = []
        for table_number in self._settings.table_numbers:
            session = by_table.get(table_number)
            if session is None:
                tables.append(TableBoardOutput(table_number=table_number, occupied=False))
                continue
            tables.append(
                TableBoardOutput(
                    table_number=table_number,
                    occupied=session.is_occupied,
                    session_id=session.id,
                    awaiting_payment=session.awaiting_payment,
                    grand_total_cents=session.grand_total_cents,
                )
            )

        start, end = self.business_day(now)
        revenue_cents = sum(r.grand_total_cents for r in self._repo.find_paid_between(start, end))

        overdue.sort(key=lambda entry: entry.elapsed_minutes, reverse=True)
        logger.debug(
            "Dashboard computed",
            open_sessions=len(open_sessions),
            overdue=len(overdue),
        )
        return DashboardOutput(
            active_submissions=active_submissions,
            active_tables=sum(1 for session in open_sessions if session.is_occupied),
            completed_submissions=completed_submissions,
            awaiting_payment=sum(1 for session in open_sessions if session.awaiting_payment),
            todays_revenue_cents=revenue_cents,
            todays_revenue=from_cents(revenue_cents),
            prep_target_minutes=self._settings.prep_target_minutes,
            tables=tables,
            overdue=overdue,
        )
