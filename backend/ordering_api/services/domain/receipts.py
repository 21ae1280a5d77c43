"""
Receipt/Payment Issuer.

A receipt freezes the session total and closes it to new orders; payment
vacates the table. Receipt numbers are time-based with a random suffix and
are made unique by the database index, not by the generator.
"""

import copy
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from shared.config.constants import SubmissionStatus
from shared.utils.exceptions import ConflictError
from ordering_api.services.domain.aggregate import TableSession
from ordering_api.services.domain.pricing import from_cents, grand_total
from ordering_api.services.domain.session_state import ensure_mutable


@dataclass(frozen=True)
class ReceiptResult:
    receipt_number: str
    grand_total_cents: int

    @property
    def grand_total(self) -> Decimal:
        return from_cents(self.grand_total_cents)

    @classmethod
    def from_session(cls, session: TableSession) -> "ReceiptResult":
        return cls(
            receipt_number=session.receipt_number,
            grand_total_cents=session.grand_total_cents,
        )


def generate_receipt_number(now: datetime | None = None) -> str:
    """'R' + last six digits of the epoch milliseconds + three random digits."""
    now = now or datetime.now(timezone.utc)
    millis = str(int(now.timestamp() * 1000))
    return f"R{millis[-6:]}{secrets.randbelow(1000):03d}"


def issue_receipt(
    session: TableSession,
    receipt_number: str,
    now: datetime | None = None,
) -> TableSession:
    """
    Issue the receipt for a session.

    Freezes the grand total and moves every open submission forward to
    completed. A session that already has a receipt is returned unchanged.

    Raises:
        SessionPaidError: Session already paid
        ConflictError: No open submissions to bill
    """
    ensure_mutable(session)
    if session.receipt_number is not None:
        return copy.deepcopy(session)
    if not session.open_submissions:
        raise ConflictError(
            f"Table {session.table_number} has no open orders to bill",
            session_id=session.id,
        )

    updated = copy.deepcopy(session)
    updated.receipt_number = receipt_number
    updated.receipt_issued_at = now or datetime.now(timezone.utc)
    updated.grand_total_cents = grand_total(
        updated.submissions, updated.has_promotional_initial_order
    )
    for submission in updated.submissions:
        if submission.status in SubmissionStatus.ACTIVE:
            submission.status = SubmissionStatus.COMPLETED
    return updated


def mark_paid(session: TableSession, now: datetime | None = None) -> TableSession:
    """
    Record payment and vacate the table. Calling it on a paid session is a no-op.

    Raises:
        ConflictError: No receipt issued yet
    """
    if session.is_paid:
        return copy.deepcopy(session)
    if session.receipt_number is None:
        raise ConflictError(
            f"Table {session.table_number} has no receipt; issue one before payment",
            session_id=session.id,
        )

    updated = copy.deepcopy(session)
    updated.is_paid = True
    updated.is_occupied = False
    updated.has_promotional_initial_order = False
    updated.paid_at = now or datetime.now(timezone.utc)
    for submission in updated.submissions:
        submission.status = SubmissionStatus.PAID
    return updated
