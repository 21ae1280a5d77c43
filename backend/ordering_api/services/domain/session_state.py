"""
Session State Machine.

Submission statuses and the promotional flavor track only move forward.
Skipping ahead is allowed, re-applying the current status is a no-op, and a
paid session accepts no further changes.
"""

import copy

from shared.config.constants import FlavorStatus, SessionPhase, SubmissionStatus
from shared.utils.exceptions import (
    ConflictError,
    InvalidTransitionError,
    LineItemNotFoundError,
    SessionPaidError,
    SubmissionNotFoundError,
    UnknownStatusError,
    ValidationError,
)
from ordering_api.services.domain.aggregate import TableSession


def session_phase(session: TableSession) -> str:
    if session.is_paid:
        return SessionPhase.PAID
    if session.receipt_number is not None:
        return SessionPhase.AWAITING_PAYMENT
    return SessionPhase.OCCUPIED


def ensure_mutable(session: TableSession) -> None:
    """Raise SessionPaidError if the session is terminal."""
    if session.is_paid:
        raise SessionPaidError(session.id, table_number=session.table_number)


def is_forward(order: list[str], current: str, target: str) -> bool:
    return order.index(target) >= order.index(current)


def _check_transition(entity: str, kind: str, order: list[str], current: str, target: str) -> None:
    if target not in order:
        raise UnknownStatusError(kind, target, order)
    if not is_forward(order, current, target):
        raise InvalidTransitionError(entity, current, target)


def advance_submission_status(
    session: TableSession,
    submission_number: int,
    target: str,
) -> TableSession:
    """
    Move one submission forward through preparing -> accepted -> completed -> paid.

    Marking a single submission paid requires the table's receipt, so the
    session can always be settled afterwards.

    Raises:
        SessionPaidError: Session already paid
        UnknownStatusError: Target is not a submission status
        SubmissionNotFoundError: No such submission
        InvalidTransitionError: Target is behind the current status
        ConflictError: Paying a submission before the receipt is issued
    """
    ensure_mutable(session)
    if target not in SubmissionStatus.ORDER:
        raise UnknownStatusError("submission", target, SubmissionStatus.ORDER)

    submission = session.find_submission(submission_number)
    if submission is None:
        raise SubmissionNotFoundError(submission_number, session_id=session.id)

    _check_transition(
        f"submission {submission_number}",
        "submission",
        SubmissionStatus.ORDER,
        submission.status,
        target,
    )
    if target == submission.status:
        return copy.deepcopy(session)

    if target == SubmissionStatus.PAID and session.receipt_number is None:
        raise ConflictError(
            f"Issue the receipt for table {session.table_number} before marking orders paid",
            session_id=session.id,
            submission_number=submission_number,
        )

    updated = copy.deepcopy(session)
    updated.find_submission(submission_number).status = target
    return updated


def advance_flavor_status(session: TableSession, line_id: int, target: str) -> TableSession:
    """
    Move the promotional line's flavor track forward.

    Raises:
        SessionPaidError: Session already paid
        UnknownStatusError: Target is not a flavor status
        LineItemNotFoundError: No such line in the tab
        ValidationError: Line is not promotional
        InvalidTransitionError: Target is behind the current status
    """
    ensure_mutable(session)
    if target not in FlavorStatus.ORDER:
        raise UnknownStatusError("flavor", target, FlavorStatus.ORDER)

    line = session.find_line(line_id)
    if line is None:
        raise LineItemNotFoundError(line_id, session_id=session.id)
    if not line.is_promotional:
        raise ValidationError(f"Line {line_id} has no flavor track", line_id=line_id)

    current = line.flavor_status or FlavorStatus.PENDING
    _check_transition(f"line {line_id}", "flavor", FlavorStatus.ORDER, current, target)

    updated = copy.deepcopy(session)
    updated.find_line(line_id).flavor_status = target
    return updated
