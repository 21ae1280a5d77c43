"""
Tests for the session state machine.
"""

import pytest

from ordering_api.services.domain.order_merge import merge_submission, new_session
from ordering_api.services.domain.session_state import (
    advance_flavor_status,
    advance_submission_status,
    session_phase,
)
from shared.config.constants import FlavorStatus, SessionPhase, SubmissionStatus
from shared.utils.exceptions import (
    ConflictError,
    InvalidTransitionError,
    LineItemNotFoundError,
    NotFoundError,
    SessionPaidError,
    SubmissionNotFoundError,
    ValidationError,
)
from factories import make_item, make_wings


@pytest.fixture
def session():
    """Session with one wings order and one side order; lines carry ids as if persisted."""
    current, _ = merge_submission(new_session(2), [make_wings(), make_item("Fries")])
    for index, line in enumerate(current.lines, start=1):
        line.id = index
    current.id = 10
    return current


class TestSubmissionStatus:
    """Tests for forward-only submission transitions."""

    def test_single_step_forward(self, session):
        updated = advance_submission_status(session, 1, SubmissionStatus.ACCEPTED)

        assert updated.submissions[0].status == SubmissionStatus.ACCEPTED
        assert session.submissions[0].status == SubmissionStatus.PREPARING

    def test_skipping_ahead_is_allowed(self, session):
        updated = advance_submission_status(session, 1, SubmissionStatus.COMPLETED)

        assert updated.submissions[0].status == SubmissionStatus.COMPLETED

    def test_same_status_is_noop(self, session):
        updated = advance_submission_status(session, 1, SubmissionStatus.PREPARING)

        assert updated == session

    def test_backward_transition_rejected(self, session):
        completed = advance_submission_status(session, 1, SubmissionStatus.COMPLETED)

        with pytest.raises(InvalidTransitionError) as exc_info:
            advance_submission_status(completed, 1, SubmissionStatus.ACCEPTED)
        assert isinstance(exc_info.value, ConflictError)
        assert exc_info.value.status_code == 409

    def test_unknown_status_rejected(self, session):
        with pytest.raises(ValidationError):
            advance_submission_status(session, 1, "cooking")

    def test_unknown_submission_not_found(self, session):
        with pytest.raises(SubmissionNotFoundError) as exc_info:
            advance_submission_status(session, 9, SubmissionStatus.ACCEPTED)
        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 404

    def test_paid_before_receipt_rejected(self, session):
        with pytest.raises(ConflictError):
            advance_submission_status(session, 1, SubmissionStatus.PAID)

    def test_single_order_paid_after_receipt(self, session):
        session.receipt_number = "R000001123"

        updated = advance_submission_status(session, 1, SubmissionStatus.PAID)

        assert updated.submissions[0].status == SubmissionStatus.PAID
        assert updated.is_paid is False

    def test_paid_session_is_terminal(self, session):
        session.is_paid = True

        with pytest.raises(SessionPaidError):
            advance_submission_status(session, 1, SubmissionStatus.ACCEPTED)


class TestFlavorStatus:
    """Tests for the promotional flavor track."""

    def test_flavor_track_moves_forward(self, session):
        wings = session.promotional_line

        updated = advance_flavor_status(session, wings.id, FlavorStatus.ACCEPTED)
        updated = advance_flavor_status(updated, wings.id, FlavorStatus.COMPLETED)

        assert updated.promotional_line.flavor_status == FlavorStatus.COMPLETED

    def test_flavor_track_independent_of_submission_status(self, session):
        wings = session.promotional_line

        updated = advance_flavor_status(session, wings.id, FlavorStatus.COMPLETED)

        assert updated.submissions[0].status == SubmissionStatus.PREPARING

    def test_flavor_backward_rejected(self, session):
        wings = session.promotional_line
        updated = advance_flavor_status(session, wings.id, FlavorStatus.COMPLETED)

        with pytest.raises(InvalidTransitionError):
            advance_flavor_status(updated, wings.id, FlavorStatus.PENDING)

    def test_regular_line_has_no_flavor_track(self, session):
        fries = next(line for line in session.lines if not line.is_promotional)

        with pytest.raises(ValidationError):
            advance_flavor_status(session, fries.id, FlavorStatus.ACCEPTED)

    def test_unknown_flavor_status_rejected(self, session):
        with pytest.raises(ValidationError):
            advance_flavor_status(session, session.promotional_line.id, "accepted")

    def test_unknown_line_not_found(self, session):
        with pytest.raises(LineItemNotFoundError):
            advance_flavor_status(session, 99, FlavorStatus.ACCEPTED)

    def test_paid_session_is_terminal(self, session):
        session.is_paid = True

        with pytest.raises(SessionPaidError):
            advance_flavor_status(session, session.promotional_line.id, FlavorStatus.ACCEPTED)


class TestSessionPhase:
    """Tests for the derived lifecycle phase."""

    def test_phases(self, session):
        assert session_phase(session) == SessionPhase.OCCUPIED

        session.receipt_number = "R000001123"
        assert session_phase(session) == SessionPhase.AWAITING_PAYMENT

        session.is_paid = True
        assert session_phase(session) == SessionPhase.PAID
