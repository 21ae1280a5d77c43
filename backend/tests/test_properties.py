"""
Property-based Testing with Hypothesis.

Pricing and merge rules checked over generated order sequences.
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from ordering_api.services.domain.order_merge import merge_submission, new_session
from ordering_api.services.domain.pricing import from_cents, to_cents
from ordering_api.services.domain.receipts import issue_receipt, mark_paid
from ordering_api.services.domain.session_state import advance_submission_status
from shared.config.constants import SubmissionStatus
from shared.utils.exceptions import SessionPaidError
from factories import make_item, make_wings

flavor = st.sampled_from(["BBQ", "Garlic", "Teriyaki", "Buffalo", "Honey", "Lemon"])
flavor_sets = st.lists(flavor, min_size=1, max_size=3, unique=True)
quantities = st.integers(min_value=1, max_value=20)
prices = st.integers(min_value=0, max_value=1_000_00)


class TestPricingProperties:
    """Properties of the promotional pricing rule."""

    @given(
        persons=quantities,
        price=prices,
        reorders=st.lists(st.tuples(flavor_sets, quantities), max_size=8),
    )
    @settings(max_examples=50)
    def test_reorders_never_change_the_total(self, persons, price, reorders):
        """Property: grand total is price times persons, whatever is re-ordered."""
        session, _ = merge_submission(
            new_session(2), [make_wings(("BBQ",), quantity=persons, price_cents=price)]
        )

        for flavors, quantity in reorders:
            session, submission = merge_submission(
                session, [make_wings(flavors, quantity=quantity, price_cents=price)]
            )
            assert submission.submission_total_cents == 0

        assert session.grand_total_cents == price * persons
        assert session.promotional_line.original_quantity == persons
        assert session.promotional_line.sequence_number == len(reorders) + 1
        assert len(session.promotional_line.flavor_history) == len(reorders)

    @given(cents=st.integers(min_value=0, max_value=10**9))
    def test_cents_conversion_is_exact(self, cents):
        assert to_cents(from_cents(cents)) == cents
        assert from_cents(cents) == Decimal(cents) / 100


class TestMergeProperties:
    """Properties of quantity merging and submission numbering."""

    @given(batches=st.lists(quantities, min_size=1, max_size=10), price=prices)
    @settings(max_examples=50)
    def test_tab_quantity_is_sum_of_submissions(self, batches, price):
        session = new_session(1)
        for quantity in batches:
            session, _ = merge_submission(session, [make_item("Fries", price, quantity)])

        assert len(session.lines) == 1
        assert session.lines[0].quantity == sum(batches)
        assert session.grand_total_cents == price * sum(batches)
        assert [s.submission_number for s in session.submissions] == list(
            range(1, len(batches) + 1)
        )

    @given(
        names=st.lists(st.sampled_from(["Fries", "Rice", "Soda", "Salad"]), min_size=1, max_size=12)
    )
    def test_one_line_per_distinct_name(self, names):
        session = new_session(1)
        for name in names:
            session, _ = merge_submission(session, [make_item(name)])

        assert sorted(line.name for line in session.lines) == sorted(set(names))


class TestLifecycleProperties:
    """Properties of billing and the paid terminal state."""

    @given(repeats=st.integers(min_value=1, max_value=5))
    def test_payment_is_idempotent(self, repeats):
        session, _ = merge_submission(new_session(1), [make_item()])
        paid = mark_paid(issue_receipt(session, "R000000001"))

        again = paid
        for _ in range(repeats):
            again = mark_paid(again)

        assert again == paid

    @given(status=st.sampled_from(SubmissionStatus.ORDER))
    def test_paid_session_rejects_every_change(self, status):
        session, _ = merge_submission(new_session(1), [make_item()])
        paid = mark_paid(issue_receipt(session, "R000000001"))

        with pytest.raises(SessionPaidError):
            advance_submission_status(paid, 1, status)
        with pytest.raises(SessionPaidError):
            merge_submission(paid, [make_item()])
