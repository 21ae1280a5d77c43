"""
Tests for the pricing engine.
"""

from decimal import Decimal

import pytest

from ordering_api.services.domain.aggregate import LineItem, OrderSubmission
from ordering_api.services.domain.pricing import (
    charge_for_item,
    from_cents,
    grand_total,
    submission_total,
    to_cents,
)


class TestMoneyConversion:
    """Tests for decimal <-> cents helpers."""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (Decimal("59"), 5900),
            (Decimal("59.5"), 5950),
            (Decimal("0.01"), 1),
            (Decimal("0"), 0),
            ("338.00", 33800),
            (12, 1200),
        ],
    )
    def test_to_cents(self, amount, expected):
        assert to_cents(amount) == expected

    def test_to_cents_rounds_half_up(self):
        """Sub-cent amounts round half up, never through float."""
        assert to_cents(Decimal("0.005")) == 1
        assert to_cents(Decimal("0.004")) == 0

    def test_from_cents_has_two_decimals(self):
        assert from_cents(33800) == Decimal("338.00")
        assert str(from_cents(5)) == "0.05"


class TestChargeForItem:
    """Tests for per-item charges."""

    def test_regular_item_is_price_times_quantity(self):
        item = LineItem(name="Fries", unit_price_cents=5900, quantity=3)

        assert charge_for_item(item, has_promotional_initial_order=False) == 17700
        assert charge_for_item(item, has_promotional_initial_order=True) == 17700

    def test_promotional_initial_order_charged_per_person(self):
        item = LineItem(
            name="Unliwings",
            unit_price_cents=39900,
            quantity=2,
            is_promotional=True,
            original_quantity=2,
            sequence_number=1,
        )

        assert charge_for_item(item, has_promotional_initial_order=True) == 79800

    def test_promotional_reorder_is_free(self):
        """Re-orders cost nothing, whatever their price or quantity."""
        item = LineItem(
            name="Unliwings",
            unit_price_cents=39900,
            quantity=5,
            is_promotional=True,
            original_quantity=2,
            sequence_number=3,
        )

        assert charge_for_item(item, has_promotional_initial_order=True) == 0

    def test_promotional_uses_original_quantity_over_quantity(self):
        """Person count comes from the first order, not the submitted quantity."""
        item = LineItem(
            name="Unliwings",
            unit_price_cents=10000,
            quantity=1,
            is_promotional=True,
            original_quantity=4,
            sequence_number=2,
        )

        assert charge_for_item(item, has_promotional_initial_order=False) == 40000

    def test_promotional_without_original_quantity_falls_back_to_quantity(self):
        item = LineItem(name="Unliwings", unit_price_cents=10000, quantity=3, is_promotional=True)

        assert charge_for_item(item, has_promotional_initial_order=False) == 30000


class TestTotals:
    """Tests for submission and grand totals."""

    def test_submission_total_sums_items(self):
        items = [
            LineItem(name="Fries", unit_price_cents=5900, quantity=2),
            LineItem(name="Iced Tea", unit_price_cents=4500, quantity=1),
        ]

        assert submission_total(items, False) == 16300

    def test_empty_submission_total_is_zero(self):
        assert submission_total([], True) == 0

    def test_grand_total_sums_submissions(self):
        first = OrderSubmission(
            submission_number=1,
            items=[
                LineItem(
                    name="Unliwings",
                    unit_price_cents=16900,
                    quantity=2,
                    is_promotional=True,
                    original_quantity=2,
                    sequence_number=1,
                )
            ],
        )
        second = OrderSubmission(
            submission_number=2,
            items=[
                LineItem(
                    name="Unliwings",
                    unit_price_cents=16900,
                    quantity=1,
                    is_promotional=True,
                    original_quantity=2,
                    sequence_number=2,
                ),
                LineItem(name="Rice", unit_price_cents=2500, quantity=2),
            ],
        )

        assert grand_total([first, second], True) == 33800 + 5000
