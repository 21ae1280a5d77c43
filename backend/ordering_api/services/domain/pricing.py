"""
Pricing Engine.

Pure functions over integer cents. The promotional item is charged once per
person on its initial order; re-orders within the same session are free.
"""

from collections.abc import Iterable
from decimal import Decimal, ROUND_HALF_UP

from ordering_api.services.domain.aggregate import LineItem, OrderSubmission

_CENT = Decimal("0.01")


def to_cents(amount: Decimal | int | str) -> int:
    """Convert a decimal amount to integer cents (half-up)."""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    """Convert integer cents to a two-decimal amount."""
    return (Decimal(cents) / 100).quantize(_CENT)


def charge_for_item(item: LineItem, has_promotional_initial_order: bool) -> int:
    """
    Charge of a single submitted item, in cents.

    Regular items: unit price times quantity.
    Promotional items: free when the session already has its initial
    promotional order and this is a re-order; otherwise unit price times the
    person count frozen on the first order.
    """
    if not item.is_promotional:
        return item.unit_price_cents * item.quantity

    if has_promotional_initial_order and (item.sequence_number or 1) > 1:
        return 0

    persons = item.original_quantity if item.original_quantity is not None else item.quantity
    return item.unit_price_cents * persons


def submission_total(items: Iterable[LineItem], has_promotional_initial_order: bool) -> int:
    return sum(charge_for_item(item, has_promotional_initial_order) for item in items)


def grand_total(submissions: Iterable[OrderSubmission], has_promotional_initial_order: bool) -> int:
    """Sum of every submission of an unpaid session. Paid sessions keep their frozen total."""
    return sum(
        submission_total(submission.items, has_promotional_initial_order)
        for submission in submissions
    )
