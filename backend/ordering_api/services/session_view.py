"""
Conversions between API schemas and the session aggregate.

Inbound: request items become LineItems with prices in cents and clean text.
Outbound: aggregates become response models carrying both cents and
two-decimal amounts, so clients never recompute totals themselves.
"""

from collections.abc import Iterable

from shared.config.constants import Limits
from shared.utils.schemas import (
    LineItemInput,
    LineItemOutput,
    ReceiptOutput,
    SubmissionOutput,
    TableSessionOutput,
)
from shared.utils.validators import sanitize_text
from ordering_api.services.domain.aggregate import LineItem, OrderSubmission, TableSession
from ordering_api.services.domain.pricing import charge_for_item, from_cents, to_cents
from ordering_api.services.domain.receipts import ReceiptResult
from ordering_api.services.domain.session_state import session_phase


def line_items_from_request(items: Iterable[LineItemInput]) -> list[LineItem]:
    """Map request items to domain line items. Promotional fields are dropped for regular items."""
    result = []
    for item in items:
        result.append(
            LineItem(
                name=sanitize_text(item.name),
                unit_price_cents=to_cents(item.price),
                quantity=item.quantity,
                category=sanitize_text(item.category, 100),
                description=sanitize_text(item.description, Limits.MAX_DESCRIPTION_LENGTH),
                menu_item_id=sanitize_text(item.menu_item_id, 64),
                is_promotional=item.is_promotional,
                selected_flavors=list(item.selected_flavors) if item.is_promotional else [],
            )
        )
    return result


def build_line_output(line: LineItem, charge_cents: int | None = None) -> LineItemOutput:
    return LineItemOutput(
        id=line.id,
        name=line.name,
        unit_price_cents=line.unit_price_cents,
        unit_price=from_cents(line.unit_price_cents),
        quantity=line.quantity,
        category=line.category,
        description=line.description,
        menu_item_id=line.menu_item_id,
        is_promotional=line.is_promotional,
        selected_flavors=list(line.selected_flavors),
        flavor_history=[list(entry) for entry in line.flavor_history],
        original_quantity=line.original_quantity,
        sequence_number=line.sequence_number,
        flavor_status=line.flavor_status,
        charge_cents=charge_cents,
    )


def build_submission_output(submission: OrderSubmission, has_promotional_initial_order: bool) -> SubmissionOutput:
    return SubmissionOutput(
        id=submission.id,
        submission_number=submission.submission_number,
        status=submission.status,
        items=[
            build_line_output(item, charge_cents=charge_for_item(item, has_promotional_initial_order))
            for item in submission.items
        ],
        submission_total_cents=submission.submission_total_cents,
        submission_total=from_cents(submission.submission_total_cents),
        created_at=submission.created_at,
    )


def build_session_output(session: TableSession) -> TableSessionOutput:
    """Full session view for customers and staff."""
    # Item charges of a paid session are shown as billed
    promo_flag = session.has_promotional_initial_order or (
        session.is_paid and session.has_promotional_item
    )
    return TableSessionOutput(
        id=session.id,
        table_number=session.table_number,
        phase=session_phase(session),
        is_occupied=session.is_occupied,
        is_paid=session.is_paid,
        has_promotional_initial_order=session.has_promotional_initial_order,
        has_promotional_item=session.has_promotional_item,
        grand_total_cents=session.grand_total_cents,
        grand_total=from_cents(session.grand_total_cents),
        receipt_number=session.receipt_number,
        receipt_issued_at=session.receipt_issued_at,
        paid_at=session.paid_at,
        created_at=session.created_at,
        lines=[build_line_output(line) for line in session.lines],
        submissions=[
            build_submission_output(submission, promo_flag)
            for submission in session.submissions
        ],
    )


def build_receipt_output(receipt: ReceiptResult) -> ReceiptOutput:
    return ReceiptOutput(
        receipt_number=receipt.receipt_number,
        grand_total_cents=receipt.grand_total_cents,
        grand_total=receipt.grand_total,
    )
