"""
Order Merge Engine.

Folds a newly submitted batch into a table session:

- Regular items accumulate into one tab line per identity (name by default,
  or menu item id). The submission itself records only what was sent.
- The promotional item keeps a single tab line. The first order fixes the
  person count; every re-order pushes the current flavors to the history,
  bumps the sequence number and resets the flavor track.

The input session is never modified; a new aggregate is returned.
"""

import copy
from collections.abc import Sequence
from datetime import datetime, timezone

from shared.config.constants import FlavorStatus, LineMatchKey, Limits
from shared.utils.exceptions import ConflictError, ValidationError
from shared.utils.validators import normalize_flavors, validate_quantity
from ordering_api.services.domain.aggregate import LineItem, OrderSubmission, TableSession
from ordering_api.services.domain.pricing import grand_total, submission_total
from ordering_api.services.domain.session_state import ensure_mutable


def new_session(table_number: int, now: datetime | None = None) -> TableSession:
    """Aggregate for a vacant table, before its first submission."""
    return TableSession(
        table_number=table_number,
        is_occupied=True,
        created_at=now or datetime.now(timezone.utc),
    )


def validate_items(items: Sequence[LineItem]) -> None:
    """
    Intake checks that do not depend on the session.

    Raises:
        ValidationError: Empty batch, bad quantity or price, promotional item
            without flavors, or more than one promotional item.
    """
    if not items:
        raise ValidationError("An order needs at least one item")
    if len(items) > Limits.MAX_ITEMS_PER_SUBMISSION:
        raise ValidationError(
            f"An order can have at most {Limits.MAX_ITEMS_PER_SUBMISSION} items",
            item_count=len(items),
        )

    promotional = 0
    for item in items:
        if not item.name:
            raise ValidationError("Item name is required")
        validate_quantity(item.quantity)
        if item.unit_price_cents < Limits.MIN_PRICE_CENTS:
            raise ValidationError("Price cannot be negative", item=item.name)
        if item.unit_price_cents > Limits.MAX_PRICE_CENTS:
            raise ValidationError(
                f"Price cannot exceed {Limits.MAX_PRICE_CENTS // 100}",
                item=item.name,
                unit_price_cents=item.unit_price_cents,
            )
        if item.is_promotional:
            promotional += 1
            if not normalize_flavors(item.selected_flavors):
                raise ValidationError(
                    f"Select at least one flavor for {item.name}",
                    item=item.name,
                )

    if promotional > 1:
        raise ValidationError("Only one promotional item can be ordered at a time")


def merge_submission(
    session: TableSession,
    new_items: Sequence[LineItem],
    match_key: str = LineMatchKey.NAME,
    now: datetime | None = None,
) -> tuple[TableSession, OrderSubmission]:
    """
    Apply a new batch to the session.

    Returns:
        (updated_session, new_submission)

    Raises:
        SessionPaidError: Session already paid
        ConflictError: Receipt already issued for the session
        ValidationError: Invalid batch (see validate_items)
    """
    ensure_mutable(session)
    if session.receipt_number is not None:
        raise ConflictError(
            f"Table {session.table_number} is awaiting payment; no more orders can be added",
            session_id=session.id,
            receipt_number=session.receipt_number,
        )
    if match_key not in LineMatchKey.ALL:
        raise ValidationError(f"Unknown line match key '{match_key}'")
    validate_items(new_items)

    updated = copy.deepcopy(session)
    snapshot: list[LineItem] = []
    for item in new_items:
        if item.is_promotional:
            snapshot.append(_merge_promotional(updated, item))
        else:
            snapshot.append(_merge_regular(updated, item, match_key))

    submission = OrderSubmission(
        submission_number=len(updated.submissions) + 1,
        items=snapshot,
        created_at=now or datetime.now(timezone.utc),
    )
    submission.submission_total_cents = submission_total(
        snapshot, updated.has_promotional_initial_order
    )
    updated.submissions.append(submission)
    updated.is_occupied = True
    updated.grand_total_cents = grand_total(
        updated.submissions, updated.has_promotional_initial_order
    )
    return updated, submission


def _find_regular_line(lines: list[LineItem], item: LineItem, match_key: str) -> LineItem | None:
    for line in lines:
        if line.is_promotional:
            continue
        if match_key == LineMatchKey.MENU_ITEM_ID:
            # Items without a stable id never merge
            if item.menu_item_id is not None and line.menu_item_id == item.menu_item_id:
                return line
        elif line.name == item.name:
            return line
    return None


def _regular_copy(item: LineItem) -> LineItem:
    return LineItem(
        name=item.name,
        unit_price_cents=item.unit_price_cents,
        quantity=item.quantity,
        category=item.category,
        description=item.description,
        menu_item_id=item.menu_item_id,
    )


def _merge_regular(session: TableSession, item: LineItem, match_key: str) -> LineItem:
    line = _find_regular_line(session.lines, item, match_key)
    if line is not None:
        # Tab keeps its first unit price; the snapshot bills the submitted one
        line.quantity += item.quantity
    else:
        session.lines.append(_regular_copy(item))
    return _regular_copy(item)


def _merge_promotional(session: TableSession, item: LineItem) -> LineItem:
    flavors = normalize_flavors(item.selected_flavors)
    current = session.promotional_line

    if current is None:
        line = LineItem(
            name=item.name,
            unit_price_cents=item.unit_price_cents,
            quantity=item.quantity,
            category=item.category,
            description=item.description,
            menu_item_id=item.menu_item_id,
            is_promotional=True,
            selected_flavors=flavors,
            flavor_history=[],
            original_quantity=item.quantity,
            sequence_number=1,
            flavor_status=FlavorStatus.PENDING,
        )
        session.lines.append(line)
        session.has_promotional_initial_order = True
        session.has_promotional_item = True
        return copy.deepcopy(line)

    current.flavor_history.append(list(current.selected_flavors))
    current.selected_flavors = flavors
    current.sequence_number = (current.sequence_number or 1) + 1
    current.flavor_status = FlavorStatus.PENDING
    session.has_promotional_item = True

    return LineItem(
        name=current.name,
        unit_price_cents=current.unit_price_cents,
        quantity=1,
        category=current.category,
        description=current.description,
        menu_item_id=current.menu_item_id,
        is_promotional=True,
        selected_flavors=list(flavors),
        original_quantity=current.original_quantity,
        sequence_number=current.sequence_number,
        flavor_status=FlavorStatus.PENDING,
    )
