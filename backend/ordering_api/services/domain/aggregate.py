"""
Table session aggregate.

Plain dataclasses passed by value through the pricing, merge, state and
receipt functions. The repository maps them to and from ORM rows; nothing
here touches the database.
"""

from dataclasses import dataclass, field
from datetime import datetime

from shared.config.constants import SubmissionStatus


@dataclass
class LineItem:
    """One menu selection, either a tab line or a submission snapshot."""

    name: str
    unit_price_cents: int
    quantity: int = 1
    category: str | None = None
    description: str | None = None
    menu_item_id: str | None = None
    is_promotional: bool = False
    # Promotional track
    selected_flavors: list[str] = field(default_factory=list)
    flavor_history: list[list[str]] = field(default_factory=list)
    original_quantity: int | None = None
    sequence_number: int | None = None
    flavor_status: str | None = None
    id: int | None = None


@dataclass
class OrderSubmission:
    """One atomic batch of items sent by a customer action."""

    submission_number: int
    items: list[LineItem] = field(default_factory=list)
    submission_total_cents: int = 0
    status: str = SubmissionStatus.PREPARING
    created_at: datetime | None = None
    id: int | None = None


@dataclass
class TableSession:
    """All submissions and the merged tab of one table between occupancy and payment."""

    table_number: int
    submissions: list[OrderSubmission] = field(default_factory=list)
    lines: list[LineItem] = field(default_factory=list)
    is_occupied: bool = True
    is_paid: bool = False
    has_promotional_initial_order: bool = False
    has_promotional_item: bool = False
    grand_total_cents: int = 0
    receipt_number: str | None = None
    receipt_issued_at: datetime | None = None
    paid_at: datetime | None = None
    created_at: datetime | None = None
    id: int | None = None
    version: int | None = None

    @property
    def promotional_line(self) -> LineItem | None:
        """The single mutable promotional line of the tab, if ordered."""
        return next((line for line in self.lines if line.is_promotional), None)

    @property
    def open_submissions(self) -> list[OrderSubmission]:
        return [s for s in self.submissions if s.status != SubmissionStatus.PAID]

    @property
    def awaiting_payment(self) -> bool:
        return self.receipt_number is not None and not self.is_paid

    def find_submission(self, submission_number: int) -> OrderSubmission | None:
        return next(
            (s for s in self.submissions if s.submission_number == submission_number),
            None,
        )

    def find_line(self, line_id: int) -> LineItem | None:
        return next((line for line in self.lines if line.id == line_id), None)
