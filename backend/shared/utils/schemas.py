"""
Shared Pydantic schemas used across the application.

Request models drop unknown fields at the boundary so legacy client
payloads never reach the aggregate. Money leaves the API both as integer
cents and as a two-decimal amount.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

SubmissionStatusValue = Literal["preparing", "accepted", "completed", "paid"]
FlavorStatusValue = Literal["flavor_pending", "flavor_accepted", "flavor_completed"]
SessionPhaseValue = Literal["occupied", "awaiting_payment", "paid"]


class ErrorResponse(BaseModel):
    """Body of every 4xx response raised by the application."""

    detail: str


# OpenAPI documentation of the errors every router can return
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    404: {"model": ErrorResponse, "description": "Session, order or table not found"},
    409: {"model": ErrorResponse, "description": "Conflicts with the session state"},
}


# =============================================================================
# Order Intake Schemas
# =============================================================================


class LineItemInput(BaseModel):
    """A single menu selection as sent by the customer app."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    price: Decimal = Field(
        ge=0, le=Decimal(Limits.MAX_PRICE_CENTS) / 100, max_digits=9, decimal_places=2
    )
    quantity: int = Field(default=1, ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    category: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    menu_item_id: str | None = Field(default=None, max_length=64)
    is_promotional: bool = False
    # Required for promotional items; checked by the merge engine (400, not 422)
    selected_flavors: list[str] = Field(default_factory=list, max_length=Limits.MAX_FLAVORS_PER_ORDER)


class CreateOrderRequest(BaseModel):
    """Initial order or 'order again' submission for a table."""

    model_config = ConfigDict(extra="ignore")

    table_number: int
    items: list[LineItemInput] = Field(min_length=1, max_length=Limits.MAX_ITEMS_PER_SUBMISSION)


class UpdateStatusRequest(BaseModel):
    """Target status for a submission or a flavor track (validated by the state machine)."""

    model_config = ConfigDict(extra="ignore")

    status: str = Field(min_length=1, max_length=40)


# =============================================================================
# Session Output Schemas
# =============================================================================


class LineItemOutput(BaseModel):
    """A line of the tab or of a submission snapshot."""

    id: int | None = None
    name: str
    unit_price_cents: int
    unit_price: Decimal
    quantity: int
    category: str | None = None
    description: str | None = None
    menu_item_id: str | None = None
    is_promotional: bool = False
    selected_flavors: list[str] = []
    flavor_history: list[list[str]] = []
    original_quantity: int | None = None
    sequence_number: int | None = None
    flavor_status: FlavorStatusValue | None = None
    # Only set for submission snapshots
    charge_cents: int | None = None


class SubmissionOutput(BaseModel):
    """One order submission with the items it added."""

    id: int | None = None
    submission_number: int
    status: SubmissionStatusValue
    items: list[LineItemOutput]
    submission_total_cents: int
    submission_total: Decimal
    created_at: datetime | None = None


class TableSessionOutput(BaseModel):
    """Full view of a table session: tab, submissions and totals."""

    id: int | None = None
    table_number: int
    phase: SessionPhaseValue
    is_occupied: bool
    is_paid: bool
    has_promotional_initial_order: bool
    has_promotional_item: bool
    grand_total_cents: int
    grand_total: Decimal
    receipt_number: str | None = None
    receipt_issued_at: datetime | None = None
    paid_at: datetime | None = None
    created_at: datetime | None = None
    lines: list[LineItemOutput]
    submissions: list[SubmissionOutput]


class ReceiptOutput(BaseModel):
    """Receipt issued for a table, returned by both receipt and payment calls."""

    receipt_number: str
    grand_total_cents: int
    grand_total: Decimal


# =============================================================================
# Dashboard Schemas
# =============================================================================


class TableBoardOutput(BaseModel):
    """State of one configured table."""

    table_number: int
    occupied: bool
    session_id: int | None = None
    awaiting_payment: bool = False
    grand_total_cents: int = 0


class OverdueSubmissionOutput(BaseModel):
    """Submission still in the kitchen past the preparation target."""

    session_id: int
    table_number: int
    submission_number: int
    status: SubmissionStatusValue
    elapsed_minutes: int


class DashboardOutput(BaseModel):
    """Staff overview of the dining room."""

    active_submissions: int
    active_tables: int
    completed_submissions: int
    awaiting_payment: int
    todays_revenue_cents: int
    todays_revenue: Decimal
    prep_target_minutes: int
    tables: list[TableBoardOutput]
    overdue: list[OverdueSubmissionOutput]
