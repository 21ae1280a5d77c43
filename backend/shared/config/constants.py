"""
Centralized constants for the backend application.
Avoids magic strings for statuses that travel between layers.

Usage:
    from shared.config.constants import SubmissionStatus, FlavorStatus

    if status == SubmissionStatus.PREPARING:
        ...
"""

from typing import Final


# =============================================================================
# Entity Status Constants
# =============================================================================


class SubmissionStatus:
    """Order submission fulfillment status, in workflow order."""

    PREPARING: Final[str] = "preparing"
    ACCEPTED: Final[str] = "accepted"
    COMPLETED: Final[str] = "completed"
    PAID: Final[str] = "paid"

    ORDER: Final[list[str]] = [PREPARING, ACCEPTED, COMPLETED, PAID]
    # Still being worked on by the kitchen
    ACTIVE: Final[list[str]] = [PREPARING, ACCEPTED]
    # Not yet settled; receipts cover these
    OPEN: Final[list[str]] = [PREPARING, ACCEPTED, COMPLETED]


class FlavorStatus:
    """Flavor track of the promotional line, reset on every re-order."""

    PENDING: Final[str] = "flavor_pending"
    ACCEPTED: Final[str] = "flavor_accepted"
    COMPLETED: Final[str] = "flavor_completed"

    ORDER: Final[list[str]] = [PENDING, ACCEPTED, COMPLETED]


class SessionPhase:
    """Table session lifecycle phase (derived, not stored)."""

    OCCUPIED: Final[str] = "occupied"
    AWAITING_PAYMENT: Final[str] = "awaiting_payment"
    PAID: Final[str] = "paid"


class LineMatchKey:
    """Identity used to merge regular items into the tab."""

    NAME: Final[str] = "name"
    MENU_ITEM_ID: Final[str] = "menu_item_id"

    ALL: Final[list[str]] = [NAME, MENU_ITEM_ID]


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    # Price limits (in cents)
    MIN_PRICE_CENTS: Final[int] = 0
    MAX_PRICE_CENTS: Final[int] = 100_000_00

    # Submission size
    MAX_ITEMS_PER_SUBMISSION: Final[int] = 50
    MAX_FLAVORS_PER_ORDER: Final[int] = 10

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_FLAVOR_LENGTH: Final[int] = 60

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200
