"""
Utilities module: Exceptions, validators.
"""

from shared.utils.exceptions import (
    NotFoundError,
    SessionNotFoundError,
    OpenSessionNotFoundError,
    ValidationError,
    UnknownTableError,
    ConflictError,
    SessionPaidError,
    InvalidTransitionError,
    ConcurrencyError,
)
from shared.utils.validators import (
    sanitize_text,
    validate_table_number,
    validate_quantity,
    normalize_flavors,
)

__all__ = [
    # exceptions
    "NotFoundError",
    "SessionNotFoundError",
    "OpenSessionNotFoundError",
    "ValidationError",
    "UnknownTableError",
    "ConflictError",
    "SessionPaidError",
    "InvalidTransitionError",
    "ConcurrencyError",
    # validators
    "sanitize_text",
    "validate_table_number",
    "validate_quantity",
    "normalize_flavors",
]
