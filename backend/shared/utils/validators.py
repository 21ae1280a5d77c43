"""
Shared validators for input sanitization.
Pydantic covers shape and ranges; these cover the rules that depend on
configuration or need to be reused by the domain layer.
"""

import re
from collections.abc import Iterable

from shared.config.constants import Limits
from shared.utils.exceptions import UnknownTableError, ValidationError

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def sanitize_text(value: str | None, max_length: int = Limits.MAX_NAME_LENGTH) -> str | None:
    """
    Trim, strip control characters and cap the length of free text.

    Returns None for None so optional fields stay optional.
    """
    if value is None:
        return None

    value = _CONTROL_CHARS.sub("", value).strip()
    if len(value) > max_length:
        value = value[:max_length]
    return value


def validate_table_number(table_number: int, allowed: Iterable[int]) -> int:
    """
    Check that a table number belongs to the configured dining room.

    Raises:
        UnknownTableError: If the table is not configured
    """
    if table_number not in set(allowed):
        raise UnknownTableError(table_number)
    return table_number


def validate_quantity(quantity: int) -> int:
    """
    Raises:
        ValidationError: Quantity outside 1..99
    """
    if not Limits.MIN_QUANTITY <= quantity <= Limits.MAX_QUANTITY:
        raise ValidationError(
            f"Quantity must be between {Limits.MIN_QUANTITY} and {Limits.MAX_QUANTITY}",
            field="quantity",
            value=quantity,
        )
    return quantity


def normalize_flavors(flavors: Iterable[str]) -> list[str]:
    """
    Clean a flavor selection: trimmed, non-empty, first occurrence wins.

    Comparison is case-insensitive but the first spelling is kept.
    """
    seen: set[str] = set()
    result: list[str] = []
    for flavor in flavors:
        cleaned = sanitize_text(flavor, Limits.MAX_FLAVOR_LENGTH)
        if not cleaned:
            continue
        key = cleaned.casefold()
        if key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result
