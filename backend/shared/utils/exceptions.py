"""
Centralized exceptions for consistent error handling.

Domain code raises these directly; because they are HTTPExceptions, FastAPI
renders them with the right status code and no per-route mapping.

Usage:
    from shared.utils.exceptions import NotFoundError, ConflictError, ValidationError

    raise SessionNotFoundError(session_id=12)
    raise ConflictError("Table 2 is awaiting payment", table_number=2)
    raise ValidationError("Promotional items need at least one flavor")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Table session", 123)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class SessionNotFoundError(NotFoundError):
    """Table session not found."""

    def __init__(self, session_id: int | None = None, **log_context: Any):
        super().__init__("Table session", session_id, **log_context)


class OpenSessionNotFoundError(NotFoundError):
    """No open session for the table."""

    def __init__(self, table_number: int, **log_context: Any):
        super().__init__("Open session for table", table_number, **log_context)


class SubmissionNotFoundError(NotFoundError):
    """Order submission not found within a session."""

    def __init__(self, submission_number: int, **log_context: Any):
        super().__init__("Order submission", submission_number, **log_context)


class LineItemNotFoundError(NotFoundError):
    """Line item not found within a session tab."""

    def __init__(self, line_id: int, **log_context: Any):
        super().__init__("Line item", line_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Unknown status 'cooking'")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class UnknownTableError(ValidationError):
    """Table number outside the configured dining room."""

    def __init__(self, table_number: Any, **log_context: Any):
        super().__init__(f"Unknown table number {table_number!r}", table_number=table_number, **log_context)


class UnknownStatusError(ValidationError):
    """Status value not part of the workflow."""

    def __init__(self, kind: str, value: str, allowed: list[str], **log_context: Any):
        allowed_str = ", ".join(allowed)
        super().__init__(
            f"Unknown {kind} status '{value}', expected one of: {allowed_str}",
            kind=kind,
            value=value,
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    The client may re-fetch and retry with corrected intent; the core never
    retries these by itself.
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class SessionPaidError(ConflictError):
    """Paid sessions are terminal."""

    def __init__(self, session_id: int | None = None, **log_context: Any):
        super().__init__(
            f"Table session {session_id} is already paid",
            session_id=session_id,
            **log_context,
        )


class InvalidTransitionError(ConflictError):
    """Backward status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


# =============================================================================
# Internal Errors (never rendered)
# =============================================================================


class ConcurrencyError(Exception):
    """
    A version check or uniqueness constraint failed during a read-modify-write.

    Raised by the persistence layer and retried by the application service
    with a fresh read; surfaced as ConflictError once retries are exhausted.
    """

    def __init__(self, operation: str, reason: str = ""):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Concurrent update during {operation}: {reason}".rstrip(": "))
