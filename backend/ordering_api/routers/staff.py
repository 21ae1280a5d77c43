"""
Staff router.
Endpoints used by the kitchen and floor staff: list sessions, advance order
and flavor statuses, and the dining room dashboard.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.config.logging import staff_logger as logger
from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    ERROR_RESPONSES,
    DashboardOutput,
    TableSessionOutput,
    UpdateStatusRequest,
)
from ordering_api.repositories.table_session import SessionFilters
from ordering_api.routers._common.pagination import (
    PaginatedResponse,
    Pagination,
    get_pagination,
)
from ordering_api.services.domain import DashboardService, TableSessionService
from ordering_api.services.session_view import build_session_output


router = APIRouter(prefix="/api/staff", tags=["staff"], responses=ERROR_RESPONSES)


@router.get("/sessions")
def list_sessions(
    table_number: int | None = Query(default=None, description="Filter by table"),
    is_paid: bool | None = Query(default=None, description="Filter by payment state"),
    awaiting_payment: bool | None = Query(
        default=None, description="Receipt issued but not yet paid"
    ),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """List sessions, newest first, with pagination metadata."""
    filters = SessionFilters(
        limit=pagination.limit,
        offset=pagination.offset,
        table_number=table_number,
        is_paid=is_paid,
        awaiting_payment=awaiting_payment,
    )
    service = TableSessionService(db)
    sessions = service.list_sessions(filters)
    return PaginatedResponse(
        items=[build_session_output(session) for session in sessions],
        pagination=pagination,
        total=service.count_sessions(filters),
    ).to_dict()


@router.patch(
    "/sessions/{session_id}/submissions/{submission_number}/status",
    response_model=TableSessionOutput,
)
def update_submission_status(
    session_id: int,
    submission_number: int,
    body: UpdateStatusRequest,
    db: Session = Depends(get_db),
) -> TableSessionOutput:
    """
    Advance an order submission (preparing, accepted, completed, paid).

    Moves only forward; repeating the current status is accepted as a no-op.
    """
    logger.debug(
        "Status change requested",
        session_id=session_id,
        submission_number=submission_number,
        status=body.status,
    )
    session = TableSessionService(db).advance_submission_status(
        session_id, submission_number, body.status
    )
    return build_session_output(session)


@router.patch(
    "/sessions/{session_id}/lines/{line_id}/flavor-status",
    response_model=TableSessionOutput,
)
def update_flavor_status(
    session_id: int,
    line_id: int,
    body: UpdateStatusRequest,
    db: Session = Depends(get_db),
) -> TableSessionOutput:
    """Advance the flavor track of the promotional line."""
    session = TableSessionService(db).advance_flavor_status(session_id, line_id, body.status)
    return build_session_output(session)


@router.get("/dashboard", response_model=DashboardOutput)
def get_dashboard(db: Session = Depends(get_db)) -> DashboardOutput:
    return DashboardService(db).summary()
