"""
Orders router.
Customer-facing endpoints reached from the table QR code: submit an order
(initial or 'order again') and follow the table's tab.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shared.config.logging import orders_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.utils.exceptions import OpenSessionNotFoundError, SessionNotFoundError
from shared.utils.schemas import ERROR_RESPONSES, CreateOrderRequest, TableSessionOutput
from ordering_api.services.domain import TableSessionService
from ordering_api.services.session_view import build_session_output, line_items_from_request


router = APIRouter(prefix="/api/orders", tags=["orders"], responses=ERROR_RESPONSES)


@router.post("", response_model=TableSessionOutput, status_code=201)
@limiter.limit(settings.order_rate_limit)
def submit_order(
    request: Request,
    body: CreateOrderRequest,
    db: Session = Depends(get_db),
) -> TableSessionOutput:
    """
    Submit a batch of items for a table.

    Opens a session when the table is vacant, otherwise merges into the open
    one. Totals are computed server-side; client prices are per unit only.
    """
    logger.debug("Order received", table_number=body.table_number, item_count=len(body.items))
    session = TableSessionService(db).create_or_update_session(
        body.table_number,
        line_items_from_request(body.items),
    )
    return build_session_output(session)


@router.get("/table/{table_number}", response_model=TableSessionOutput)
def get_table_session(
    table_number: int,
    db: Session = Depends(get_db),
) -> TableSessionOutput:
    """Open session of a table."""
    session = TableSessionService(db).get_session(table_number=table_number)
    if session is None:
        raise OpenSessionNotFoundError(table_number)
    return build_session_output(session)


@router.get("/sessions/{session_id}", response_model=TableSessionOutput)
def get_session_by_id(
    session_id: int,
    db: Session = Depends(get_db),
) -> TableSessionOutput:
    session = TableSessionService(db).get_session(session_id=session_id)
    if session is None:
        raise SessionNotFoundError(session_id)
    return build_session_output(session)
