"""
Billing router.
Receipt issuance and payment recording. Payment is recorded, not processed.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.config.logging import billing_logger as logger
from shared.infrastructure.db import get_db
from shared.utils.schemas import ERROR_RESPONSES, ReceiptOutput
from ordering_api.services.domain import TableSessionService
from ordering_api.services.session_view import build_receipt_output


router = APIRouter(prefix="/api/billing", tags=["billing"], responses=ERROR_RESPONSES)


@router.post("/table/{table_number}/receipt", response_model=ReceiptOutput)
def issue_receipt(
    table_number: int,
    db: Session = Depends(get_db),
) -> ReceiptOutput:
    """
    Issue the receipt for a table.

    Freezes the total and completes all open orders. Calling it again before
    payment returns the same receipt.
    """
    logger.debug("Receipt requested", table_number=table_number)
    receipt = TableSessionService(db).issue_receipt(table_number)
    return build_receipt_output(receipt)


@router.patch("/table/{table_number}/pay", response_model=ReceiptOutput)
def mark_table_paid(
    table_number: int,
    db: Session = Depends(get_db),
) -> ReceiptOutput:
    """
    Record payment and vacate the table.

    Idempotent: a repeated call returns the receipt already paid.
    """
    receipt = TableSessionService(db).mark_table_paid(table_number)
    return build_receipt_output(receipt)
