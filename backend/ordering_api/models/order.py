"""
Order Models: OrderSubmissionRecord, SubmissionItemRecord.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import ID_TYPE, JSON_TYPE, AuditMixin, Base

if TYPE_CHECKING:
    from .table import TableSessionRecord


class OrderSubmissionRecord(AuditMixin, Base):
    """
    One batch of items sent by a customer (initial order or order again).
    Numbered 1..n within its session; items are the batch as submitted.
    """

    __tablename__ = "order_submission"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    table_session_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("table_session.id", ondelete="CASCADE"), nullable=False
    )
    submission_number: Mapped[int] = mapped_column(Integer, nullable=False)
    # preparing, accepted, completed, paid
    status: Mapped[str] = mapped_column(Text, default="preparing", nullable=False)
    submission_total_cents: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "table_session_id", "submission_number", name="uq_order_submission_number"
        ),
        Index("ix_order_submission_status", "status"),
    )

    session: Mapped["TableSessionRecord"] = relationship(back_populates="submissions")
    items: Mapped[list["SubmissionItemRecord"]] = relationship(
        back_populates="submission",
        cascade="all, delete-orphan",
        order_by="SubmissionItemRecord.position",
    )


class SubmissionItemRecord(AuditMixin, Base):
    """Snapshot of one item as it was submitted. Never changed after insert."""

    __tablename__ = "submission_item"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    order_submission_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("order_submission.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    menu_item_id: Mapped[Optional[str]] = mapped_column(Text)
    is_promotional: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    selected_flavors: Mapped[list] = mapped_column(JSON_TYPE, default=list, nullable=False)
    original_quantity: Mapped[Optional[int]] = mapped_column(Integer)
    sequence_number: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_submission_item_quantity_positive"),
    )

    submission: Mapped["OrderSubmissionRecord"] = relationship(back_populates="items")
