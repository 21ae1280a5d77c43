"""
Table Session Models: TableSessionRecord, SessionLineRecord.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import ID_TYPE, JSON_TYPE, AuditMixin, Base

if TYPE_CHECKING:
    from .order import OrderSubmissionRecord


class TableSessionRecord(AuditMixin, Base):
    """
    One occupied table, from its first order until payment.

    Only one unpaid row may exist per table number (partial unique index).
    The version column turns lost updates into StaleDataError on save.
    """

    __tablename__ = "table_session"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)
    is_occupied: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_promotional_initial_order: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    has_promotional_item: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    grand_total_cents: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    receipt_number: Mapped[Optional[str]] = mapped_column(Text, unique=True, nullable=True)
    receipt_issued_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        # Open session lookup by table
        Index("ix_table_session_table_paid", "table_number", "is_paid"),
        # At most one open session per table
        Index(
            "uq_table_session_open_table",
            "table_number",
            unique=True,
            sqlite_where=text("is_paid = 0"),
            postgresql_where=text("is_paid = false"),
        ),
        # Sessions awaiting payment
        Index("ix_table_session_paid_receipt", "is_paid", "receipt_number"),
        CheckConstraint("grand_total_cents >= 0", name="ck_table_session_total_positive"),
    )

    # Relationships
    lines: Mapped[list["SessionLineRecord"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionLineRecord.position",
    )
    submissions: Mapped[list["OrderSubmissionRecord"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="OrderSubmissionRecord.submission_number",
    )


class SessionLineRecord(AuditMixin, Base):
    """
    A line of the merged tab. Regular lines accumulate quantity; the single
    promotional line carries the flavor track.
    """

    __tablename__ = "session_line"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    table_session_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("table_session.id", ondelete="CASCADE"), nullable=False, index=True
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
    flavor_history: Mapped[list] = mapped_column(JSON_TYPE, default=list, nullable=False)
    original_quantity: Mapped[Optional[int]] = mapped_column(Integer)
    sequence_number: Mapped[Optional[int]] = mapped_column(Integer)
    flavor_status: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_session_line_quantity_positive"),
        CheckConstraint("unit_price_cents >= 0", name="ck_session_line_price_positive"),
    )

    session: Mapped["TableSessionRecord"] = relationship(back_populates="lines")
