"""
SQLAlchemy ORM Models Package.

- base: Base class and AuditMixin
- table: TableSessionRecord, SessionLineRecord (the merged tab)
- order: OrderSubmissionRecord, SubmissionItemRecord
"""

from .base import Base, AuditMixin, ID_TYPE, JSON_TYPE
from .table import TableSessionRecord, SessionLineRecord
from .order import OrderSubmissionRecord, SubmissionItemRecord

__all__ = [
    "Base",
    "AuditMixin",
    "ID_TYPE",
    "JSON_TYPE",
    "TableSessionRecord",
    "SessionLineRecord",
    "OrderSubmissionRecord",
    "SubmissionItemRecord",
]
