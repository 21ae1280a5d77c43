"""
Domain Services.

Structure:
    Router (thin controller)
        ↓
    Service (orchestration, retries)  ← TableSessionService, DashboardService
        ↓
    Pure domain (pricing, order_merge, session_state, receipts)
        ↓
    Repository (data access)

Usage:
    from ordering_api.services.domain import TableSessionService

    service = TableSessionService(db)
    session = service.create_or_update_session(table_number, items)
"""

from .table_session_service import TableSessionService
from .dashboard_service import DashboardService

__all__ = [
    "TableSessionService",
    "DashboardService",
]
