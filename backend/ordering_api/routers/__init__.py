"""
API routers.
"""

from .orders import router as orders_router
from .staff import router as staff_router
from .billing import router as billing_router

__all__ = [
    "orders_router",
    "staff_router",
    "billing_router",
]
