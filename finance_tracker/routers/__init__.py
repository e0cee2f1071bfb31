"""API routers."""

from finance_tracker.routers.auth import router as auth_router
from finance_tracker.routers.transactions import router as transactions_router

__all__ = ["auth_router", "transactions_router"]
