"""API routers."""

from app.routers.auth import router as auth_router
from app.routers.ledger import router as ledger_router
from app.routers.profile import router as profile_router

__all__ = ["auth_router", "profile_router", "ledger_router"]
