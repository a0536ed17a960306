"""Version 1 API endpoints."""

from .endpoints import (
    changes_router,
    chat_router,
    ledger_router,
    meals_router,
    members_router,
    reports_router,
    system_router,
)

__all__ = [
    "changes_router",
    "chat_router",
    "ledger_router",
    "meals_router",
    "members_router",
    "reports_router",
    "system_router",
]
