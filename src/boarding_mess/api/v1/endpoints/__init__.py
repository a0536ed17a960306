"""API endpoint modules for version 1."""

from .changes import router as changes_router
from .chat import router as chat_router
from .ledger import router as ledger_router
from .meals import router as meals_router
from .members import router as members_router
from .reports import router as reports_router
from .system import router as system_router

__all__ = [
    "changes_router",
    "chat_router",
    "ledger_router",
    "meals_router",
    "members_router",
    "reports_router",
    "system_router",
]
