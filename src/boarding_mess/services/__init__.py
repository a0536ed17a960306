"""Business logic services for the Boarding Mess application."""

from .chat import ChatService
from .cutoff import CutoffPolicy
from .ledger import LedgerService
from .materializer import AutoMealMaterializer
from .registrations import ConflictPolicy, RegistrationGateway, RegistrationStore
from .reports import ReportService
from .scheduler import CutoffScheduler

__all__ = [
    "AutoMealMaterializer",
    "ChatService",
    "ConflictPolicy",
    "CutoffPolicy",
    "CutoffScheduler",
    "LedgerService",
    "RegistrationGateway",
    "RegistrationStore",
    "ReportService",
]
