"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chat import ChatMessageCreate, ChatMessageResponse
from .ledger import DepositCreate, EggConsumptionCreate, GroceryExpenseCreate
from .meal import MealCountResponse, MealRegistrationResponse, MealWrite
from .member import AutoMealUpdate, MemberResponse, MemberUpdate
from .system import BackfillRequest, ServerTimeResponse

__all__ = [
    "ChatMessageCreate", "ChatMessageResponse",
    "DepositCreate", "EggConsumptionCreate", "GroceryExpenseCreate",
    "MealCountResponse", "MealRegistrationResponse", "MealWrite",
    "AutoMealUpdate", "MemberResponse", "MemberUpdate",
    "BackfillRequest", "ServerTimeResponse",
]
