"""SQLAlchemy models for the Boarding Mess application."""

from .chat import ChatMessage
from .ledger import Deposit, EggConsumption, EggInventoryEntry, EggPrice, GroceryExpense
from .meal import MealDetails, MealPeriod, MealRegistration
from .member import Member

__all__ = [
    "ChatMessage",
    "Deposit", "EggConsumption", "EggInventoryEntry", "EggPrice", "GroceryExpense",
    "MealDetails", "MealPeriod", "MealRegistration",
    "Member",
]
