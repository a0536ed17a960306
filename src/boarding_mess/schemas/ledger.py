"""Accounting schemas: eggs, deposits and grocery expenses."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class EggConsumptionCreate(BaseModel):
    member_id: int
    egg_date: date
    quantity: int = Field(..., ge=0, le=50)


class EggConsumptionResponse(BaseModel):
    id: int
    member_id: int
    egg_date: date
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class EggInventoryCreate(BaseModel):
    """Signed change to the egg pool; negative values record eggs handed out."""

    total_eggs: int
    entry_date: date
    notes: str | None = Field(None, max_length=500)


class EggInventoryResponse(BaseModel):
    id: int
    total_eggs: int
    added_by: int
    notes: str | None
    entry_date: date
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EggPriceUpdate(BaseModel):
    price_per_egg: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class DepositCreate(BaseModel):
    depositor_id: int
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    deposit_date: date
    details: str | None = Field(None, max_length=500)


class DepositResponse(BaseModel):
    id: int
    depositor_id: int
    added_by: int
    amount: Decimal
    details: str | None
    deposit_date: date

    model_config = ConfigDict(from_attributes=True)


class GroceryExpenseCreate(BaseModel):
    shopper_id: int
    transaction_type: Literal["cash", "credit"]
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    expense_date: date
    details: str | None = Field(None, max_length=500)


class GroceryExpenseResponse(BaseModel):
    id: int
    shopper_id: int
    added_by: int
    transaction_type: Literal["cash", "credit"]
    amount: Decimal
    details: str | None
    expense_date: date

    model_config = ConfigDict(from_attributes=True)
