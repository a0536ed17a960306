"""Member-related Pydantic schemas."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MemberResponse(BaseModel):
    """Schema for member information returned by the API."""

    id: int
    name: str
    email: str
    phone: str | None
    rice_preference: Literal["boiled", "atop"]
    role: Literal["member", "admin"]
    auto_meal_morning: bool
    auto_meal_night: bool
    auto_meal_morning_quantity: int
    auto_meal_night_quantity: int
    meal_month_start_date: date | None
    meal_month_end_date: date | None

    model_config = ConfigDict(from_attributes=True)


class MemberUpdate(BaseModel):
    """Profile fields a member may change on their own record."""

    name: str | None = Field(None, min_length=1, max_length=120)
    phone: str | None = Field(None, max_length=32)
    rice_preference: Literal["boiled", "atop"] | None = None


class AutoMealUpdate(BaseModel):
    """Auto-meal defaults; omitted fields keep their current value."""

    auto_meal_morning: bool | None = None
    auto_meal_night: bool | None = None
    auto_meal_morning_quantity: int | None = Field(None, ge=0, le=10)
    auto_meal_night_quantity: int | None = Field(None, ge=0, le=10)


class AccountingPeriodUpdate(BaseModel):
    """Custom accounting period; send both dates as null to restore the default."""

    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "AccountingPeriodUpdate":
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be set together")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self
