"""Meal registration schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PeriodName = Literal["morning", "night"]


class MealWrite(BaseModel):
    """Quantity to store for one (member, date, period) slot."""

    quantity: int = Field(..., ge=0, le=10, description="Meals to take; 0 means none")


class MealClear(BaseModel):
    meal_date: date
    period: PeriodName


class MealRegistrationResponse(BaseModel):
    """Schema for a stored registration."""

    id: int
    member_id: int
    meal_date: date
    period: PeriodName
    quantity: int
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MealWriteResponse(BaseModel):
    """Gateway result returned after a write."""

    registration: MealRegistrationResponse
    previous_quantity: int | None
    after_cutoff: bool
    violation_message_id: int | None = None


class ParticipantResponse(BaseModel):
    member_id: int
    member_name: str
    rice_preference: str
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class MealCountResponse(BaseModel):
    """Kitchen headcount for one period."""

    meal_date: date
    period: PeriodName
    total: int
    boiled: int
    atop: int
    participants: list[ParticipantResponse]

    model_config = ConfigDict(from_attributes=True)


class MealDetailsWrite(BaseModel):
    morning_details: str | None = Field(None, max_length=2000)
    night_details: str | None = Field(None, max_length=2000)


class MealDetailsResponse(BaseModel):
    meal_date: date
    morning_details: str | None = None
    night_details: str | None = None
    updated_by: int | None = None

    model_config = ConfigDict(from_attributes=True)
