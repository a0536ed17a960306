"""Schemas for system and scheduling endpoints."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


class ServerTimeResponse(BaseModel):
    """Trusted server time used by clients to compute their clock offset."""

    server_time: datetime
    timezone: str
    local_time: datetime


class CutoffStatus(BaseModel):
    period: Literal["morning", "night"]
    cutoff_at: datetime
    label: str
    passed: bool
    remaining: str


class MaterializeRequest(BaseModel):
    meal_date: date
    period: Literal["morning", "night"]


class BackfillRequest(BaseModel):
    start_date: date
    end_date: date | None = Field(None, description="Defaults to the household-local today")
