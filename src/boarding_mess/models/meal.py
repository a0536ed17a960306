"""Models describing meal registrations and per-day menus."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from boarding_mess.db.session import Base
from boarding_mess.db.time import utcnow

from .member import Member


class MealPeriod(str, Enum):
    """The two meal periods of a household day."""

    MORNING = "morning"
    NIGHT = "night"


MEAL_QUANTITY_MIN = 0
MEAL_QUANTITY_MAX = 10


class MealRegistration(Base):
    """Quantity of meals a member takes for one period of one day.

    Quantity 0 means "no meal"; a missing row means "not decided yet".
    """

    __tablename__ = "meal_registration"
    __table_args__ = (
        UniqueConstraint("member_id", "meal_date", "period", name="uq_meal_registration_slot"),
        CheckConstraint("period IN ('morning', 'night')", name="ck_meal_registration_period"),
        CheckConstraint(
            "quantity >= 0 AND quantity <= 10",
            name="ck_meal_registration_quantity",
        ),
        Index("ix_meal_registration_date_period", "meal_date", "period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    meal_date: Mapped[date] = mapped_column(Date, nullable=False)
    period: Mapped[str] = mapped_column(String(8), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    member: Mapped[Member] = relationship("Member")


class MealDetails(Base):
    """Free-text menu for the morning and night meals of a day."""

    __tablename__ = "meal_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    meal_date: Mapped[date] = mapped_column(Date, unique=True, nullable=False)
    morning_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    night_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("member.id"), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
