"""SQLAlchemy models for household members and their auto-meal preferences."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from boarding_mess.db.session import Base
from boarding_mess.db.time import utcnow

RICE_BOILED = "boiled"
RICE_ATOP = "atop"
ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"


class Member(Base):
    """A household member.

    Members are never hard-deleted; historical registrations reference them.
    The auto-meal columns double as the auto-meal preference store.
    """

    __tablename__ = "member"
    __table_args__ = (
        CheckConstraint("rice_preference IN ('boiled', 'atop')", name="ck_member_rice_preference"),
        CheckConstraint("role IN ('member', 'admin')", name="ck_member_role"),
        CheckConstraint(
            "auto_meal_morning_quantity >= 0 AND auto_meal_morning_quantity <= 10",
            name="ck_member_auto_meal_morning_quantity",
        ),
        CheckConstraint(
            "auto_meal_night_quantity >= 0 AND auto_meal_night_quantity <= 10",
            name="ck_member_auto_meal_night_quantity",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    rice_preference: Mapped[str] = mapped_column(String(8), nullable=False, default=RICE_BOILED)
    role: Mapped[str] = mapped_column(String(8), nullable=False, default=ROLE_MEMBER)

    auto_meal_morning: Mapped[bool] = mapped_column(nullable=False, default=True)
    auto_meal_night: Mapped[bool] = mapped_column(nullable=False, default=True)
    auto_meal_morning_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    auto_meal_night_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # NULL means the default 6th-to-5th accounting period applies.
    meal_month_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    meal_month_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    @property
    def is_admin(self) -> bool:
        """Return True if the member may override cutoffs."""
        return self.role == ROLE_ADMIN

    def auto_meal_for(self, period: str) -> tuple[bool, int]:
        """Return the ``(enabled, quantity)`` auto-meal preference for a period."""
        if period == "morning":
            return self.auto_meal_morning, self.auto_meal_morning_quantity
        return self.auto_meal_night, self.auto_meal_night_quantity
