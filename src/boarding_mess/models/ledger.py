"""Append-only accounting logs: eggs, deposits and grocery expenses."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from boarding_mess.db.session import Base
from boarding_mess.db.time import utcnow

EGG_QUANTITY_MAX = 50
TRANSACTION_CASH = "cash"
TRANSACTION_CREDIT = "credit"


class EggConsumption(Base):
    """Eggs a member took on a given day."""

    __tablename__ = "egg_consumption"
    __table_args__ = (
        UniqueConstraint("member_id", "egg_date", name="uq_egg_consumption_member_date"),
        CheckConstraint("quantity >= 0 AND quantity <= 50", name="ck_egg_consumption_quantity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    egg_date: Mapped[date] = mapped_column(Date, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class EggInventoryEntry(Base):
    """Signed change to the kitchen egg pool; negative rows record eggs handed out."""

    __tablename__ = "egg_inventory"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    total_eggs: Mapped[int] = mapped_column(Integer, nullable=False)
    added_by: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class EggPrice(Base):
    """Price-per-egg history; the latest row is the current price."""

    __tablename__ = "egg_price"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    price_per_egg: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    updated_by: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Deposit(Base):
    """Money a member paid into the household pool."""

    __tablename__ = "deposit"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_deposit_amount"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    depositor_id: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    added_by: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    deposit_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class GroceryExpense(Base):
    """Money spent on groceries, paid in cash from the pool or on credit."""

    __tablename__ = "grocery_expense"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_grocery_expense_amount"),
        CheckConstraint(
            "transaction_type IN ('cash', 'credit')",
            name="ck_grocery_expense_transaction_type",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shopper_id: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    added_by: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(8), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
