"""Household accounting: eggs, deposits, grocery expenses and the meal rate."""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from boarding_mess.models import (
    Deposit,
    EggConsumption,
    EggInventoryEntry,
    EggPrice,
    GroceryExpense,
    Member,
)
from boarding_mess.models.ledger import EGG_QUANTITY_MAX, TRANSACTION_CASH, TRANSACTION_CREDIT
from boarding_mess.services.errors import (
    EggsUnavailable,
    InvalidQuantity,
    MemberNotFound,
    PermissionDenied,
)
from boarding_mess.services.reports import AccountingPeriod, ReportService, accounting_period_for

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _money(value: object) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


class LedgerService:
    """Egg, deposit and grocery bookkeeping for one database session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _member(self, member_id: int) -> Member:
        member = self.db.get(Member, member_id)
        if member is None:
            raise MemberNotFound(member_id)
        return member

    @staticmethod
    def _require_admin(actor: Member, action: str) -> None:
        if not actor.is_admin:
            raise PermissionDenied(f"Only administrators may {action}")

    # Eggs

    def available_eggs(
        self,
        period: AccountingPeriod,
        as_of: date | None = None,
        *,
        exclude: tuple[int, date] | None = None,
    ) -> int:
        """Return eggs added minus eggs taken within ``period`` up to ``as_of``.

        ``exclude`` names a (member, date) consumption row that is about to be
        replaced and must not count against the pool.
        """
        upto = min(period.end, as_of) if as_of is not None else period.end
        added = self.db.scalar(
            select(func.coalesce(func.sum(EggInventoryEntry.total_eggs), 0)).where(
                EggInventoryEntry.entry_date.between(period.start, upto)
            )
        )
        consumed_stmt = select(func.coalesce(func.sum(EggConsumption.quantity), 0)).where(
            EggConsumption.egg_date.between(period.start, upto)
        )
        if exclude is not None:
            member_id, egg_date = exclude
            consumed_stmt = consumed_stmt.where(
                ~((EggConsumption.member_id == member_id) & (EggConsumption.egg_date == egg_date))
            )
        consumed = self.db.scalar(consumed_stmt)
        return max(0, int(added or 0) - int(consumed or 0))

    def record_eggs(
        self,
        actor: Member,
        member_id: int,
        egg_date: date,
        quantity: int,
    ) -> EggConsumption:
        """Set how many eggs a member took on ``egg_date``.

        Raises:
            InvalidQuantity: ``quantity`` is outside 0..50.
            PermissionDenied: a non-admin records eggs for someone else.
            EggsUnavailable: the period's inventory cannot cover the request.
        """
        if not 0 <= quantity <= EGG_QUANTITY_MAX:
            raise InvalidQuantity(quantity, 0, EGG_QUANTITY_MAX)
        member = self._member(member_id)
        if actor.id != member.id and not actor.is_admin:
            raise PermissionDenied("Members may only record their own eggs")

        period = accounting_period_for(member, egg_date)
        if quantity > 0:
            available = self.available_eggs(period, egg_date, exclude=(member.id, egg_date))
            if quantity > available:
                raise EggsUnavailable(quantity, available, period.start, period.end)

        row = self.db.scalars(
            select(EggConsumption).where(
                EggConsumption.member_id == member.id,
                EggConsumption.egg_date == egg_date,
            )
        ).first()
        if row is None:
            row = EggConsumption(member_id=member.id, egg_date=egg_date, quantity=quantity)
            self.db.add(row)
        else:
            row.quantity = quantity
        self.db.commit()
        self.db.refresh(row)
        logger.info("Recorded %d eggs for member %s on %s", quantity, member.id, egg_date)
        return row

    def list_eggs(self, period: AccountingPeriod, member_id: int | None = None) -> list[EggConsumption]:
        stmt = (
            select(EggConsumption)
            .where(EggConsumption.egg_date.between(period.start, period.end))
            .order_by(EggConsumption.egg_date, EggConsumption.member_id)
        )
        if member_id is not None:
            stmt = stmt.where(EggConsumption.member_id == member_id)
        return list(self.db.scalars(stmt))

    def add_inventory(
        self,
        actor: Member,
        total_eggs: int,
        entry_date: date,
        notes: str | None = None,
    ) -> EggInventoryEntry:
        """Append a signed change to the egg pool."""
        self._require_admin(actor, "change the egg inventory")
        if total_eggs == 0:
            raise ValueError("Inventory change cannot be zero")
        entry = EggInventoryEntry(
            total_eggs=total_eggs,
            added_by=actor.id,
            notes=notes,
            entry_date=entry_date,
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def egg_price(self) -> Decimal:
        """Return the latest price per egg, or zero when never set."""
        price = self.db.scalar(
            select(EggPrice.price_per_egg)
            .order_by(EggPrice.created_at.desc(), EggPrice.id.desc())
            .limit(1)
        )
        return _money(price)

    def set_egg_price(self, actor: Member, price_per_egg: Decimal) -> EggPrice:
        self._require_admin(actor, "set the egg price")
        if price_per_egg < 0:
            raise ValueError("Egg price cannot be negative")
        row = EggPrice(price_per_egg=_money(price_per_egg), updated_by=actor.id)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    # Money

    def add_deposit(
        self,
        actor: Member,
        depositor_id: int,
        amount: Decimal,
        deposit_date: date,
        details: str | None = None,
    ) -> Deposit:
        self._require_admin(actor, "record deposits")
        self._member(depositor_id)
        if amount <= 0:
            raise ValueError("Deposit amount must be positive")
        deposit = Deposit(
            depositor_id=depositor_id,
            added_by=actor.id,
            amount=_money(amount),
            details=details,
            deposit_date=deposit_date,
        )
        self.db.add(deposit)
        self.db.commit()
        self.db.refresh(deposit)
        logger.info("Recorded deposit of %s from member %s", deposit.amount, depositor_id)
        return deposit

    def list_deposits(self, period: AccountingPeriod) -> list[Deposit]:
        return list(
            self.db.scalars(
                select(Deposit)
                .where(Deposit.deposit_date.between(period.start, period.end))
                .order_by(Deposit.deposit_date, Deposit.id)
            )
        )

    def add_grocery(
        self,
        actor: Member,
        shopper_id: int,
        transaction_type: str,
        amount: Decimal,
        expense_date: date,
        details: str | None = None,
    ) -> GroceryExpense:
        self._require_admin(actor, "record grocery expenses")
        self._member(shopper_id)
        if transaction_type not in (TRANSACTION_CASH, TRANSACTION_CREDIT):
            raise ValueError(f"Unknown transaction type: {transaction_type}")
        if amount <= 0:
            raise ValueError("Expense amount must be positive")
        expense = GroceryExpense(
            shopper_id=shopper_id,
            added_by=actor.id,
            transaction_type=transaction_type,
            amount=_money(amount),
            details=details,
            expense_date=expense_date,
        )
        self.db.add(expense)
        self.db.commit()
        self.db.refresh(expense)
        logger.info("Recorded %s grocery expense of %s", transaction_type, expense.amount)
        return expense

    def list_grocery(self, period: AccountingPeriod) -> list[GroceryExpense]:
        return list(
            self.db.scalars(
                select(GroceryExpense)
                .where(GroceryExpense.expense_date.between(period.start, period.end))
                .order_by(GroceryExpense.expense_date, GroceryExpense.id)
            )
        )

    def _sum_grocery(self, period: AccountingPeriod, transaction_type: str | None = None) -> Decimal:
        stmt = select(func.coalesce(func.sum(GroceryExpense.amount), 0)).where(
            GroceryExpense.expense_date.between(period.start, period.end)
        )
        if transaction_type is not None:
            stmt = stmt.where(GroceryExpense.transaction_type == transaction_type)
        return _money(self.db.scalar(stmt))

    def balance(self, period: AccountingPeriod) -> Decimal:
        """Return deposits minus cash grocery spending within ``period``."""
        deposits = _money(
            self.db.scalar(
                select(func.coalesce(func.sum(Deposit.amount), 0)).where(
                    Deposit.deposit_date.between(period.start, period.end)
                )
            )
        )
        return deposits - self._sum_grocery(period, TRANSACTION_CASH)

    def meal_rate(self, period: AccountingPeriod) -> Decimal:
        """Return the cost of one meal after egg spending is taken out.

        Zero when no meals were registered in the period.
        """
        total_meals = ReportService(self.db).total_meals(period)
        if total_meals == 0:
            return ZERO.quantize(CENT)
        total_eggs = self.db.scalar(
            select(func.coalesce(func.sum(EggConsumption.quantity), 0)).where(
                EggConsumption.egg_date.between(period.start, period.end)
            )
        )
        egg_cost = Decimal(int(total_eggs or 0)) * self.egg_price()
        rate = (self._sum_grocery(period) - egg_cost) / Decimal(total_meals)
        return max(ZERO, rate).quantize(CENT, rounding=ROUND_HALF_UP)
