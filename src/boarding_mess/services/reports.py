"""Accounting periods and meal reports."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from boarding_mess.models import EggConsumption, MealPeriod, MealRegistration, Member
from boarding_mess.models.member import RICE_ATOP
from boarding_mess.services.errors import MemberNotFound

PERIOD_START_DAY = 6
PERIOD_END_DAY = 5


@dataclass(frozen=True)
class AccountingPeriod:
    """Inclusive date range that meals and money are settled over."""

    start: date
    end: date

    def __contains__(self, value: object) -> bool:
        return isinstance(value, date) and self.start <= value <= self.end

    def dates(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def default_accounting_period(reference: date) -> AccountingPeriod:
    """Return the 6th-to-5th period containing ``reference``."""
    if reference.day < PERIOD_START_DAY:
        year, month = _shift_month(reference.year, reference.month, -1)
        return AccountingPeriod(
            date(year, month, PERIOD_START_DAY),
            reference.replace(day=PERIOD_END_DAY),
        )
    year, month = _shift_month(reference.year, reference.month, 1)
    return AccountingPeriod(
        reference.replace(day=PERIOD_START_DAY),
        date(year, month, PERIOD_END_DAY),
    )


def accounting_period_for(member: Member | None, reference: date) -> AccountingPeriod:
    """Return the member's custom period if fully set, else the default one."""
    if (
        member is not None
        and member.meal_month_start_date is not None
        and member.meal_month_end_date is not None
    ):
        return AccountingPeriod(member.meal_month_start_date, member.meal_month_end_date)
    return default_accounting_period(reference)


@dataclass(frozen=True)
class Participant:
    member_id: int
    member_name: str
    rice_preference: str
    quantity: int


@dataclass
class MealCount:
    """Kitchen headcount for one (date, period)."""

    meal_date: date
    period: MealPeriod
    total: int = 0
    boiled: int = 0
    atop: int = 0
    participants: list[Participant] = field(default_factory=list)


@dataclass(frozen=True)
class MemberDay:
    meal_date: date
    morning: int
    night: int
    eggs: int


@dataclass
class MemberReport:
    """Per-day meals and eggs of one member over a period."""

    member_id: int
    member_name: str
    period: AccountingPeriod
    days: list[MemberDay] = field(default_factory=list)

    @property
    def total_morning(self) -> int:
        return sum(day.morning for day in self.days)

    @property
    def total_night(self) -> int:
        return sum(day.night for day in self.days)

    @property
    def total_meals(self) -> int:
        return self.total_morning + self.total_night

    @property
    def total_eggs(self) -> int:
        return sum(day.eggs for day in self.days)


@dataclass(frozen=True)
class SummaryRow:
    member_id: int
    member_name: str
    morning: int
    night: int
    eggs: int

    @property
    def total_meals(self) -> int:
        return self.morning + self.night


class ReportService:
    """Read-only aggregations over registrations and egg consumption."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def meal_counts(self, meal_date: date, period: MealPeriod | str) -> MealCount:
        """Return totals split by rice preference plus the list of diners."""
        period = MealPeriod(period)
        rows = self.db.execute(
            select(Member, MealRegistration.quantity)
            .join(MealRegistration, MealRegistration.member_id == Member.id)
            .where(
                MealRegistration.meal_date == meal_date,
                MealRegistration.period == period.value,
                MealRegistration.quantity > 0,
            )
            .order_by(Member.name)
        ).all()

        count = MealCount(meal_date, period)
        for member, quantity in rows:
            count.total += quantity
            if member.rice_preference == RICE_ATOP:
                count.atop += quantity
            else:
                count.boiled += quantity
            count.participants.append(
                Participant(member.id, member.name, member.rice_preference, quantity)
            )
        return count

    def _quantities(
        self, period: AccountingPeriod, member_id: int | None = None
    ) -> dict[tuple[int, date], dict[str, int]]:
        meals = select(
            MealRegistration.member_id,
            MealRegistration.meal_date,
            MealRegistration.period,
            MealRegistration.quantity,
        ).where(MealRegistration.meal_date.between(period.start, period.end))
        eggs = select(
            EggConsumption.member_id,
            EggConsumption.egg_date,
            EggConsumption.quantity,
        ).where(EggConsumption.egg_date.between(period.start, period.end))
        if member_id is not None:
            meals = meals.where(MealRegistration.member_id == member_id)
            eggs = eggs.where(EggConsumption.member_id == member_id)

        table: dict[tuple[int, date], dict[str, int]] = defaultdict(
            lambda: {"morning": 0, "night": 0, "eggs": 0}
        )
        for owner, meal_date, meal_period, quantity in self.db.execute(meals):
            table[(owner, meal_date)][meal_period] = quantity
        for owner, egg_date, quantity in self.db.execute(eggs):
            table[(owner, egg_date)]["eggs"] = quantity
        return table

    def _build_report(
        self,
        member: Member,
        period: AccountingPeriod,
        table: dict[tuple[int, date], dict[str, int]],
    ) -> MemberReport:
        report = MemberReport(member.id, member.name, period)
        empty = {"morning": 0, "night": 0, "eggs": 0}
        for day in period.dates():
            values = table.get((member.id, day), empty)
            report.days.append(MemberDay(day, values["morning"], values["night"], values["eggs"]))
        return report

    def member_report(self, member_id: int, period: AccountingPeriod) -> MemberReport:
        member = self.db.get(Member, member_id)
        if member is None:
            raise MemberNotFound(member_id)
        return self._build_report(member, period, self._quantities(period, member_id))

    def global_report(self, period: AccountingPeriod) -> list[MemberReport]:
        """Return one report per member, every date of ``period`` included."""
        table = self._quantities(period)
        members = self.db.scalars(select(Member).order_by(Member.name))
        return [self._build_report(member, period, table) for member in members]

    def monthly_summary(self, period: AccountingPeriod) -> list[SummaryRow]:
        return [
            SummaryRow(
                report.member_id,
                report.member_name,
                report.total_morning,
                report.total_night,
                report.total_eggs,
            )
            for report in self.global_report(period)
        ]

    def total_meals(self, period: AccountingPeriod) -> int:
        """Return the sum of all registered quantities inside ``period``."""
        total = self.db.scalar(
            select(func.coalesce(func.sum(MealRegistration.quantity), 0)).where(
                MealRegistration.meal_date.between(period.start, period.end)
            )
        )
        return int(total or 0)
