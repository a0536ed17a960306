"""Auto-meal materialization and historical backfill.

At each cutoff, every member whose auto-meal default is enabled for the period
and who has not decided yet gets a concrete registration with their default
quantity. Existing rows, including explicit zeros, are never touched, so any
number of runs (scheduler, catch-up, manual backfill) converge on one result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import and_, exists, select
from sqlalchemy.orm import Session

from boarding_mess.core.settings import settings
from boarding_mess.models import MealPeriod, MealRegistration, Member
from boarding_mess.services.clock import Clock, DatabaseClock
from boarding_mess.services.cutoff import CutoffPolicy, get_cutoff_policy
from boarding_mess.services.errors import BackfillRangeError
from boarding_mess.services.registrations import ConflictPolicy, RegistrationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializedMeal:
    """One registration created from an auto-meal default."""

    member_id: int
    member_name: str
    quantity: int


@dataclass(frozen=True)
class BackfillResult:
    """Rows created for one (date, period) during a backfill."""

    meal_date: date
    period: MealPeriod
    affected: int


class AutoMealMaterializer:
    """Turns auto-meal defaults into registrations."""

    def __init__(
        self,
        db: Session,
        clock: Clock | None = None,
        policy: CutoffPolicy | None = None,
    ) -> None:
        self.db = db
        self.clock = clock or DatabaseClock(db)
        self.policy = policy or get_cutoff_policy()
        self.store = RegistrationStore(db)

    def _eligible_members(self, meal_date: date, period: MealPeriod) -> list[Member]:
        if period is MealPeriod.MORNING:
            enabled, quantity = Member.auto_meal_morning, Member.auto_meal_morning_quantity
        else:
            enabled, quantity = Member.auto_meal_night, Member.auto_meal_night_quantity

        already_registered = exists().where(
            and_(
                MealRegistration.member_id == Member.id,
                MealRegistration.meal_date == meal_date,
                MealRegistration.period == period.value,
            )
        )
        stmt = (
            select(Member)
            .where(enabled.is_(True), quantity > 0, ~already_registered)
            .order_by(Member.id)
        )
        return list(self.db.scalars(stmt))

    def materialize(self, meal_date: date, period: MealPeriod | str) -> list[MaterializedMeal]:
        """Create default registrations for (date, period) and commit them.

        Raises:
            ValueError: ``period`` is not ``morning`` or ``night``.
        """
        period = MealPeriod(period)
        created: list[MaterializedMeal] = []
        for member in self._eligible_members(meal_date, period):
            _, quantity = member.auto_meal_for(period.value)
            registration = self.store.insert(
                member.id, meal_date, period, quantity, on_conflict=ConflictPolicy.SKIP
            )
            if registration is not None:
                created.append(MaterializedMeal(member.id, member.name, quantity))
        self.db.commit()

        logger.info(
            "Materialized %d %s auto-meals for %s",
            len(created),
            period.value,
            meal_date.isoformat(),
        )
        return created

    def backfill(self, start_date: date, end_date: date | None = None) -> list[BackfillResult]:
        """Re-run materialization over ``start_date``..``end_date`` inclusive.

        ``end_date`` defaults to the household-local today. Past dates get
        both periods; today gets only periods whose cutoff has passed; future
        dates are skipped.

        Raises:
            BackfillRangeError: the range is inverted or longer than allowed.
        """
        now = self.clock.now()
        today = self.policy.local_today(now)
        end_date = end_date or today

        if end_date < start_date:
            raise BackfillRangeError(
                f"Backfill end {end_date.isoformat()} precedes start {start_date.isoformat()}"
            )
        span_days = (end_date - start_date).days + 1
        if span_days > settings.backfill_max_days:
            raise BackfillRangeError(
                f"Backfill of {span_days} days exceeds the limit of {settings.backfill_max_days}"
            )

        results: list[BackfillResult] = []
        current = start_date
        while current <= end_date and current <= today:
            for period in MealPeriod:
                if current == today and not self.policy.is_cutoff_passed(period, current, now):
                    continue
                created = self.materialize(current, period)
                results.append(BackfillResult(current, period, len(created)))
            current += timedelta(days=1)

        logger.info(
            "Backfill %s..%s processed %d slots, created %d registrations",
            start_date.isoformat(),
            end_date.isoformat(),
            len(results),
            sum(result.affected for result in results),
        )
        return results
