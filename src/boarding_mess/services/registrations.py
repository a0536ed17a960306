"""Registration storage and the server-side write gateway.

All registration writes funnel through ``RegistrationGateway`` so the cutoff
check, the write itself and any violation notice share one transaction and
one trusted clock reading.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from boarding_mess.models import ChatMessage, MealPeriod, MealRegistration, Member
from boarding_mess.models.meal import MEAL_QUANTITY_MAX, MEAL_QUANTITY_MIN
from boarding_mess.services.clock import Clock, DatabaseClock
from boarding_mess.services.cutoff import CutoffPolicy, get_cutoff_policy
from boarding_mess.services.errors import (
    CutoffExceeded,
    DuplicateRegistration,
    InvalidQuantity,
    MemberNotFound,
    PermissionDenied,
)
from boarding_mess.services.notifier import ACTION_ADDED, ACTION_REMOVED, ViolationNotifier

__all__ = [
    "ConflictPolicy",
    "RegistrationGateway",
    "RegistrationStore",
    "WriteOutcome",
]

logger = logging.getLogger(__name__)


class ConflictPolicy(str, Enum):
    """What an insert does when the (member, date, period) slot is taken."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    RAISE = "raise"


class RegistrationStore:
    """Thin wrapper around database access for meal registrations."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, member_id: int, meal_date: date, period: MealPeriod | str) -> MealRegistration | None:
        """Return the registration for one slot, if any."""
        return self.db.scalars(
            select(MealRegistration).where(
                MealRegistration.member_id == member_id,
                MealRegistration.meal_date == meal_date,
                MealRegistration.period == MealPeriod(period).value,
            )
        ).first()

    def list_for(self, meal_date: date, period: MealPeriod | str) -> list[MealRegistration]:
        """Return every registration of a (date, period) ordered by member."""
        return list(
            self.db.scalars(
                select(MealRegistration)
                .where(
                    MealRegistration.meal_date == meal_date,
                    MealRegistration.period == MealPeriod(period).value,
                )
                .order_by(MealRegistration.member_id)
            )
        )

    def insert(
        self,
        member_id: int,
        meal_date: date,
        period: MealPeriod | str,
        quantity: int,
        on_conflict: ConflictPolicy = ConflictPolicy.SKIP,
    ) -> MealRegistration | None:
        """Insert a registration, resolving a slot collision per ``on_conflict``.

        Returns the row that now holds the slot, or None when the insert was
        skipped because another writer got there first.
        """
        registration = MealRegistration(
            member_id=member_id,
            meal_date=meal_date,
            period=MealPeriod(period).value,
            quantity=quantity,
        )
        try:
            with self.db.begin_nested():
                self.db.add(registration)
        except IntegrityError as err:
            if on_conflict is ConflictPolicy.SKIP:
                logger.debug(
                    "Skipped existing registration for member %s on %s %s",
                    member_id,
                    meal_date,
                    period,
                )
                return None
            if on_conflict is ConflictPolicy.OVERWRITE:
                existing = self.get(member_id, meal_date, period)
                if existing is None:
                    raise
                existing.quantity = quantity
                self.db.flush()
                return existing
            raise DuplicateRegistration(
                f"Registration for member {member_id} on {meal_date} {period} already exists"
            ) from err
        return registration

    def upsert(
        self,
        member_id: int,
        meal_date: date,
        period: MealPeriod | str,
        quantity: int,
    ) -> MealRegistration:
        """Set the quantity of a slot, creating the row when missing."""
        existing = self.get(member_id, meal_date, period)
        if existing is not None:
            existing.quantity = quantity
            self.db.flush()
            return existing
        registration = self.insert(
            member_id, meal_date, period, quantity, on_conflict=ConflictPolicy.OVERWRITE
        )
        if registration is None:
            raise DuplicateRegistration(
                f"Registration for member {member_id} on {meal_date} {period} could not be written"
            )
        return registration


@dataclass(frozen=True)
class WriteOutcome:
    """Result of a gateway write."""

    registration: MealRegistration
    previous_quantity: int | None
    after_cutoff: bool
    violation: ChatMessage | None = None


class RegistrationGateway:
    """Single entry point for registration writes."""

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
        self.notifier = ViolationNotifier(db, clock=self.clock)

    def set_quantity(
        self,
        actor: Member,
        member_id: int,
        meal_date: date,
        period: MealPeriod | str,
        quantity: int,
    ) -> WriteOutcome:
        """Write ``quantity`` into a member's slot on behalf of ``actor``.

        Raises:
            InvalidQuantity: ``quantity`` is outside 0..10.
            MemberNotFound: ``member_id`` does not exist.
            PermissionDenied: a non-admin writes someone else's slot.
            CutoffExceeded: a non-admin writes after the slot's cutoff.
        """
        period = MealPeriod(period)
        if not MEAL_QUANTITY_MIN <= quantity <= MEAL_QUANTITY_MAX:
            raise InvalidQuantity(quantity, MEAL_QUANTITY_MIN, MEAL_QUANTITY_MAX)

        member = self.db.get(Member, member_id)
        if member is None:
            raise MemberNotFound(member_id)
        if actor.id != member.id and not actor.is_admin:
            raise PermissionDenied("Members may only change their own meals")

        after_cutoff = self.policy.is_cutoff_passed(period, meal_date, self.clock.now())
        label = self.policy.cutoff_label(period)
        if after_cutoff and not actor.is_admin:
            raise CutoffExceeded(period.value, meal_date, label)

        existing = self.store.get(member.id, meal_date, period)
        previous = existing.quantity if existing is not None else None
        if existing is not None and previous == quantity:
            return WriteOutcome(existing, previous, after_cutoff)

        registration = self.store.upsert(member.id, meal_date, period, quantity)

        violation = None
        if after_cutoff:
            # An unset slot written as 0 still moves it to "no meal".
            action = ACTION_ADDED if quantity > (previous or 0) else ACTION_REMOVED
            violation = self.notifier.notify(member, action, period.value, label)

        self.db.commit()
        logger.info(
            "Member %s set %s meal of member %s on %s to %d (was %s)",
            actor.id,
            period.value,
            member.id,
            meal_date,
            quantity,
            previous,
        )
        return WriteOutcome(registration, previous, after_cutoff, violation)

    def clear_period(self, actor: Member, meal_date: date, period: MealPeriod | str) -> int:
        """Set every registration of (date, period) to zero; return rows changed."""
        period = MealPeriod(period)
        if not actor.is_admin:
            raise PermissionDenied("Only administrators may clear meals")

        cleared = 0
        for registration in self.store.list_for(meal_date, period):
            if registration.quantity != 0:
                registration.quantity = 0
                cleared += 1
        self.db.flush()

        self.notifier.announce(
            actor,
            f"{actor.name} has cleared everyone's meals for {period.value}.",
        )
        self.db.commit()
        logger.info("Member %s cleared %d %s meals on %s", actor.id, cleared, period.value, meal_date)
        return cleared
