"""Meal cutoff policy.

Registrations for a meal period lock at a fixed local wall-clock hour in the
household timezone. Everything here is pure: callers pass the current instant
from a trusted ``Clock``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from boarding_mess.core.settings import settings
from boarding_mess.models.meal import MealPeriod

NOON_HOUR = 12
SECONDS_PER_HOUR = 3_600
SECONDS_PER_MINUTE = 60


@dataclass(frozen=True)
class CutoffEvent:
    """A concrete cutoff: one period of one household-local date."""

    period: MealPeriod
    meal_date: date
    instant: datetime


@dataclass(frozen=True)
class CutoffPolicy:
    """Maps (period, date) to cutoff instants in the household timezone."""

    tz: tzinfo
    morning_hour: int = 7
    night_hour: int = 18

    @classmethod
    def from_settings(cls) -> CutoffPolicy:
        """Build the policy from application settings."""
        return cls(
            tz=ZoneInfo(settings.household_timezone),
            morning_hour=settings.morning_cutoff_hour,
            night_hour=settings.night_cutoff_hour,
        )

    def cutoff_hour(self, period: MealPeriod | str) -> int:
        """Return the local hour at which ``period`` locks."""
        if MealPeriod(period) is MealPeriod.MORNING:
            return self.morning_hour
        return self.night_hour

    def cutoff_instant(self, period: MealPeriod | str, meal_date: date) -> datetime:
        """Return the aware instant at which ``period`` of ``meal_date`` locks."""
        return datetime.combine(meal_date, time(self.cutoff_hour(period)), tzinfo=self.tz)

    def cutoff_label(self, period: MealPeriod | str) -> str:
        """Return the cutoff as a 12-hour clock label such as ``7:00 AM``."""
        hour = self.cutoff_hour(period)
        suffix = "AM" if hour < NOON_HOUR else "PM"
        return f"{hour % NOON_HOUR or NOON_HOUR}:00 {suffix}"

    def local_now(self, now: datetime) -> datetime:
        """Return ``now`` expressed in the household timezone."""
        return now.astimezone(self.tz)

    def local_today(self, now: datetime) -> date:
        """Return the household-local calendar date of ``now``."""
        return self.local_now(now).date()

    def is_cutoff_passed(self, period: MealPeriod | str, meal_date: date, now: datetime) -> bool:
        """Return True once ``now`` has reached the cutoff of ``period`` on ``meal_date``.

        Dates after the local today are always open, so future registrations
        stay editable until their own cutoff.
        """
        if meal_date > self.local_today(now):
            return False
        return now >= self.cutoff_instant(period, meal_date)

    def time_until_cutoff(self, period: MealPeriod | str, now: datetime) -> timedelta:
        """Return the time left before today's cutoff for ``period``, floored at zero."""
        remaining = self.cutoff_instant(period, self.local_today(now)) - now
        return max(remaining, timedelta(0))

    def format_time_until_cutoff(self, period: MealPeriod | str, now: datetime) -> str:
        """Return a short countdown such as ``2h 5m remaining``."""
        remaining = self.time_until_cutoff(period, now)
        if remaining <= timedelta(0):
            return "Cutoff passed"
        total_seconds = int(remaining.total_seconds())
        hours, rest = divmod(total_seconds, SECONDS_PER_HOUR)
        minutes = rest // SECONDS_PER_MINUTE
        if hours > 0:
            return f"{hours}h {minutes}m remaining"
        return f"{minutes}m remaining"

    def active_period(self, now: datetime) -> MealPeriod:
        """Return the period a member most likely cares about right now."""
        if self.local_now(now).hour < NOON_HOUR:
            return MealPeriod.MORNING
        return MealPeriod.NIGHT

    def cutoffs_on(self, meal_date: date) -> list[CutoffEvent]:
        """Return both cutoffs of ``meal_date`` in chronological order."""
        events = [
            CutoffEvent(period, meal_date, self.cutoff_instant(period, meal_date))
            for period in MealPeriod
        ]
        return sorted(events, key=lambda event: event.instant)

    def next_cutoff(self, now: datetime) -> CutoffEvent:
        """Return the first cutoff strictly after ``now``."""
        today = self.local_today(now)
        for meal_date in (today, today + timedelta(days=1)):
            for event in self.cutoffs_on(meal_date):
                if event.instant > now:
                    return event
        # Unreachable for hours in [0, 23]; kept for type checkers.
        return self.cutoffs_on(today + timedelta(days=2))[0]

    def utc_trigger_time(self, period: MealPeriod | str, meal_date: date) -> datetime:
        """Return the UTC instant a scheduler must fire for this cutoff."""
        return self.cutoff_instant(period, meal_date).astimezone(UTC)

    def utc_cron(self, period: MealPeriod | str, meal_date: date) -> str:
        """Return a daily cron expression (UTC) matching the cutoff on ``meal_date``.

        Derived from the timezone rules in force on that date rather than a
        fixed offset, so DST zones get the right expression for each season.
        """
        trigger = self.utc_trigger_time(period, meal_date)
        return f"{trigger.minute} {trigger.hour} * * *"


def get_cutoff_policy() -> CutoffPolicy:
    """Return the cutoff policy configured for this deployment."""
    return CutoffPolicy.from_settings()
