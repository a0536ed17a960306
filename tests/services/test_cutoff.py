"""Tests for the cutoff policy."""

from datetime import date, timedelta

import pytest

from boarding_mess.models import MealPeriod
from boarding_mess.services.cutoff import CutoffPolicy
from tests.conftest import DHAKA, dhaka

OCT_24 = date(2025, 10, 24)


def test_morning_cutoff_boundary(policy: CutoffPolicy) -> None:
    """06:59 is open, 07:00 is closed."""
    assert not policy.is_cutoff_passed("morning", OCT_24, dhaka(2025, 10, 24, 6, 59))
    assert policy.is_cutoff_passed("morning", OCT_24, dhaka(2025, 10, 24, 7, 0))


def test_night_cutoff_boundary(policy: CutoffPolicy) -> None:
    assert not policy.is_cutoff_passed(MealPeriod.NIGHT, OCT_24, dhaka(2025, 10, 24, 17, 59))
    assert policy.is_cutoff_passed(MealPeriod.NIGHT, OCT_24, dhaka(2025, 10, 24, 18, 0))


def test_cutoff_is_monotonic(policy: CutoffPolicy) -> None:
    """Once passed, a cutoff stays passed for every later instant."""
    now = dhaka(2025, 10, 24, 7, 0)
    for minutes in (0, 1, 60, 60 * 24, 60 * 24 * 40):
        assert policy.is_cutoff_passed("morning", OCT_24, now + timedelta(minutes=minutes))


def test_future_dates_are_open(policy: CutoffPolicy) -> None:
    """Tomorrow's meals stay editable even late at night."""
    late = dhaka(2025, 10, 24, 23, 30)
    tomorrow = OCT_24 + timedelta(days=1)
    assert not policy.is_cutoff_passed("morning", tomorrow, late)
    assert not policy.is_cutoff_passed("night", tomorrow, late)


def test_past_dates_are_closed(policy: CutoffPolicy) -> None:
    assert policy.is_cutoff_passed("night", OCT_24 - timedelta(days=1), dhaka(2025, 10, 24, 0, 5))


def test_local_date_is_used_not_utc(policy: CutoffPolicy) -> None:
    """At 01:00 Dhaka it is still the previous day in UTC."""
    now = dhaka(2025, 10, 24, 1, 0)
    assert now.date() == date(2025, 10, 23)
    assert policy.local_today(now) == OCT_24
    assert not policy.is_cutoff_passed("morning", OCT_24, now)


def test_cutoff_labels(policy: CutoffPolicy) -> None:
    assert policy.cutoff_label("morning") == "7:00 AM"
    assert policy.cutoff_label("night") == "6:00 PM"
    assert CutoffPolicy(tz=DHAKA, morning_hour=0, night_hour=12).cutoff_label("morning") == "12:00 AM"
    assert CutoffPolicy(tz=DHAKA, morning_hour=0, night_hour=12).cutoff_label("night") == "12:00 PM"


def test_time_until_cutoff_floors_at_zero(policy: CutoffPolicy) -> None:
    assert policy.time_until_cutoff("morning", dhaka(2025, 10, 24, 5, 30)) == timedelta(hours=1, minutes=30)
    assert policy.time_until_cutoff("morning", dhaka(2025, 10, 24, 9, 0)) == timedelta(0)


@pytest.mark.parametrize(
    ("hour", "minute", "expected"),
    [
        (4, 55, "2h 5m remaining"),
        (6, 15, "45m remaining"),
        (7, 0, "Cutoff passed"),
    ],
)
def test_format_time_until_cutoff(policy: CutoffPolicy, hour: int, minute: int, expected: str) -> None:
    assert policy.format_time_until_cutoff("morning", dhaka(2025, 10, 24, hour, minute)) == expected


def test_active_period_switches_at_noon(policy: CutoffPolicy) -> None:
    assert policy.active_period(dhaka(2025, 10, 24, 11, 59)) is MealPeriod.MORNING
    assert policy.active_period(dhaka(2025, 10, 24, 12, 0)) is MealPeriod.NIGHT


def test_next_cutoff_walks_through_the_day(policy: CutoffPolicy) -> None:
    first = policy.next_cutoff(dhaka(2025, 10, 24, 6, 0))
    assert (first.period, first.meal_date) == (MealPeriod.MORNING, OCT_24)

    at_cutoff = policy.next_cutoff(dhaka(2025, 10, 24, 7, 0))
    assert (at_cutoff.period, at_cutoff.meal_date) == (MealPeriod.NIGHT, OCT_24)

    evening = policy.next_cutoff(dhaka(2025, 10, 24, 20, 0))
    assert (evening.period, evening.meal_date) == (MealPeriod.MORNING, OCT_24 + timedelta(days=1))


def test_utc_triggers_follow_timezone(policy: CutoffPolicy) -> None:
    """Dhaka is UTC+6, so cutoffs fire at 01:00 and 12:00 UTC."""
    assert policy.utc_cron("morning", OCT_24) == "0 1 * * *"
    assert policy.utc_cron("night", OCT_24) == "0 12 * * *"
    assert policy.utc_trigger_time("morning", OCT_24) == dhaka(2025, 10, 24, 7, 0)


def test_invalid_period_rejected(policy: CutoffPolicy) -> None:
    with pytest.raises(ValueError):
        policy.cutoff_hour("lunch")
