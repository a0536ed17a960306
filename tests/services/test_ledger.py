"""Tests for the household ledger."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from boarding_mess.models import Member
from boarding_mess.services.errors import (
    EggsUnavailable,
    InvalidQuantity,
    PermissionDenied,
)
from boarding_mess.services.ledger import LedgerService
from boarding_mess.services.registrations import RegistrationStore
from boarding_mess.services.reports import AccountingPeriod

OCTOBER = AccountingPeriod(date(2025, 10, 6), date(2025, 11, 5))


@pytest.fixture()
def ledger(db_session: Session) -> LedgerService:
    return LedgerService(db_session)


def test_available_eggs_counts_inventory_up_to_date(
    ledger: LedgerService, admin: Member, member_a: Member
) -> None:
    ledger.add_inventory(admin, 30, date(2025, 10, 6))
    ledger.add_inventory(admin, 10, date(2025, 10, 20))
    ledger.record_eggs(member_a, member_a.id, date(2025, 10, 10), 4)

    assert ledger.available_eggs(OCTOBER, date(2025, 10, 10)) == 26
    assert ledger.available_eggs(OCTOBER) == 36


def test_negative_inventory_entries_reduce_the_pool(ledger: LedgerService, admin: Member) -> None:
    ledger.add_inventory(admin, 12, date(2025, 10, 7))
    ledger.add_inventory(admin, -20, date(2025, 10, 8), notes="broken tray")
    assert ledger.available_eggs(OCTOBER) == 0


def test_record_eggs_rejects_overdraw(
    ledger: LedgerService, admin: Member, member_a: Member, member_b: Member
) -> None:
    ledger.add_inventory(admin, 5, date(2025, 10, 6))
    ledger.record_eggs(member_a, member_a.id, date(2025, 10, 7), 3)

    with pytest.raises(EggsUnavailable) as excinfo:
        ledger.record_eggs(member_b, member_b.id, date(2025, 10, 7), 3)

    assert excinfo.value.available == 2


def test_record_eggs_replaces_own_row(
    db_session: Session, ledger: LedgerService, admin: Member, member_a: Member
) -> None:
    """Changing today's count does not count the old value against the pool."""
    ledger.add_inventory(admin, 4, date(2025, 10, 6))
    ledger.record_eggs(member_a, member_a.id, date(2025, 10, 7), 3)
    row = ledger.record_eggs(member_a, member_a.id, date(2025, 10, 7), 4)

    assert row.quantity == 4
    assert len(ledger.list_eggs(OCTOBER, member_a.id)) == 1


def test_record_eggs_validation(ledger: LedgerService, member_a: Member, member_b: Member) -> None:
    with pytest.raises(InvalidQuantity):
        ledger.record_eggs(member_a, member_a.id, date(2025, 10, 7), 51)
    with pytest.raises(PermissionDenied):
        ledger.record_eggs(member_a, member_b.id, date(2025, 10, 7), 0)


def test_egg_price_latest_wins(ledger: LedgerService, admin: Member) -> None:
    assert ledger.egg_price() == Decimal("0.00")
    ledger.set_egg_price(admin, Decimal("12"))
    ledger.set_egg_price(admin, Decimal("13.50"))
    assert ledger.egg_price() == Decimal("13.50")


def test_money_requires_admin(ledger: LedgerService, member_a: Member) -> None:
    with pytest.raises(PermissionDenied):
        ledger.add_deposit(member_a, member_a.id, Decimal("100"), date(2025, 10, 7))
    with pytest.raises(PermissionDenied):
        ledger.add_grocery(member_a, member_a.id, "cash", Decimal("100"), date(2025, 10, 7))


def test_balance_ignores_credit_purchases(
    ledger: LedgerService, admin: Member, member_a: Member
) -> None:
    ledger.add_deposit(admin, member_a.id, Decimal("3000"), date(2025, 10, 6))
    ledger.add_grocery(admin, member_a.id, "cash", Decimal("1200.50"), date(2025, 10, 8))
    ledger.add_grocery(admin, member_a.id, "credit", Decimal("800"), date(2025, 10, 9))
    ledger.add_deposit(admin, member_a.id, Decimal("500"), date(2025, 11, 6))

    assert ledger.balance(OCTOBER) == Decimal("1799.50")
    assert len(ledger.list_grocery(OCTOBER)) == 2
    assert len(ledger.list_deposits(OCTOBER)) == 1


def test_meal_rate_excludes_egg_cost(
    db_session: Session, ledger: LedgerService, admin: Member, member_a: Member
) -> None:
    store = RegistrationStore(db_session)
    store.insert(member_a.id, date(2025, 10, 7), "morning", 2)
    store.insert(member_a.id, date(2025, 10, 7), "night", 2)
    db_session.commit()
    ledger.add_inventory(admin, 10, date(2025, 10, 6))
    ledger.record_eggs(member_a, member_a.id, date(2025, 10, 7), 4)
    ledger.set_egg_price(admin, Decimal("10"))
    ledger.add_grocery(admin, member_a.id, "credit", Decimal("240"), date(2025, 10, 7))

    # (240 - 4 * 10) / 4 meals
    assert ledger.meal_rate(OCTOBER) == Decimal("50.00")


def test_meal_rate_zero_without_meals(ledger: LedgerService, admin: Member, member_a: Member) -> None:
    ledger.add_grocery(admin, member_a.id, "cash", Decimal("100"), date(2025, 10, 7))
    assert ledger.meal_rate(OCTOBER) == Decimal("0.00")


def test_invalid_grocery_type(ledger: LedgerService, admin: Member, member_a: Member) -> None:
    with pytest.raises(ValueError):
        ledger.add_grocery(admin, member_a.id, "barter", Decimal("1"), date(2025, 10, 7))
