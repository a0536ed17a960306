"""Accounting endpoints: eggs, deposits, grocery, balance and meal rate."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, status

from boarding_mess.api.v1.dependencies import (
    AdminDep,
    ClockDep,
    CurrentMemberDep,
    PolicyDep,
    SessionDep,
    http_error,
    resolve_period,
)
from boarding_mess.models import Deposit, EggConsumption, EggInventoryEntry, GroceryExpense
from boarding_mess.schemas.ledger import (
    DepositCreate,
    DepositResponse,
    EggConsumptionCreate,
    EggConsumptionResponse,
    EggInventoryCreate,
    EggInventoryResponse,
    EggPriceUpdate,
    GroceryExpenseCreate,
    GroceryExpenseResponse,
)
from boarding_mess.services.errors import MessError
from boarding_mess.services.ledger import LedgerService

router = APIRouter(prefix="/ledger", tags=["ledger"])

DateQuery = Annotated[date | None, Query()]


def _bad_request(err: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err))


@router.get("/eggs", response_model=list[EggConsumptionResponse])
async def list_eggs(
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    member_id: int | None = None,
    start: DateQuery = None,
    end: DateQuery = None,
) -> list[EggConsumption]:
    period = resolve_period(start, end, current_member, policy.local_today(clock.now()))
    return LedgerService(db).list_eggs(period, member_id)


@router.post("/eggs", response_model=EggConsumptionResponse)
async def record_eggs(
    payload: EggConsumptionCreate,
    current_member: CurrentMemberDep,
    db: SessionDep,
) -> EggConsumption:
    """Set a member's egg count for a day, within the available inventory."""
    try:
        return LedgerService(db).record_eggs(
            current_member, payload.member_id, payload.egg_date, payload.quantity
        )
    except MessError as err:
        raise http_error(err) from err


@router.post(
    "/eggs/inventory",
    response_model=EggInventoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_inventory(
    payload: EggInventoryCreate,
    admin: AdminDep,
    db: SessionDep,
) -> EggInventoryEntry:
    try:
        return LedgerService(db).add_inventory(
            admin, payload.total_eggs, payload.entry_date, payload.notes
        )
    except MessError as err:
        raise http_error(err) from err
    except ValueError as err:
        raise _bad_request(err) from err


@router.get("/eggs/available")
async def available_eggs(
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    as_of: DateQuery = None,
) -> dict[str, Any]:
    """Eggs still in the pool for the current member's period."""
    reference = as_of or policy.local_today(clock.now())
    period = resolve_period(None, None, current_member, reference)
    return {
        "available": LedgerService(db).available_eggs(period, reference),
        "as_of": reference.isoformat(),
        "period": {"start": period.start.isoformat(), "end": period.end.isoformat()},
    }


@router.get("/eggs/price")
async def get_egg_price(_member: CurrentMemberDep, db: SessionDep) -> dict[str, str]:
    return {"price_per_egg": str(LedgerService(db).egg_price())}


@router.post("/eggs/price", status_code=status.HTTP_201_CREATED)
async def set_egg_price(
    payload: EggPriceUpdate,
    admin: AdminDep,
    db: SessionDep,
) -> dict[str, str]:
    try:
        row = LedgerService(db).set_egg_price(admin, payload.price_per_egg)
    except MessError as err:
        raise http_error(err) from err
    return {"price_per_egg": str(row.price_per_egg)}


@router.get("/deposits", response_model=list[DepositResponse])
async def list_deposits(
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    start: DateQuery = None,
    end: DateQuery = None,
) -> list[Deposit]:
    period = resolve_period(start, end, current_member, policy.local_today(clock.now()))
    return LedgerService(db).list_deposits(period)


@router.post("/deposits", response_model=DepositResponse, status_code=status.HTTP_201_CREATED)
async def add_deposit(payload: DepositCreate, admin: AdminDep, db: SessionDep) -> Deposit:
    try:
        return LedgerService(db).add_deposit(
            admin, payload.depositor_id, payload.amount, payload.deposit_date, payload.details
        )
    except MessError as err:
        raise http_error(err) from err
    except ValueError as err:
        raise _bad_request(err) from err


@router.get("/grocery", response_model=list[GroceryExpenseResponse])
async def list_grocery(
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    start: DateQuery = None,
    end: DateQuery = None,
) -> list[GroceryExpense]:
    period = resolve_period(start, end, current_member, policy.local_today(clock.now()))
    return LedgerService(db).list_grocery(period)


@router.post("/grocery", response_model=GroceryExpenseResponse, status_code=status.HTTP_201_CREATED)
async def add_grocery(
    payload: GroceryExpenseCreate,
    admin: AdminDep,
    db: SessionDep,
) -> GroceryExpense:
    try:
        return LedgerService(db).add_grocery(
            admin,
            payload.shopper_id,
            payload.transaction_type,
            payload.amount,
            payload.expense_date,
            payload.details,
        )
    except MessError as err:
        raise http_error(err) from err
    except ValueError as err:
        raise _bad_request(err) from err


@router.get("/balance")
async def get_balance(
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    start: DateQuery = None,
    end: DateQuery = None,
) -> dict[str, str]:
    """Deposits minus cash grocery spending."""
    period = resolve_period(start, end, current_member, policy.local_today(clock.now()))
    return {"balance": str(LedgerService(db).balance(period))}


@router.get("/meal-rate")
async def get_meal_rate(
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    start: DateQuery = None,
    end: DateQuery = None,
) -> dict[str, str]:
    period = resolve_period(start, end, current_member, policy.local_today(clock.now()))
    return {"meal_rate": str(LedgerService(db).meal_rate(period))}
