"""Meal registration endpoints.

Every write goes through ``RegistrationGateway`` so cutoffs are checked
against the database clock inside the write transaction.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query, status
from sqlalchemy import select

from boarding_mess.api.v1.dependencies import (
    AdminDep,
    ClockDep,
    CurrentMemberDep,
    PolicyDep,
    SessionDep,
    http_error,
)
from boarding_mess.db.time import utcnow
from boarding_mess.models import MealDetails, MealRegistration
from boarding_mess.schemas.meal import (
    MealClear,
    MealCountResponse,
    MealDetailsResponse,
    MealDetailsWrite,
    MealRegistrationResponse,
    MealWrite,
    MealWriteResponse,
    ParticipantResponse,
    PeriodName,
)
from boarding_mess.services.errors import MessError
from boarding_mess.services.registrations import RegistrationGateway, RegistrationStore
from boarding_mess.services.reports import ReportService

router = APIRouter(prefix="/meals", tags=["meals"])

PeriodQuery = Annotated[PeriodName, Query(description="morning or night")]


@router.get("/", response_model=list[MealRegistrationResponse])
async def list_meals(
    meal_date: Annotated[date, Query(alias="date")],
    period: PeriodQuery,
    _member: CurrentMemberDep,
    db: SessionDep,
) -> list[MealRegistration]:
    """List registrations for one (date, period)."""
    return RegistrationStore(db).list_for(meal_date, period)


@router.get("/counts", response_model=MealCountResponse)
async def meal_counts(
    meal_date: Annotated[date, Query(alias="date")],
    period: PeriodQuery,
    _member: CurrentMemberDep,
    db: SessionDep,
) -> MealCountResponse:
    """Return headcounts split by rice preference."""
    count = ReportService(db).meal_counts(meal_date, period)
    return MealCountResponse(
        meal_date=count.meal_date,
        period=count.period.value,
        total=count.total,
        boiled=count.boiled,
        atop=count.atop,
        participants=[
            ParticipantResponse.model_validate(participant) for participant in count.participants
        ],
    )


@router.post("/clear")
async def clear_meals(
    request: MealClear,
    admin: AdminDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
) -> dict[str, int]:
    """Set every registration of a (date, period) to zero."""
    gateway = RegistrationGateway(db, clock=clock, policy=policy)
    try:
        cleared = gateway.clear_period(admin, request.meal_date, request.period)
    except MessError as err:
        raise http_error(err) from err
    return {"cleared": cleared}


@router.get("/details/{meal_date}", response_model=MealDetailsResponse)
async def get_meal_details(
    meal_date: date,
    _member: CurrentMemberDep,
    db: SessionDep,
) -> MealDetailsResponse:
    details = db.scalars(select(MealDetails).where(MealDetails.meal_date == meal_date)).first()
    if details is None:
        return MealDetailsResponse(meal_date=meal_date)
    return MealDetailsResponse.model_validate(details)


@router.put("/details/{meal_date}", response_model=MealDetailsResponse)
async def put_meal_details(
    meal_date: date,
    payload: MealDetailsWrite,
    current_member: CurrentMemberDep,
    db: SessionDep,
) -> MealDetails:
    """Record the menu of a day."""
    details = db.scalars(select(MealDetails).where(MealDetails.meal_date == meal_date)).first()
    if details is None:
        details = MealDetails(meal_date=meal_date)
        db.add(details)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(details, key, value)
    details.updated_by = current_member.id
    details.updated_at = utcnow()
    db.commit()
    db.refresh(details)
    return details


@router.put(
    "/{member_id}/{meal_date}/{period}",
    response_model=MealWriteResponse,
    status_code=status.HTTP_200_OK,
)
async def set_meal(
    member_id: int,
    meal_date: date,
    period: PeriodName,
    payload: MealWrite,
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
) -> MealWriteResponse:
    """Set the quantity of one registration.

    Members may change their own meals before the cutoff; administrators may
    change anyone's at any time, which is announced in the chat after cutoff.
    """
    gateway = RegistrationGateway(db, clock=clock, policy=policy)
    try:
        outcome = gateway.set_quantity(
            current_member, member_id, meal_date, period, payload.quantity
        )
    except MessError as err:
        raise http_error(err) from err
    return MealWriteResponse(
        registration=MealRegistrationResponse.model_validate(outcome.registration),
        previous_quantity=outcome.previous_quantity,
        after_cutoff=outcome.after_cutoff,
        violation_message_id=outcome.violation.id if outcome.violation is not None else None,
    )
