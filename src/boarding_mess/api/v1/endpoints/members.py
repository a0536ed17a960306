"""Member profile and preference endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import select
from sqlalchemy.orm import Session

from boarding_mess.api.v1.dependencies import CurrentMemberDep, SessionDep
from boarding_mess.models import Member
from boarding_mess.schemas.member import (
    AccountingPeriodUpdate,
    AutoMealUpdate,
    MemberResponse,
    MemberUpdate,
)

router = APIRouter(prefix="/members", tags=["members"])


def _apply(db: Session, member: Member, changes: dict[str, object]) -> Member:
    for key, value in changes.items():
        setattr(member, key, value)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


@router.get("/", response_model=list[MemberResponse])
async def list_members(_member: CurrentMemberDep, db: SessionDep) -> list[Member]:
    """List every household member."""
    return list(db.scalars(select(Member).order_by(Member.name)))


@router.get("/me", response_model=MemberResponse)
async def get_me(current_member: CurrentMemberDep) -> Member:
    return current_member


@router.patch("/me", response_model=MemberResponse)
async def update_me(
    update_data: MemberUpdate,
    current_member: CurrentMemberDep,
    db: SessionDep,
) -> Member:
    """Update profile fields of the authenticated member."""
    return _apply(db, current_member, update_data.model_dump(exclude_unset=True, exclude_none=True))


@router.put("/me/auto-meal", response_model=MemberResponse)
async def update_auto_meal(
    update_data: AutoMealUpdate,
    current_member: CurrentMemberDep,
    db: SessionDep,
) -> Member:
    """Change auto-meal defaults; they apply from the next cutoff on."""
    return _apply(db, current_member, update_data.model_dump(exclude_unset=True, exclude_none=True))


@router.put("/me/accounting-period", response_model=MemberResponse)
async def update_accounting_period(
    update_data: AccountingPeriodUpdate,
    current_member: CurrentMemberDep,
    db: SessionDep,
) -> Member:
    """Set or clear the member's custom accounting period."""
    return _apply(
        db,
        current_member,
        {
            "meal_month_start_date": update_data.start_date,
            "meal_month_end_date": update_data.end_date,
        },
    )
