"""Meal report endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Query

from boarding_mess.api.v1.dependencies import (
    ClockDep,
    CurrentMemberDep,
    PolicyDep,
    SessionDep,
    http_error,
    resolve_period,
)
from boarding_mess.services.errors import MessError
from boarding_mess.services.reports import AccountingPeriod, MemberReport, ReportService

router = APIRouter(prefix="/reports", tags=["reports"])

DateQuery = Annotated[date | None, Query()]


def _period_payload(period: AccountingPeriod) -> dict[str, str]:
    return {"start": period.start.isoformat(), "end": period.end.isoformat()}


def _report_payload(report: MemberReport) -> dict[str, Any]:
    return {
        "member_id": report.member_id,
        "member_name": report.member_name,
        "period": _period_payload(report.period),
        "days": [
            {
                "date": day.meal_date.isoformat(),
                "morning": day.morning,
                "night": day.night,
                "eggs": day.eggs,
            }
            for day in report.days
        ],
        "totals": {
            "morning": report.total_morning,
            "night": report.total_night,
            "meals": report.total_meals,
            "eggs": report.total_eggs,
        },
    }


@router.get("/period")
async def get_period(
    current_member: CurrentMemberDep,
    clock: ClockDep,
    policy: PolicyDep,
    reference: DateQuery = None,
) -> dict[str, str]:
    """Return the accounting period of the current member around ``reference``."""
    today = reference or policy.local_today(clock.now())
    return _period_payload(resolve_period(None, None, current_member, today))


@router.get("/member/{member_id}")
async def member_report(
    member_id: int,
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    start: DateQuery = None,
    end: DateQuery = None,
) -> dict[str, Any]:
    """Per-day meals and eggs of one member."""
    service = ReportService(db)
    subject = current_member if current_member.id == member_id else None
    period = resolve_period(start, end, subject, policy.local_today(clock.now()))
    try:
        report = service.member_report(member_id, period)
    except MessError as err:
        raise http_error(err) from err
    return _report_payload(report)


@router.get("/global")
async def global_report(
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    start: DateQuery = None,
    end: DateQuery = None,
) -> dict[str, Any]:
    """Every member across every date of the period."""
    period = resolve_period(start, end, current_member, policy.local_today(clock.now()))
    reports = ReportService(db).global_report(period)
    return {
        "period": _period_payload(period),
        "members": [_report_payload(report) for report in reports],
    }


@router.get("/summary")
async def monthly_summary(
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
    start: DateQuery = None,
    end: DateQuery = None,
) -> dict[str, Any]:
    """Per-member totals for the period."""
    period = resolve_period(start, end, current_member, policy.local_today(clock.now()))
    rows = ReportService(db).monthly_summary(period)
    return {
        "period": _period_payload(period),
        "rows": [dict(asdict(row), total_meals=row.total_meals) for row in rows],
    }
