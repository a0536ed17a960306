"""System, clock and scheduling endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from boarding_mess.api.v1.dependencies import (
    AdminDep,
    ClockDep,
    PolicyDep,
    SessionDep,
    http_error,
)
from boarding_mess.core.settings import settings
from boarding_mess.models import MealPeriod
from boarding_mess.schemas.system import (
    BackfillRequest,
    CutoffStatus,
    MaterializeRequest,
    ServerTimeResponse,
)
from boarding_mess.services.errors import MessError
from boarding_mess.services.materializer import AutoMealMaterializer

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/time", response_model=ServerTimeResponse)
async def get_server_time(clock: ClockDep, policy: PolicyDep) -> ServerTimeResponse:
    """Return the trusted server time clients synchronize against."""
    now = clock.now()
    return ServerTimeResponse(
        server_time=now,
        timezone=settings.household_timezone,
        local_time=policy.local_now(now),
    )


@router.get("/config")
async def get_public_config() -> dict[str, Any]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "household": {
            "timezone": settings.household_timezone,
            "morning_cutoff_hour": settings.morning_cutoff_hour,
            "night_cutoff_hour": settings.night_cutoff_hour,
            "max_meal_quantity": settings.max_meal_quantity,
        },
        "scheduler": {
            "enabled": settings.scheduler_enabled,
            "catchup_days": settings.scheduler_catchup_days,
            "chat_retention_days": settings.chat_retention_days,
            "chat_purge_hour": settings.chat_purge_hour,
        },
        "clock_sync": {
            "interval_seconds": settings.clock_sync_interval_seconds,
            "max_cache_age_seconds": settings.clock_sync_max_cache_age_seconds,
            "stale_after_seconds": settings.clock_sync_stale_after_seconds,
        },
    }


@router.get("/cutoffs", response_model=list[CutoffStatus])
async def get_cutoffs(clock: ClockDep, policy: PolicyDep) -> list[CutoffStatus]:
    """Return today's cutoffs with their state and countdown."""
    now = clock.now()
    today = policy.local_today(now)
    return [
        CutoffStatus(
            period=period.value,
            cutoff_at=policy.cutoff_instant(period, today),
            label=policy.cutoff_label(period),
            passed=policy.is_cutoff_passed(period, today, now),
            remaining=policy.format_time_until_cutoff(period, now),
        )
        for period in MealPeriod
    ]


@router.post("/materialize")
async def materialize(
    request: MaterializeRequest,
    _admin: AdminDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
) -> dict[str, Any]:
    """Run auto-meal materialization for one (date, period) immediately."""
    materializer = AutoMealMaterializer(db, clock=clock, policy=policy)
    created = materializer.materialize(request.meal_date, request.period)
    return {
        "meal_date": request.meal_date.isoformat(),
        "period": request.period,
        "created": [
            {
                "member_id": meal.member_id,
                "member_name": meal.member_name,
                "quantity": meal.quantity,
            }
            for meal in created
        ],
    }


@router.post("/backfill")
async def backfill(
    request: BackfillRequest,
    _admin: AdminDep,
    db: SessionDep,
    clock: ClockDep,
    policy: PolicyDep,
) -> dict[str, Any]:
    """Materialize every missed cutoff in a date range."""
    materializer = AutoMealMaterializer(db, clock=clock, policy=policy)
    try:
        results = materializer.backfill(request.start_date, request.end_date)
    except MessError as err:
        raise http_error(err) from err
    return {
        "results": [
            {
                "meal_date": result.meal_date.isoformat(),
                "period": result.period.value,
                "affected": result.affected,
            }
            for result in results
        ],
        "total_affected": sum(result.affected for result in results),
    }
