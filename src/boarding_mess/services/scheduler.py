"""Background worker that fires auto-meal materialization at each cutoff.

Trigger instants are derived from the household timezone and cutoff hours on
every iteration, so configuration changes and DST rules are always honored.
The worker also runs the daily chat retention purge.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from boarding_mess.core.settings import settings
from boarding_mess.db.session import SessionLocal
from boarding_mess.models import MealPeriod
from boarding_mess.services.chat import ChatService
from boarding_mess.services.clock import Clock, SystemClock
from boarding_mess.services.cutoff import CutoffPolicy, get_cutoff_policy
from boarding_mess.services.errors import MessError
from boarding_mess.services.materializer import AutoMealMaterializer, BackfillResult

logger = logging.getLogger(__name__)

JOB_MATERIALIZE = "materialize"
JOB_PURGE = "purge"
ERROR_BACKOFF_SECONDS = 30.0


@dataclass(frozen=True)
class ScheduledJob:
    """The next unit of work and when it is due."""

    kind: str
    at: datetime
    meal_date: date | None = None
    period: MealPeriod | None = None


class CutoffScheduler:
    """Sleeps until the next cutoff or purge, then runs it in a worker thread."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        clock: Clock | None = None,
        policy: CutoffPolicy | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.clock = clock or SystemClock()
        self.policy = policy or get_cutoff_policy()
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the background loop; a catch-up backfill runs first."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    def next_purge(self, now: datetime) -> datetime:
        """Return the next local ``CHAT_PURGE_HOUR`` instant strictly after ``now``."""
        today = self.policy.local_today(now)
        candidate = datetime.combine(today, time(settings.chat_purge_hour), tzinfo=self.policy.tz)
        if candidate <= now:
            candidate = datetime.combine(
                today + timedelta(days=1),
                time(settings.chat_purge_hour),
                tzinfo=self.policy.tz,
            )
        return candidate

    def next_job(self, now: datetime) -> ScheduledJob:
        cutoff = self.policy.next_cutoff(now)
        purge_at = self.next_purge(now)
        if purge_at < cutoff.instant:
            return ScheduledJob(JOB_PURGE, purge_at)
        return ScheduledJob(JOB_MATERIALIZE, cutoff.instant, cutoff.meal_date, cutoff.period)

    def _catch_up(self) -> list[BackfillResult]:
        now = self.clock.now()
        today = self.policy.local_today(now)
        start = today - timedelta(days=max(0, settings.scheduler_catchup_days))
        with self.session_factory() as db:
            return AutoMealMaterializer(db, clock=self.clock, policy=self.policy).backfill(
                start, today
            )

    def _execute(self, job: ScheduledJob) -> int:
        with self.session_factory() as db:
            if job.kind == JOB_PURGE:
                return ChatService(db, clock=self.clock).purge_older_than()
            if job.meal_date is None or job.period is None:
                raise ValueError(f"Materialize job due {job.at.isoformat()} names no meal slot")
            materializer = AutoMealMaterializer(db, clock=self.clock, policy=self.policy)
            return len(materializer.materialize(job.meal_date, job.period))

    async def run_catch_up(self) -> list[BackfillResult]:
        """Materialize any cutoffs missed while the service was down."""
        results = await asyncio.to_thread(self._catch_up)
        logger.info(
            "Scheduler catch-up created %d registrations",
            sum(result.affected for result in results),
        )
        return results

    async def run_job(self, job: ScheduledJob) -> int:
        affected = await asyncio.to_thread(self._execute, job)
        logger.info("Scheduler ran %s job due %s: %d rows", job.kind, job.at.isoformat(), affected)
        return affected

    async def _sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=max(0.0, seconds))
        except TimeoutError:
            return False
        return True

    async def _run(self) -> None:
        try:
            await self.run_catch_up()
        except (SQLAlchemyError, MessError) as e:
            logger.error("Scheduler catch-up failed: %s", e, exc_info=True)

        while not self._stopping.is_set():
            job = self.next_job(self.clock.now())
            delay = (job.at - self.clock.now()).total_seconds()
            if delay > 0:
                if await self._sleep(min(delay, settings.scheduler_max_sleep_seconds)):
                    return
                if self.clock.now() < job.at:
                    continue
            try:
                await self.run_job(job)
            except (SQLAlchemyError, MessError) as e:
                logger.warning("Scheduler %s job failed: %s", job.kind, e)
                if await self._sleep(ERROR_BACKOFF_SECONDS):
                    return
