"""Client-side synchronization against the server's trusted clock.

``ServerClockSync`` measures the offset between the local wall clock and the
server's ``/api/v1/system/time`` endpoint, compensating for half the request
round trip. The offset is cached on disk so a restarted client can keep
answering ``now()`` while offline, within a bounded staleness window.

The offset is advisory: it drives countdowns and UI hints only. Cutoffs are
enforced again on the server inside the write transaction.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import httpx

from boarding_mess.core.settings import settings
from boarding_mess.services.errors import ClockSyncFailure

logger = logging.getLogger(__name__)

SERVER_TIME_PATH = "/api/v1/system/time"
MAX_LATENCY_SAMPLES = 10


@dataclass
class ClockSyncMetrics:
    """Counters describing how well synchronization is going."""

    last_sync_timestamp: float = 0.0
    offset_seconds: float = 0.0
    sync_success_rate: float = 100.0
    average_latency: float = 0.0
    sync_attempts: int = 0
    sync_successes: int = 0


class ServerClockSync:
    """Keeps a latency-corrected offset to the server clock.

    Args:
        base_url: Root URL of the Boarding Mess API.
        client: Optional pre-built ``httpx.AsyncClient`` (tests pass one with a mock transport).
        cache_path: Optional JSON file used to persist the last good offset.
        local_time: Source of local epoch seconds; defaults to ``time.time``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        cache_path: Path | None = None,
        interval_seconds: float | None = None,
        max_cache_age_seconds: float | None = None,
        stale_after_seconds: float | None = None,
        local_time: Callable[[], float] = time.time,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=settings.clock_sync_timeout_seconds,
        )
        self.cache_path = cache_path
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else settings.clock_sync_interval_seconds
        )
        self.max_cache_age_seconds = (
            max_cache_age_seconds
            if max_cache_age_seconds is not None
            else settings.clock_sync_max_cache_age_seconds
        )
        self.stale_after_seconds = (
            stale_after_seconds
            if stale_after_seconds is not None
            else settings.clock_sync_stale_after_seconds
        )
        self._local_time = local_time

        self.offset_seconds = 0.0
        self.last_sync = 0.0
        self.metrics = ClockSyncMetrics()
        self._latencies: deque[float] = deque(maxlen=MAX_LATENCY_SAMPLES)
        self._syncing = False
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def initialize(self) -> None:
        """Load the cached offset, sync once and start periodic re-syncing."""
        self.load_cached_offset()
        await self.sync()
        await self.start()

    def load_cached_offset(self) -> bool:
        """Restore the offset from disk if the cache is younger than the bound."""
        if self.cache_path is None or not self.cache_path.exists():
            return False
        try:
            data = json.loads(self.cache_path.read_text(encoding="utf-8"))
            offset = float(data["offset"])
            timestamp = float(data["timestamp"])
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable clock offset cache %s: %s", self.cache_path, exc)
            return False

        age = self._local_time() - timestamp
        if age >= self.max_cache_age_seconds:
            logger.info("Cached clock offset expired (age: %ds)", int(age))
            self.cache_path.unlink(missing_ok=True)
            return False

        self.offset_seconds = offset
        self.last_sync = timestamp
        logger.info("Loaded cached clock offset %.3fs (age: %ds)", offset, int(age))
        return True

    def _cache_offset(self) -> None:
        if self.cache_path is None:
            return
        payload = {"offset": self.offset_seconds, "timestamp": self.last_sync}
        try:
            self.cache_path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write clock offset cache %s: %s", self.cache_path, exc)

    async def _fetch_server_time(self) -> datetime:
        try:
            response = await self.client.get(SERVER_TIME_PATH)
            response.raise_for_status()
            raw = response.json()["server_time"]
            server_time = datetime.fromisoformat(raw)
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            raise ClockSyncFailure(f"Could not read server time: {exc}") from exc
        if server_time.tzinfo is None:
            server_time = server_time.replace(tzinfo=UTC)
        return server_time

    async def sync(self) -> bool:
        """Measure the offset once; return True on success.

        Failures are logged and the previous offset stays in use.
        """
        if self._syncing:
            logger.debug("Clock sync already in progress, skipping")
            return False

        self._syncing = True
        self.metrics.sync_attempts += 1
        try:
            request_time = self._local_time()
            server_time = await self._fetch_server_time()
            response_time = self._local_time()

            latency = (response_time - request_time) / 2
            estimated_server_now = server_time.timestamp() + latency
            self.offset_seconds = estimated_server_now - response_time
            self.last_sync = response_time
            self._record(success=True, latency=latency)
            self._cache_offset()
            logger.info(
                "Clock sync succeeded: offset %.3fs, latency %.3fs",
                self.offset_seconds,
                latency,
            )
            return True
        except ClockSyncFailure as exc:
            logger.warning("Clock sync failed, keeping cached offset: %s", exc)
            self._record(success=False, latency=0.0)
            return False
        finally:
            self._syncing = False

    def _record(self, *, success: bool, latency: float) -> None:
        if success:
            self.metrics.sync_successes += 1
            self._latencies.append(latency)
            self.metrics.average_latency = sum(self._latencies) / len(self._latencies)
        self.metrics.sync_success_rate = (
            self.metrics.sync_successes / self.metrics.sync_attempts * 100
        )
        self.metrics.last_sync_timestamp = self.last_sync
        self.metrics.offset_seconds = self.offset_seconds

    def now(self) -> datetime:
        """Return the estimated server time; never blocks on the network."""
        return datetime.fromtimestamp(self._local_time() + self.offset_seconds, UTC)

    def last_sync_age(self) -> float:
        """Return seconds since the last successful sync (inf if never synced)."""
        if self.last_sync <= 0:
            return float("inf")
        return self._local_time() - self.last_sync

    def is_stale(self) -> bool:
        """Return True when the last sync is older than the staleness hint."""
        return self.last_sync_age() > self.stale_after_seconds

    def is_authoritative(self) -> bool:
        """Return True while the offset is young enough to gate UI cutoff checks.

        Past the bound, client-side checks are advisory only and the server's
        verdict is the one that counts.
        """
        return self.last_sync_age() < self.max_cache_age_seconds

    def status(self) -> dict[str, Any]:
        """Return a snapshot suitable for a sync indicator."""
        return {
            "synced": self.last_sync > 0,
            "stale": self.is_stale(),
            "authoritative": self.is_authoritative(),
            "last_sync": (
                datetime.fromtimestamp(self.last_sync, UTC) if self.last_sync > 0 else None
            ),
            "offset_seconds": self.offset_seconds,
            "metrics": asdict(self.metrics),
        }

    async def start(self) -> None:
        """Start the periodic re-sync loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the periodic loop and release the HTTP client if we own it."""
        if self._task is not None:
            self._stopping.set()
            await self._task
            self._task = None
        if self._owns_client:
            await self.client.aclose()

    async def _run(self) -> None:
        interval = max(1.0, float(self.interval_seconds))
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except TimeoutError:
                logger.debug("Clock auto-sync triggered")
                await self.sync()
