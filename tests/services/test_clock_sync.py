"""Tests for the server clock synchronization client."""

import json
from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest

from boarding_mess.services.clock_sync import ServerClockSync

SERVER_NOW = datetime(2025, 10, 24, 1, 0, tzinfo=UTC)


class SteppingTime:
    """Local time source that advances by ``step`` seconds on every read."""

    def __init__(self, start: float, step: float = 0.0) -> None:
        self.value = start
        self.step = step

    def __call__(self) -> float:
        current = self.value
        self.value += self.step
        return current


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mess.test")


def _server_time_handler(request: httpx.Request) -> httpx.Response:
    assert request.url.path == "/api/v1/system/time"
    return httpx.Response(200, json={"server_time": SERVER_NOW.isoformat()})


@pytest.mark.asyncio
async def test_sync_corrects_for_half_round_trip(tmp_path: Path) -> None:
    """offset = server_time + rtt/2 - local receive time."""
    local = SteppingTime(SERVER_NOW.timestamp() - 100.0, step=2.0)
    sync = ServerClockSync(
        "http://mess.test",
        client=_client(_server_time_handler),
        cache_path=tmp_path / "offset.json",
        local_time=local,
    )

    assert await sync.sync() is True

    # request at -100, response at -98, rtt 2s, so server now is SERVER_NOW + 1s
    assert sync.offset_seconds == pytest.approx(99.0)
    assert sync.metrics.sync_attempts == 1
    assert sync.metrics.sync_successes == 1
    assert sync.metrics.average_latency == pytest.approx(1.0)
    cached = json.loads((tmp_path / "offset.json").read_text())
    assert cached["offset"] == pytest.approx(99.0)


@pytest.mark.asyncio
async def test_now_applies_offset() -> None:
    local = SteppingTime(SERVER_NOW.timestamp() - 60.0)
    sync = ServerClockSync("http://mess.test", client=_client(_server_time_handler), local_time=local)
    await sync.sync()
    assert sync.now() == SERVER_NOW


@pytest.mark.asyncio
async def test_failure_keeps_previous_offset() -> None:
    def failing(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"detail": "down"})

    sync = ServerClockSync(
        "http://mess.test",
        client=_client(failing),
        local_time=SteppingTime(1_000.0),
    )
    sync.offset_seconds = 12.5

    assert await sync.sync() is False
    assert sync.offset_seconds == 12.5
    assert sync.metrics.sync_attempts == 1
    assert sync.metrics.sync_success_rate == 0.0


@pytest.mark.asyncio
async def test_malformed_payload_is_a_failure() -> None:
    def garbage(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"time": "soon"})

    sync = ServerClockSync("http://mess.test", client=_client(garbage), local_time=SteppingTime(1.0))
    assert await sync.sync() is False


@pytest.mark.asyncio
async def test_concurrent_sync_is_skipped() -> None:
    sync = ServerClockSync(
        "http://mess.test",
        client=_client(_server_time_handler),
        local_time=SteppingTime(1_000.0),
    )
    sync._syncing = True
    assert await sync.sync() is False
    assert sync.metrics.sync_attempts == 0


def test_cached_offset_loaded_when_fresh(tmp_path: Path) -> None:
    cache = tmp_path / "offset.json"
    cache.write_text(json.dumps({"offset": 42.0, "timestamp": 10_000.0}))
    sync = ServerClockSync(
        "http://mess.test",
        client=_client(_server_time_handler),
        cache_path=cache,
        local_time=lambda: 10_000.0 + 3_600.0,
    )

    assert sync.load_cached_offset() is True
    assert sync.offset_seconds == 42.0
    assert sync.is_authoritative()


def test_cached_offset_rejected_after_a_day(tmp_path: Path) -> None:
    cache = tmp_path / "offset.json"
    cache.write_text(json.dumps({"offset": 42.0, "timestamp": 10_000.0}))
    sync = ServerClockSync(
        "http://mess.test",
        client=_client(_server_time_handler),
        cache_path=cache,
        local_time=lambda: 10_000.0 + 86_400.0,
    )

    assert sync.load_cached_offset() is False
    assert sync.offset_seconds == 0.0
    assert not cache.exists()


def test_status_reports_staleness() -> None:
    now = {"value": 50_000.0}
    sync = ServerClockSync(
        "http://mess.test",
        client=_client(_server_time_handler),
        local_time=lambda: now["value"],
    )
    assert sync.status()["synced"] is False
    assert sync.is_stale()
    assert not sync.is_authoritative()

    sync.last_sync = 50_000.0
    now["value"] = 50_000.0 + 3_601.0
    status = sync.status()
    assert status["synced"] is True
    assert status["stale"] is True
    assert status["authoritative"] is True


@pytest.mark.asyncio
async def test_start_stop_loop() -> None:
    sync = ServerClockSync(
        "http://mess.test",
        client=_client(_server_time_handler),
        interval_seconds=60,
        local_time=SteppingTime(1_000.0),
    )
    await sync.start()
    await sync.stop()
    assert sync.metrics.sync_attempts == 0
