"""Tests for system, clock and scheduling endpoints."""

from fastapi import status
from fastapi.testclient import TestClient

from boarding_mess.models import Member
from tests.conftest import FixedClock, dhaka


def test_server_time_uses_trusted_clock(client: TestClient, clock: FixedClock) -> None:
    r = client.get("/api/v1/system/time")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["timezone"] == "Asia/Dhaka"
    assert data["server_time"].startswith("2025-10-24T00:59:00")
    assert data["local_time"].startswith("2025-10-24T06:59:00")


def test_system_config_hides_secrets(client: TestClient) -> None:
    r = client.get("/api/v1/system/config")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["household"]["morning_cutoff_hour"] == 7
    assert data["household"]["night_cutoff_hour"] == 18
    assert "secret_key" not in str(data).lower()
    assert "database_url" not in str(data).lower()


def test_cutoffs_report_state(client: TestClient, clock: FixedClock) -> None:
    cutoffs = {c["period"]: c for c in client.get("/api/v1/system/cutoffs").json()}
    assert cutoffs["morning"]["passed"] is False
    assert cutoffs["morning"]["label"] == "7:00 AM"
    assert cutoffs["night"]["label"] == "6:00 PM"

    clock.set(dhaka(2025, 10, 24, 7, 0))
    cutoffs = {c["period"]: c for c in client.get("/api/v1/system/cutoffs").json()}
    assert cutoffs["morning"]["passed"] is True
    assert cutoffs["night"]["passed"] is False


def test_materialize_requires_admin(
    client: TestClient, member_a: Member, member_headers: dict[str, str]
) -> None:
    r = client.post(
        "/api/v1/system/materialize",
        json={"meal_date": "2025-10-24", "period": "morning"},
        headers=member_headers,
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_materialize_creates_defaults_once(
    client: TestClient, member_a: Member, member_b: Member, admin_headers: dict[str, str]
) -> None:
    payload = {"meal_date": "2025-10-24", "period": "morning"}
    r = client.post("/api/v1/system/materialize", json=payload, headers=admin_headers)
    assert r.status_code == status.HTTP_200_OK
    created = {row["member_id"]: row["quantity"] for row in r.json()["created"]}
    assert created == {member_a.id: 2, member_b.id: 1}

    again = client.post("/api/v1/system/materialize", json=payload, headers=admin_headers)
    assert again.json()["created"] == []


def test_backfill_range(
    client: TestClient, member_a: Member, admin_headers: dict[str, str]
) -> None:
    r = client.post(
        "/api/v1/system/backfill",
        json={"start_date": "2025-10-22", "end_date": "2025-10-24"},
        headers=admin_headers,
    )
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    # Two past days with both periods; today's morning cutoff has not passed yet.
    assert len(data["results"]) == 4
    assert data["total_affected"] == 4


def test_backfill_inverted_range(client: TestClient, admin_headers: dict[str, str]) -> None:
    r = client.post(
        "/api/v1/system/backfill",
        json={"start_date": "2025-10-24", "end_date": "2025-10-20"},
        headers=admin_headers,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST
