"""Tests for the change feed polling endpoint."""

from fastapi import status
from fastapi.testclient import TestClient

from boarding_mess.models import Member
from boarding_mess.services.change_feed import ChangeFeed, get_change_feed
from boarding_mess.api.v1.endpoints.changes import get_change_feed_dep


def test_poll_sees_committed_writes(
    client: TestClient, member_a: Member, member_headers: dict[str, str]
) -> None:
    before = client.get("/api/v1/changes/", headers=member_headers).json()["last_seq"]

    message = client.post("/api/v1/chat/", json={"body": "hello"}, headers=member_headers).json()
    client.put(
        f"/api/v1/meals/{member_a.id}/2025-10-24/night",
        json={"quantity": 1},
        headers=member_headers,
    )

    r = client.get("/api/v1/changes/", params={"after": before}, headers=member_headers)
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    seen = {(c["table"], c["action"], c["id"]) for c in data["changes"]}
    assert ("chat_message", "insert", message["id"]) in seen
    assert any(table == "meal_registration" for table, _, _ in seen)
    assert data["last_seq"] == max(c["seq"] for c in data["changes"])
    assert data["truncated"] is False


def test_poll_reports_truncation(
    client: TestClient, member_headers: dict[str, str], app
) -> None:
    feed = ChangeFeed(capacity=2)
    for row_id in range(1, 5):
        feed.publish("chat_message", "insert", row_id)
    app.dependency_overrides[get_change_feed_dep] = lambda: feed
    try:
        data = client.get("/api/v1/changes/", params={"after": 0}, headers=member_headers).json()
    finally:
        app.dependency_overrides.pop(get_change_feed_dep, None)

    assert [c["seq"] for c in data["changes"]] == [3, 4]
    assert data["truncated"] is True


def test_poll_requires_authentication(client: TestClient) -> None:
    assert get_change_feed() is get_change_feed()
    r = client.get("/api/v1/changes/")
    assert r.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
