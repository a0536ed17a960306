"""Tests for the chat endpoints."""

from fastapi import status
from fastapi.testclient import TestClient

from boarding_mess.models import Member
from tests.conftest import FixedClock


def test_post_and_list(
    client: TestClient, member_a: Member, member_b: Member, member_headers: dict[str, str]
) -> None:
    r = client.post(
        "/api/v1/chat/",
        json={"body": "  Fish tonight?  ", "mentions": [member_b.id, member_b.id]},
        headers=member_headers,
    )
    assert r.status_code == status.HTTP_201_CREATED
    data = r.json()
    assert data["body"] == "Fish tonight?"
    assert data["mentions"] == [member_b.id]
    assert data["sender_id"] == member_a.id
    assert data["is_violation"] is False

    client.post("/api/v1/chat/", json={"body": "Yes"}, headers=member_headers)
    listed = client.get("/api/v1/chat/", headers=member_headers).json()
    assert [m["body"] for m in listed] == ["Fish tonight?", "Yes"]


def test_blank_body_rejected(client: TestClient, member_headers: dict[str, str]) -> None:
    r = client.post("/api/v1/chat/", json={"body": "   "}, headers=member_headers)
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_unknown_mention_rejected(client: TestClient, member_headers: dict[str, str]) -> None:
    r = client.post(
        "/api/v1/chat/", json={"body": "hi", "mentions": [987654]}, headers=member_headers
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_pagination_with_before(client: TestClient, member_headers: dict[str, str]) -> None:
    ids = [
        client.post("/api/v1/chat/", json={"body": f"m{i}"}, headers=member_headers).json()["id"]
        for i in range(3)
    ]
    page = client.get(
        "/api/v1/chat/", params={"before": ids[2], "limit": 1}, headers=member_headers
    ).json()
    assert [m["id"] for m in page] == [ids[1]]


def test_purge_is_admin_only(
    client: TestClient,
    clock: FixedClock,
    member_headers: dict[str, str],
    admin_headers: dict[str, str],
) -> None:
    client.post("/api/v1/chat/", json={"body": "old news"}, headers=member_headers)

    denied = client.post("/api/v1/chat/purge", headers=member_headers)
    assert denied.status_code == status.HTTP_403_FORBIDDEN

    clock.advance(days=2)
    r = client.post("/api/v1/chat/purge", params={"days": 1}, headers=admin_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"deleted": 1}
