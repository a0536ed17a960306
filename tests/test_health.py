# tests/test_health.py
from fastapi import status
from fastapi.testclient import TestClient


def test_health_ok(client: TestClient) -> None:
    """Health endpoint reports ok."""
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"status": "ok"}


def test_root_describes_api(client: TestClient) -> None:
    """Root endpoint points at the interactive docs."""
    r = client.get("/")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["name"] == "Boarding Mess"
    assert data["docs"] == "/docs"
