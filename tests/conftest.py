# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count
from typing import Any
from zoneinfo import ZoneInfo

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["HOUSEHOLD_TIMEZONE"] = "Asia/Dhaka"

from boarding_mess.api.v1.dependencies import get_clock  # noqa: E402
from boarding_mess.core.security import create_access_token  # noqa: E402
from boarding_mess.db.session import Base, enable_sqlite_transactions  # noqa: E402
from boarding_mess.db.session import get_db as app_get_session  # noqa: E402
from boarding_mess.main import app as fastapi_app  # noqa: E402
from boarding_mess.models import Member  # noqa: E402
from boarding_mess.models.member import ROLE_ADMIN, ROLE_MEMBER  # noqa: E402
from boarding_mess.services.cutoff import CutoffPolicy  # noqa: E402

TEST_DB_URL = "sqlite://"
DHAKA = ZoneInfo("Asia/Dhaka")

_EMAIL_COUNTER = count(1)


def dhaka(year: int, month: int, day: int, hour: int, minute: int = 0) -> datetime:
    """Return a household-local instant expressed in UTC."""
    return datetime(year, month, day, hour, minute, tzinfo=DHAKA).astimezone(ZoneInfo("UTC"))


class FixedClock:
    """Clock pinned to an instant that tests move explicitly."""

    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now

    def advance(self, **delta: float) -> None:
        self.current += timedelta(**delta)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = enable_sqlite_transactions(
        create_engine(
            TEST_DB_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # Commits inside the test release a savepoint; the outer transaction is rolled back.
    SessionLocal = sessionmaker(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def clock() -> FixedClock:
    """Clock pinned to 2025-10-24 06:59 in Dhaka, one minute before the morning cutoff."""
    return FixedClock(dhaka(2025, 10, 24, 6, 59))


@pytest.fixture()
def policy() -> CutoffPolicy:
    return CutoffPolicy(tz=DHAKA, morning_hour=7, night_hour=18)


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def override_clock_dependency(app: FastAPI, clock: FixedClock) -> Iterator[None]:
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_clock, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_member(db_session: Session) -> Callable[..., Member]:
    """Return a factory that persists members with sensible defaults."""

    def _make(name: str, **overrides: Any) -> Member:
        values: dict[str, Any] = {
            "name": name,
            "email": f"member{next(_EMAIL_COUNTER)}@mess.test",
            "rice_preference": "boiled",
            "role": ROLE_MEMBER,
            "auto_meal_morning": True,
            "auto_meal_night": True,
            "auto_meal_morning_quantity": 1,
            "auto_meal_night_quantity": 1,
        }
        values.update(overrides)
        member = Member(**values)
        db_session.add(member)
        db_session.flush()
        db_session.refresh(member)
        return member

    return _make


@pytest.fixture()
def member_a(make_member: Callable[..., Member]) -> Member:
    """Member whose morning auto-meal default is two meals."""
    return make_member("Rahim", auto_meal_morning_quantity=2)


@pytest.fixture()
def member_b(make_member: Callable[..., Member]) -> Member:
    return make_member("Karim", rice_preference="atop")


@pytest.fixture()
def admin(make_member: Callable[..., Member]) -> Member:
    return make_member("Manager", role=ROLE_ADMIN, auto_meal_morning=False, auto_meal_night=False)


@pytest.fixture()
def member_headers(member_a: Member) -> dict[str, str]:
    """Return authorization headers for member A."""
    return {"Authorization": f"Bearer {create_access_token(member_a.id)}"}


@pytest.fixture()
def admin_headers(admin: Member) -> dict[str, str]:
    """Return authorization headers for the administrator."""
    return {"Authorization": f"Bearer {create_access_token(admin.id)}"}
