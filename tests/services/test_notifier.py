"""Tests for violation notices."""

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from boarding_mess.models import ChatMessage, Member
from boarding_mess.services.notifier import ViolationNotifier, violation_body
from tests.conftest import FixedClock


def test_violation_body_format() -> None:
    assert violation_body("Rahim", "added", "6:00 PM") == "Rahim has added their meal after 6:00 PM"


def test_notify_appends_flagged_message(db_session: Session, member_a: Member) -> None:
    message = ViolationNotifier(db_session).notify(member_a, "removed", "morning", "7:00 AM")
    assert message is not None
    stored = db_session.scalars(select(ChatMessage)).one()
    assert stored.is_violation is True
    assert stored.body == "Rahim has removed their meal after 7:00 AM"
    assert stored.mentions == []


def test_notify_failure_is_swallowed(db_session: Session, member_a: Member, mocker, caplog) -> None:
    """A failing append is logged and reported as None instead of raising."""
    notifier = ViolationNotifier(db_session)
    mocker.patch.object(
        db_session,
        "begin_nested",
        side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")),
    )

    assert notifier.notify(member_a, "added", "night", "6:00 PM") is None
    assert "Could not append chat message" in caplog.text


def test_announce_is_not_a_violation(db_session: Session, admin: Member) -> None:
    message = ViolationNotifier(db_session).announce(admin, "hello")
    assert message is not None and message.is_violation is False


def test_messages_are_stamped_from_the_given_clock(
    db_session: Session, clock: FixedClock, member_a: Member
) -> None:
    notifier = ViolationNotifier(db_session, clock=clock)
    violation = notifier.notify(member_a, "added", "morning", "7:00 AM")
    notice = notifier.announce(member_a, "hello")

    assert violation is not None and violation.created_at == clock.now()
    assert notice is not None and notice.created_at == clock.now()
