"""Tests for the per-run daily message cap."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from notification_dispatch.application.use_cases.messages import ThrottleGuard
from notification_dispatch.domain.entities import Message, User
from notification_dispatch.infrastructure.repositories import MessageRepository


def _message(user_id: int, created_at, *, to_email: bool = True) -> Message:
    return Message(
        id=None,
        notification_id=None,
        notification_name="Assignment Changed",
        user_id=user_id,
        subject="Assignment changed",
        to="student@example.com",
        path_type="email",
        to_email=to_email,
        workflow_state="dispatched",
        created_at=created_at,
    )


def test_counts_recent_email_messages_only(session, make_user, now) -> None:
    user = make_user(max_messages_per_day=2)
    repository = MessageRepository(session)
    repository.create(_message(user.id, now - timedelta(hours=1)))
    repository.create(_message(user.id, now - timedelta(hours=2)))
    repository.create(_message(user.id, now - timedelta(hours=3), to_email=False))
    repository.create(_message(user.id, now - timedelta(hours=30)))

    guard = ThrottleGuard.load(session, [user.id], now=now, window_hours=24)

    assert guard.count_for(user) == 2
    assert guard.too_many_messages_for(user) is True


def test_users_without_messages_count_zero() -> None:
    guard = ThrottleGuard({})
    user = User(id=7, name="Quiet", max_messages_per_day=1)

    assert guard.count_for(user) == 0
    assert guard.too_many_messages_for(user) is False


@pytest.mark.parametrize(("count", "limit", "expected"), [(4, 5, False), (5, 5, True), (6, 5, True)])
def test_threshold_is_inclusive(count, limit, expected) -> None:
    guard = ThrottleGuard({1: count})
    user = User(id=1, name="Busy", max_messages_per_day=limit)

    assert guard.too_many_messages_for(user) is expected


def test_empty_user_list_skips_the_query(now) -> None:
    class ExplodingSession:
        def query(self, *args, **kwargs):  # pragma: no cover - must not be called
            raise AssertionError("no query expected")

    guard = ThrottleGuard.load(ExplodingSession(), [], now=now, window_hours=24)

    assert guard.count_for(User(id=1, name="Nobody")) == 0


def test_read_failures_are_logged_and_propagated(monkeypatch, session, now, caplog) -> None:
    def failing_count(self, user_ids, *, since):
        raise OperationalError("SELECT", {}, Exception("replica down"))

    monkeypatch.setattr(MessageRepository, "count_recent_email_messages", failing_count)

    with caplog.at_level("ERROR"), pytest.raises(OperationalError):
        ThrottleGuard.load(session, [1], now=now, window_hours=24)

    assert "Failed to count recent messages" in caplog.text
