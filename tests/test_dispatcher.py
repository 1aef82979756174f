"""Tests for the asynchronous message dispatcher."""

from __future__ import annotations

import anyio

from notification_dispatch.domain.entities import MESSAGE_STATE_DISPATCHED, Message
from notification_dispatch.infrastructure.delivery import LoggingSender, MessageDispatcher
from notification_dispatch.infrastructure.delivery import dispatcher as dispatcher_module
from notification_dispatch.infrastructure.repositories import MessageRepository


class RecordingSender:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.sent: list[Message] = []

    def send(self, message: Message) -> bool:
        self.sent.append(message)
        return self.result


def _staged(session, user_id: int, path_type: str, now) -> Message:
    message = Message(
        id=None,
        notification_id=None,
        notification_name="Assignment Changed",
        user_id=user_id,
        subject="Assignment changed",
        to="student@example.com",
        path_type=path_type,
    )
    message.stage_without_dispatch(now)
    return MessageRepository(session).create(message)


def test_deliver_batch_marks_successful_messages_dispatched(
    session, session_factory, make_user, now, caplog
) -> None:
    user = make_user()
    email = _staged(session, user.id, "email", now)
    sms = _staged(session, user.id, "sms", now)
    push = _staged(session, user.id, "push", now)
    email_sender = RecordingSender()
    sms_sender = RecordingSender(result=False)
    dispatcher = MessageDispatcher(
        senders={"email": email_sender, "sms": sms_sender},
        session_factory=session_factory,
    )

    with caplog.at_level("WARNING"):
        delivered = anyio.run(dispatcher.deliver_batch, [email, sms, push])

    assert delivered == [email.id]
    assert email_sender.sent == [email]
    assert sms_sender.sent == [sms]
    assert "No sender registered for path type push" in caplog.text
    session.expire_all()
    repository = MessageRepository(session)
    assert repository.get(email.id).workflow_state == MESSAGE_STATE_DISPATCHED
    assert repository.get(sms.id).workflow_state != MESSAGE_STATE_DISPATCHED


def test_batch_dispatch_schedules_saved_messages_only(monkeypatch) -> None:
    scheduled = []
    monkeypatch.setattr(
        dispatcher_module, "schedule", lambda func, *args: scheduled.append((func, args))
    )
    dispatcher = MessageDispatcher(senders={})
    saved = Message(id=5, notification_id=None, notification_name="N", user_id=1, subject="S")
    unsaved = Message(id=None, notification_id=None, notification_name="N", user_id=1, subject="S")

    dispatcher.batch_dispatch([saved, unsaved])
    dispatcher.batch_dispatch([unsaved])

    assert len(scheduled) == 1
    assert scheduled[0][1] == ([saved],)


def test_logging_sender_always_succeeds(caplog) -> None:
    message = Message(id=9, notification_id=None, notification_name="N", user_id=1, subject="S")

    with caplog.at_level("INFO"):
        assert LoggingSender("sms").send(message) is True

    assert "Delivered sms message 9" in caplog.text
