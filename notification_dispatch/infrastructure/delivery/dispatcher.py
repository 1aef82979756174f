"""Asynchronous hand-off of staged messages to their transports."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from anyio import to_thread
from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import Message
from notification_dispatch.infrastructure.database import SessionLocal
from notification_dispatch.infrastructure.repositories import MessageRepository
from notification_dispatch.infrastructure.scheduling import schedule
from notification_dispatch.utils import now_in_app_timezone

from .senders import MessageSender, default_senders

logger = logging.getLogger(__name__)


class MessageDispatcher:
    """Deliver staged messages in the background and record the ``dispatched`` transition.

    ``batch_dispatch`` returns immediately; failures are logged and leave the
    message ``staged`` so it can be picked up by a retry job.
    """

    def __init__(
        self,
        *,
        senders: Mapping[str, MessageSender] | None = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ) -> None:
        self._senders = dict(senders) if senders is not None else default_senders()
        self._session_factory = session_factory

    def batch_dispatch(self, messages: Sequence[Message]) -> None:
        batch = [message for message in messages if message.id is not None]
        if not batch:
            return
        schedule(self.deliver_batch, batch)

    async def deliver_batch(self, messages: Sequence[Message]) -> list[int]:
        delivered: list[int] = []
        for message in messages:
            sender = self._senders.get(message.path_type or "")
            if sender is None:
                logger.warning(
                    "No sender registered for path type %s (message %s)",
                    message.path_type,
                    message.id,
                )
                continue
            if await to_thread.run_sync(sender.send, message):
                delivered.append(message.id)
            else:
                logger.error("Delivery of message %s via %s failed", message.id, message.path_type)

        if delivered:
            await to_thread.run_sync(self._mark_dispatched, delivered)
        return delivered

    def _mark_dispatched(self, message_ids: list[int]) -> None:
        session = self._session_factory()
        try:
            MessageRepository(session).mark_dispatched(message_ids, at=now_in_app_timezone())
        finally:
            session.close()


message_dispatcher = MessageDispatcher()


__all__ = ["MessageDispatcher", "message_dispatcher"]
