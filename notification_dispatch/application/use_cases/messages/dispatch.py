"""Persistence and hand-off of the messages built in one run."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import (
    Asset,
    DelayedMessage,
    Message,
    Notification,
    StreamItem,
    User,
)
from notification_dispatch.infrastructure.database import ShardRouter
from notification_dispatch.infrastructure.repositories import (
    DelayedMessageRepository,
    MessageRepository,
    StreamItemRepository,
)

logger = logging.getLogger(__name__)


class BatchDispatcher(Protocol):
    def batch_dispatch(self, messages: Sequence[Message]) -> None: ...


class StreamPublisher(Protocol):
    def publish(self, stream_item: StreamItem) -> None: ...


class DispatchCoordinator:
    """Write the results of a run and hand staged messages to the dispatcher."""

    def __init__(
        self,
        session: Session,
        *,
        dispatcher: BatchDispatcher,
        stream_publisher: StreamPublisher,
        shard_router: ShardRouter | None = None,
        duplicate_window_hours: int = 6,
    ) -> None:
        self.session = session
        self.dispatcher = dispatcher
        self.stream_publisher = stream_publisher
        self.shard_router = shard_router or ShardRouter(session)
        self.duplicate_window_hours = duplicate_window_hours

    def persist_digest(self, user: User, delayed_message: DelayedMessage) -> DelayedMessage:
        """Save ``delayed_message`` through the session of the user's shard."""

        session = self.shard_router.session_for(user.shard)
        try:
            return DelayedMessageRepository(session).create(delayed_message)
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed to persist digest entry for user %s", user.id)
            raise

    def dispatch_dashboard_messages(
        self, messages: Sequence[Message], *, now: datetime
    ) -> list[StreamItem]:
        repository = StreamItemRepository(self.session)
        stream_items = []
        for message in messages:
            message.infer_defaults(now)
            stream_item = repository.create(StreamItem.from_message(message))
            self.stream_publisher.publish(stream_item)
            stream_items.append(stream_item)
        return stream_items

    def dispatch_immediate_messages(
        self,
        messages: Sequence[Message],
        *,
        notification: Notification,
        asset: Asset,
        user_ids: Sequence[int],
        now: datetime,
    ) -> list[Message]:
        """Cancel pending duplicates and stage ``messages`` in one transaction.

        Dashboard messages are never cancelled here since they are not stored
        as messages.
        """

        repository = MessageRepository(self.session)
        try:
            cancelled = repository.cancel_pending_duplicates(
                notification_id=notification.id,
                notification_name=notification.name,
                context_type=asset.asset_type,
                context_id=asset.asset_id,
                user_ids=user_ids,
                since=now - timedelta(hours=self.duplicate_window_hours),
                until=now,
            )
            for message in messages:
                message.stage_without_dispatch(now)
            repository.add_all(messages)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception(
                "Failed to stage %s messages for notification %s", len(messages), notification.name
            )
            raise

        if cancelled:
            logger.info(
                "Cancelled %s pending duplicate messages for %s", cancelled, notification.name
            )
        else:
            logger.debug("No pending duplicates to cancel for %s", notification.name)

        self.dispatcher.batch_dispatch(messages)
        return list(messages)


__all__ = ["BatchDispatcher", "DispatchCoordinator", "StreamPublisher"]
