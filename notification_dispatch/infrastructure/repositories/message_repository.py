"""Persistence helpers for immediate messages."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import (
    CANCELLABLE_MESSAGE_STATES,
    MESSAGE_STATE_CANCELLED,
    MESSAGE_STATE_DISPATCHED,
    MESSAGE_STATE_STAGED,
    Message,
)
from notification_dispatch.infrastructure.models import MessageModel
from notification_dispatch.utils import ensure_app_naive_datetime, ensure_app_timezone


class MessageRepository:
    """Provide persistence operations for :class:`Message` objects.

    Methods that take part in the dispatch transaction (``add_all`` and
    ``cancel_pending_duplicates``) only flush; the caller commits.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, message_id: int) -> Message | None:
        model = self.session.get(MessageModel, message_id)
        return self._to_entity(model) if model else None

    def list_for_user(self, user_id: int, *, limit: int | None = 50) -> Sequence[Message]:
        query = (
            self.session.query(MessageModel)
            .filter(MessageModel.user_id == user_id)
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def add_all(self, messages: Iterable[Message]) -> None:
        models: list[tuple[Message, MessageModel]] = []
        for message in messages:
            model = MessageModel()
            self._apply_entity_to_model(model, message)
            self.session.add(model)
            models.append((message, model))
        self.session.flush()
        for message, model in models:
            message.id = model.id

    def create(self, message: Message) -> Message:
        self.add_all([message])
        self.session.commit()
        return message

    def cancel_pending_duplicates(
        self,
        *,
        notification_id: int | None,
        notification_name: str,
        context_type: str,
        context_id: int,
        user_ids: Sequence[int],
        since: datetime,
        until: datetime,
    ) -> int:
        """Cancel undelivered messages for the same purpose created in ``[since, until]``.

        Candidate rows are locked before they are updated so that a concurrent
        dispatch for the same recipients waits for this transaction.
        """

        if not user_ids:
            return 0

        candidate_ids = [
            message_id
            for (message_id,) in self.session.query(MessageModel.id)
            .filter(MessageModel.notification_id == notification_id)
            .filter(MessageModel.notification_name == notification_name)
            .filter(MessageModel.context_type == context_type)
            .filter(MessageModel.context_id == context_id)
            .filter(MessageModel.user_id.in_(list(user_ids)))
            .filter(MessageModel.workflow_state.in_(CANCELLABLE_MESSAGE_STATES))
            .filter(
                MessageModel.created_at.between(
                    ensure_app_naive_datetime(since), ensure_app_naive_datetime(until)
                )
            )
            .with_for_update()
            .all()
        ]
        if not candidate_ids:
            return 0

        self.session.query(MessageModel).filter(MessageModel.id.in_(candidate_ids)).update(
            {
                MessageModel.workflow_state: MESSAGE_STATE_CANCELLED,
                MessageModel.updated_at: ensure_app_naive_datetime(until),
            },
            synchronize_session=False,
        )
        return len(candidate_ids)

    def count_recent_email_messages(
        self, user_ids: Sequence[int], *, since: datetime
    ) -> dict[int, int]:
        """Return how many email messages each user received since ``since``."""

        if not user_ids:
            return {}
        rows = (
            self.session.query(MessageModel.user_id, func.count(MessageModel.id))
            .filter(MessageModel.user_id.in_(list(user_ids)))
            .filter(MessageModel.to_email.is_(True))
            .filter(MessageModel.created_at > ensure_app_naive_datetime(since))
            .group_by(MessageModel.user_id)
            .all()
        )
        return {user_id: count for user_id, count in rows}

    def mark_dispatched(self, message_ids: Iterable[int], *, at: datetime) -> int:
        ids = [message_id for message_id in message_ids if message_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(MessageModel)
            .filter(MessageModel.id.in_(ids))
            .filter(MessageModel.workflow_state == MESSAGE_STATE_STAGED)
            .update(
                {
                    MessageModel.workflow_state: MESSAGE_STATE_DISPATCHED,
                    MessageModel.sent_at: ensure_app_naive_datetime(at),
                    MessageModel.updated_at: ensure_app_naive_datetime(at),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    @staticmethod
    def _apply_entity_to_model(model: MessageModel, message: Message) -> None:
        model.notification_id = message.notification_id
        model.notification_name = message.notification_name
        model.user_id = message.user_id
        model.communication_channel_id = message.communication_channel_id
        model.to = message.to
        model.path_type = message.path_type
        model.subject = message.subject
        model.body = message.body
        model.url = message.url
        model.context_type = message.context_type
        model.context_id = message.context_id
        model.asset_context_type = message.asset_context_type
        model.asset_context_id = message.asset_context_id
        model.root_account_id = message.root_account_id
        model.data = message.data or {}
        model.delay_for = message.delay_for
        model.frequency = message.frequency
        model.locale = message.locale
        model.to_email = message.to_email
        model.workflow_state = message.workflow_state
        model.dispatch_at = ensure_app_naive_datetime(message.dispatch_at)
        if message.created_at is not None:
            model.created_at = ensure_app_naive_datetime(message.created_at)
        model.updated_at = ensure_app_naive_datetime(message.updated_at)
        model.sent_at = ensure_app_naive_datetime(message.sent_at)

    @staticmethod
    def _to_entity(model: MessageModel) -> Message:
        return Message(
            id=model.id,
            notification_id=model.notification_id,
            notification_name=model.notification_name,
            user_id=model.user_id,
            subject=model.subject,
            to=model.to,
            path_type=model.path_type,
            communication_channel_id=model.communication_channel_id,
            context_type=model.context_type,
            context_id=model.context_id,
            asset_context_type=model.asset_context_type,
            asset_context_id=model.asset_context_id,
            root_account_id=model.root_account_id,
            data=model.data or {},
            delay_for=model.delay_for,
            frequency=model.frequency,
            locale=model.locale,
            body=model.body,
            url=model.url,
            to_email=model.to_email,
            workflow_state=model.workflow_state,
            dispatch_at=ensure_app_timezone(model.dispatch_at),
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
            sent_at=ensure_app_timezone(model.sent_at),
        )


__all__ = ["MessageRepository"]
