"""Persistence helpers for digest entries."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import DelayedMessage
from notification_dispatch.infrastructure.database import unique_constraint_retry
from notification_dispatch.infrastructure.models import DelayedMessageModel
from notification_dispatch.utils import ensure_app_naive_datetime, ensure_app_timezone

from .user_repository import NotificationPolicyRepository


class DelayedMessageRepository:
    """Provide persistence operations for :class:`DelayedMessage` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, delayed_message: DelayedMessage) -> DelayedMessage:
        """Persist ``delayed_message``, saving a materialized default policy first."""

        policy = delayed_message.notification_policy
        if policy is not None and not policy.is_persisted:
            repository = NotificationPolicyRepository(self.session)
            delayed_message.notification_policy = unique_constraint_retry(
                self.session, lambda: repository.find_or_create(policy)
            )

        model = DelayedMessageModel()
        self._apply_entity_to_model(model, delayed_message)
        self.session.add(model)
        self.session.commit()
        delayed_message.id = model.id
        return delayed_message

    def list_for_channel(self, communication_channel_id: int) -> Sequence[DelayedMessage]:
        query = (
            self.session.query(DelayedMessageModel)
            .filter(DelayedMessageModel.communication_channel_id == communication_channel_id)
            .order_by(DelayedMessageModel.id)
        )
        return [self._to_entity(model) for model in query.all()]

    @staticmethod
    def _apply_entity_to_model(
        model: DelayedMessageModel, delayed_message: DelayedMessage
    ) -> None:
        model.notification_id = delayed_message.notification_id
        policy = delayed_message.notification_policy
        override = delayed_message.notification_policy_override
        model.notification_policy_id = policy.id if policy is not None else None
        model.notification_policy_override_id = override.id if override is not None else None
        model.communication_channel_id = delayed_message.communication_channel_id
        model.frequency = delayed_message.frequency
        model.context_type = delayed_message.context_type
        model.context_id = delayed_message.context_id
        model.root_account_id = delayed_message.root_account_id
        model.name_of_topic = delayed_message.name_of_topic
        model.link = delayed_message.link
        model.summary = delayed_message.summary
        model.workflow_state = delayed_message.workflow_state
        model.send_at = ensure_app_naive_datetime(delayed_message.send_at)
        if delayed_message.created_at is not None:
            model.created_at = ensure_app_naive_datetime(delayed_message.created_at)

    @staticmethod
    def _to_entity(model: DelayedMessageModel) -> DelayedMessage:
        return DelayedMessage(
            id=model.id,
            notification_id=model.notification_id,
            communication_channel_id=model.communication_channel_id,
            frequency=model.frequency,
            context_type=model.context_type,
            context_id=model.context_id,
            root_account_id=model.root_account_id,
            name_of_topic=model.name_of_topic,
            link=model.link,
            summary=model.summary,
            workflow_state=model.workflow_state,
            notification_policy=(
                NotificationPolicyRepository.to_entity(model.notification_policy)
                if model.notification_policy is not None
                else None
            ),
            notification_policy_override=(
                NotificationPolicyRepository.override_to_entity(
                    model.notification_policy_override
                )
                if model.notification_policy_override is not None
                else None
            ),
            send_at=ensure_app_timezone(model.send_at),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["DelayedMessageRepository"]
