"""Persistence layer for recipients and their delivery configuration."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session, selectinload

from notification_dispatch.config import get_settings
from notification_dispatch.domain.entities import (
    CommunicationChannel,
    NotificationPolicy,
    NotificationPolicyOverride,
    User,
)
from notification_dispatch.infrastructure.models import (
    CommunicationChannelModel,
    NotificationPolicyModel,
    NotificationPolicyOverrideModel,
    UserModel,
)
from notification_dispatch.utils import ensure_app_timezone


class UserRepository:
    """Load users together with their channels, policies and overrides."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        return self.get_map_by_ids([user_id]).get(user_id)

    def get_map_by_ids(self, user_ids: Sequence[int]) -> dict[int, User]:
        if not user_ids:
            return {}

        unique_ids = {int(user_id) for user_id in user_ids}
        query = (
            self.session.query(UserModel)
            .options(
                selectinload(UserModel.communication_channels).selectinload(
                    CommunicationChannelModel.notification_policies
                ),
                selectinload(UserModel.communication_channels).selectinload(
                    CommunicationChannelModel.notification_policy_overrides
                ),
            )
            .filter(UserModel.id.in_(unique_ids))
            .order_by(UserModel.id)
        )
        return {model.id: self._to_entity(model) for model in query.all()}

    def create(self, user: User) -> User:
        model = UserModel()
        self._apply_entity_to_model(model, user)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(model: UserModel, user: User) -> None:
        if user.id is not None:
            model.id = user.id
        model.name = user.name
        model.workflow_state = user.workflow_state
        model.shard = user.shard
        model.locale = user.locale
        model.max_messages_per_day = user.max_messages_per_day
        model.default_notifications_disabled = user.default_notifications_disabled
        model.communication_channels = [
            CommunicationChannelRepository.build_model(channel)
            for channel in user.communication_channels
        ]

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        max_messages = model.max_messages_per_day
        if max_messages is None:
            max_messages = get_settings().default_max_messages_per_day
        return User(
            id=model.id,
            name=model.name,
            workflow_state=model.workflow_state,
            shard=model.shard,
            locale=model.locale,
            max_messages_per_day=max_messages,
            default_notifications_disabled=model.default_notifications_disabled,
            communication_channels=[
                CommunicationChannelRepository.to_entity(channel)
                for channel in model.communication_channels
            ],
            created_at=ensure_app_timezone(model.created_at),
        )


class CommunicationChannelRepository:
    """Conversion helpers and lookups for communication channels."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, channel_id: int) -> CommunicationChannel | None:
        model = self.session.get(CommunicationChannelModel, channel_id)
        return self.to_entity(model) if model else None

    @staticmethod
    def build_model(channel: CommunicationChannel) -> CommunicationChannelModel:
        model = CommunicationChannelModel(
            path=channel.path,
            path_type=channel.path_type,
            workflow_state=channel.workflow_state,
            bounce_count=channel.bounce_count,
            position=channel.position,
        )
        if channel.id is not None:
            model.id = channel.id
        model.notification_policies = [
            NotificationPolicyModel(
                notification_id=policy.notification_id,
                frequency=policy.frequency,
            )
            for policy in channel.notification_policies
        ]
        model.notification_policy_overrides = [
            NotificationPolicyOverrideModel(
                notification_id=override.notification_id,
                context_type=override.context_type,
                context_id=override.context_id,
                frequency=override.frequency,
                workflow_state=override.workflow_state,
            )
            for override in channel.notification_policy_overrides
        ]
        return model

    @staticmethod
    def to_entity(model: CommunicationChannelModel) -> CommunicationChannel:
        return CommunicationChannel(
            id=model.id,
            user_id=model.user_id,
            path=model.path,
            path_type=model.path_type,
            workflow_state=model.workflow_state,
            bounce_count=model.bounce_count or 0,
            position=model.position or 0,
            notification_policies=[
                NotificationPolicyRepository.to_entity(policy)
                for policy in model.notification_policies
            ],
            notification_policy_overrides=[
                NotificationPolicyRepository.override_to_entity(override)
                for override in model.notification_policy_overrides
            ],
        )


class NotificationPolicyRepository:
    """Provide lookups and creation for :class:`NotificationPolicy` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_for_channel(
        self,
        communication_channel_id: int,
        *,
        notification_id: int | None,
        frequency: str | None = None,
    ) -> NotificationPolicy | None:
        query = self.session.query(NotificationPolicyModel).filter(
            NotificationPolicyModel.communication_channel_id == communication_channel_id
        )
        if notification_id is None:
            query = query.filter(NotificationPolicyModel.notification_id.is_(None))
        else:
            query = query.filter(NotificationPolicyModel.notification_id == notification_id)
        if frequency is not None:
            query = query.filter(NotificationPolicyModel.frequency == frequency)
        model = query.order_by(NotificationPolicyModel.id).first()
        return self.to_entity(model) if model else None

    def add(self, policy: NotificationPolicy) -> NotificationPolicyModel:
        """Stage ``policy`` for insertion without committing."""

        model = NotificationPolicyModel(
            communication_channel_id=policy.communication_channel_id,
            notification_id=policy.notification_id,
            frequency=policy.frequency,
        )
        self.session.add(model)
        self.session.flush()
        policy.id = model.id
        policy.created_at = ensure_app_timezone(model.created_at)
        return model

    def create(self, policy: NotificationPolicy) -> NotificationPolicy:
        self.add(policy)
        self.session.commit()
        return policy

    def find_or_create(
        self, policy: NotificationPolicy, *, match_frequency: bool = False
    ) -> NotificationPolicy:
        """Return the stored policy for the channel and notification, else save ``policy``.

        Callers wrap this in :func:`unique_constraint_retry` so a row committed by a
        concurrent run is picked up on the second attempt.
        """

        existing = self.find_for_channel(
            policy.communication_channel_id,
            notification_id=policy.notification_id,
            frequency=policy.frequency if match_frequency else None,
        )
        if existing is not None:
            return existing
        return self.create(policy)

    @staticmethod
    def to_entity(model: NotificationPolicyModel) -> NotificationPolicy:
        return NotificationPolicy(
            id=model.id,
            communication_channel_id=model.communication_channel_id,
            notification_id=model.notification_id,
            frequency=model.frequency,
            created_at=ensure_app_timezone(model.created_at),
        )

    @staticmethod
    def override_to_entity(
        model: NotificationPolicyOverrideModel,
    ) -> NotificationPolicyOverride:
        return NotificationPolicyOverride(
            id=model.id,
            communication_channel_id=model.communication_channel_id,
            notification_id=model.notification_id,
            context_type=model.context_type,
            context_id=model.context_id,
            frequency=model.frequency,
            workflow_state=model.workflow_state,
        )


__all__ = [
    "UserRepository",
    "CommunicationChannelRepository",
    "NotificationPolicyRepository",
]
