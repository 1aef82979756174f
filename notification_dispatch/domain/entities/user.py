"""Domain entity representing a notification recipient."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .communication_channel import PATH_TYPE_EMAIL, CommunicationChannel
from .notification_policy import NotificationPolicy

USER_STATE_REGISTERED = "registered"
USER_STATE_PRE_REGISTERED = "pre_registered"
USER_STATE_CREATION_PENDING = "creation_pending"


@dataclass
class User:
    """Recipient together with the channels and policies loaded for the run."""

    id: int
    name: str
    workflow_state: str = USER_STATE_REGISTERED
    shard: str | None = None
    locale: str | None = None
    max_messages_per_day: int = 50
    default_notifications_disabled: bool = False
    communication_channels: list[CommunicationChannel] = field(default_factory=list)
    created_at: datetime | None = None

    @property
    def is_registered(self) -> bool:
        return self.workflow_state == USER_STATE_REGISTERED

    @property
    def is_pre_registered(self) -> bool:
        return self.workflow_state == USER_STATE_PRE_REGISTERED

    @property
    def email_channel(self) -> CommunicationChannel | None:
        """Return the designated email channel: the first non-retired one by position."""

        candidates = [
            channel
            for channel in self.communication_channels
            if channel.path_type == PATH_TYPE_EMAIL and not channel.is_retired
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda channel: channel.position)

    @property
    def notification_policies(self) -> list[NotificationPolicy]:
        return [
            policy
            for channel in self.communication_channels
            for policy in channel.notification_policies
        ]

    def has_policy_for(self, notification_id: int | None) -> bool:
        return any(
            policy.notification_id == notification_id
            for policy in self.notification_policies
        )

    def is_default_email(self, channel: CommunicationChannel) -> bool:
        email_channel = self.email_channel
        if email_channel is None:
            return False
        if email_channel.id is not None:
            return email_channel.id == channel.id
        return email_channel is channel


__all__ = [
    "User",
    "USER_STATE_REGISTERED",
    "USER_STATE_PRE_REGISTERED",
    "USER_STATE_CREATION_PENDING",
]
