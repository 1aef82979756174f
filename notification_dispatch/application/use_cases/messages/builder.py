"""Assemble message payloads and digest entries for one notification run."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from notification_dispatch.domain.entities import (
    DASHBOARD_PATH,
    FREQUENCY_IMMEDIATELY,
    FREQUENCY_WEEKLY,
    PATH_TYPE_EMAIL,
    PATH_TYPE_SMS,
    SUMMARY_KIND,
    Asset,
    CommunicationChannel,
    DelayedMessage,
    Message,
    Notification,
    NotificationPolicyOverride,
    User,
)
from notification_dispatch.infrastructure.rendering import MessageRenderer
from notification_dispatch.utils import next_daily_digest_at, next_weekly_digest_at

from .policies import PolicyLike

# Path types counted against the daily message cap.
_COUNTED_PATH_TYPES = (PATH_TYPE_EMAIL, PATH_TYPE_SMS)


class MessageBuilder:
    """Build unsaved messages and digest entries with an explicit locale."""

    def __init__(
        self,
        notification: Notification,
        *,
        renderer: MessageRenderer,
        now: datetime,
        data: Mapping[str, Any] | None = None,
        root_account_id: int | None = None,
        digest_hour: int = 18,
    ) -> None:
        self.notification = notification
        self.renderer = renderer
        self.now = now
        self.data = dict(data or {})
        self.root_account_id = root_account_id
        self.digest_hour = digest_hour

    def _message_for(self, user: User, asset: Asset, locale: str) -> Message:
        context = asset.context
        root_account_id = self.root_account_id
        if root_account_id is None and context is not None:
            root_account_id = context.root_account_id
        return Message(
            id=None,
            notification_id=self.notification.id,
            notification_name=self.notification.name,
            user_id=user.id,
            subject=self.notification.subject,
            context_type=asset.asset_type,
            context_id=asset.asset_id,
            asset_context_type=context.context_type if context else None,
            asset_context_id=context.context_id if context else None,
            root_account_id=root_account_id,
            data=dict(self.data),
            delay_for=self.notification.delay_for,
            locale=locale,
        )

    def _render(
        self, message: Message, *, kind: str, user: User, asset: Asset, locale: str
    ) -> None:
        content = self.renderer.render(
            message,
            kind=kind,
            locale=locale,
            notification=self.notification,
            user=user,
            asset=asset,
        )
        message.subject = content.subject
        message.body = content.body
        message.url = content.url

    def build_immediate(
        self,
        user: User,
        channels: Sequence[CommunicationChannel],
        *,
        asset: Asset,
        locale: str,
        frequency_for: Callable[[CommunicationChannel], str] | None = None,
    ) -> list[Message]:
        """Return one unsaved message per channel.

        ``frequency_for`` tags each message with the frequency of the policy
        governing its channel; without it messages are tagged ``immediately``.
        """

        messages = []
        for channel in channels:
            message = self._message_for(user, asset, locale)
            message.to = channel.path
            message.path_type = channel.path_type
            message.communication_channel_id = channel.id
            message.frequency = (
                frequency_for(channel) if frequency_for is not None else FREQUENCY_IMMEDIATELY
            )
            message.to_email = channel.path_type in _COUNTED_PATH_TYPES
            self._render(message, kind=channel.path_type, user=user, asset=asset, locale=locale)
            messages.append(message)
        return messages

    def build_dashboard(self, user: User, *, asset: Asset, locale: str) -> Message:
        message = self._message_for(user, asset, locale)
        message.to = DASHBOARD_PATH
        message.path_type = DASHBOARD_PATH
        self._render(message, kind=DASHBOARD_PATH, user=user, asset=asset, locale=locale)
        return message

    def build_summary(
        self,
        user: User,
        policy: PolicyLike,
        channel: CommunicationChannel,
        *,
        asset: Asset,
        locale: str,
    ) -> DelayedMessage:
        """Return an unsaved digest entry governed by ``policy``."""

        message = self._message_for(user, asset, locale)
        self._render(message, kind=SUMMARY_KIND, user=user, asset=asset, locale=locale)

        if policy.frequency == FREQUENCY_WEEKLY:
            send_at = next_weekly_digest_at(self.now, hour=self.digest_hour)
        else:
            send_at = next_daily_digest_at(self.now, hour=self.digest_hour)

        delayed = DelayedMessage(
            id=None,
            notification_id=self.notification.id,
            communication_channel_id=channel.id,
            frequency=policy.frequency,
            context_type=asset.asset_type,
            context_id=asset.asset_id,
            root_account_id=message.root_account_id,
            name_of_topic=message.subject,
            link=message.url,
            summary=message.body,
            send_at=send_at,
            created_at=self.now,
        )
        if isinstance(policy, NotificationPolicyOverride):
            delayed.notification_policy_override = policy
        else:
            delayed.notification_policy = policy
        return delayed


__all__ = ["MessageBuilder"]
