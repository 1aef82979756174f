"""Effective frequency resolution for a user's communication channels.

The chain for one (user, channel) pair, first hit wins:

1. a course override (granular course preferences only),
2. an account override (granular course preferences only),
3. a new in-memory policy with the notification default, for the designated
   email channel of a user without any policy for the notification,
4. the channel's existing policy for the notification.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Union

from notification_dispatch.domain.entities import (
    CONTEXT_TYPE_ACCOUNT,
    CONTEXT_TYPE_COURSE,
    DIGEST_FREQUENCIES,
    FREQUENCY_IMMEDIATELY,
    PATH_TYPE_EMAIL,
    PATH_TYPE_PUSH,
    PATH_TYPE_SMS,
    CommunicationChannel,
    Notification,
    NotificationPolicy,
    NotificationPolicyOverride,
    User,
)

logger = logging.getLogger(__name__)

PolicyLike = Union[NotificationPolicy, NotificationPolicyOverride]

_THROTTLED_PATH_TYPES = (PATH_TYPE_EMAIL, PATH_TYPE_SMS)


class PolicyResolver:
    """Resolve frequencies for one notification within one course/account."""

    def __init__(
        self,
        notification: Notification,
        *,
        course_id: int | None = None,
        root_account_id: int | None = None,
        granular_preferences_enabled: bool = False,
    ) -> None:
        self.notification = notification
        self.course_id = course_id
        self.root_account_id = root_account_id
        self.granular_preferences_enabled = granular_preferences_enabled

    def override_policy_for(
        self,
        channel: CommunicationChannel,
        context_id: int | None,
        context_type: str,
    ) -> NotificationPolicyOverride | None:
        return channel.override_for(self.notification.id, context_id, context_type)

    def context_override_for(
        self, channel: CommunicationChannel
    ) -> NotificationPolicyOverride | None:
        """Return the course override, else the account override, for ``channel``."""

        if not self.granular_preferences_enabled:
            return None
        override = self.override_policy_for(channel, self.course_id, CONTEXT_TYPE_COURSE)
        if override is None:
            override = self.override_policy_for(
                channel, self.root_account_id, CONTEXT_TYPE_ACCOUNT
            )
        return override

    def policy_bearing(self, channel: CommunicationChannel) -> PolicyLike | None:
        """Return the override or stored policy that governs ``channel``, if any."""

        override = self.context_override_for(channel)
        if override is not None:
            return override
        return channel.policy_for(self.notification.id)

    def should_use_default_policy(self, user: User, channel: CommunicationChannel) -> bool:
        # Any existing policy, even "never", means the user has seen their
        # preferences and left this notification unset on purpose.
        return user.is_default_email(channel) and not user.has_policy_for(self.notification.id)

    def resolve(self, user: User, channel: CommunicationChannel) -> PolicyLike | None:
        override = self.context_override_for(channel)
        if override is not None:
            return override

        if self.should_use_default_policy(user, channel):
            return NotificationPolicy(
                id=None,
                communication_channel_id=channel.id,
                notification_id=self.notification.id,
                frequency=self.notification.default_frequency(user),
            )

        return channel.policy_for(self.notification.id)

    def frequency_for(self, user: User, channel: CommunicationChannel) -> str:
        policy = self.resolve(user, channel)
        if policy is None or policy.frequency is None:
            return FREQUENCY_IMMEDIATELY
        return policy.frequency

    def delayed_policy_for(
        self,
        user: User,
        channel: CommunicationChannel,
        *,
        throttled: bool,
        context_enabled: bool,
    ) -> PolicyLike | None:
        """Return the policy that makes ``channel`` digest-eligible, or ``None``."""

        if not channel.is_active or throttled:
            return None
        if channel.path_type != PATH_TYPE_EMAIL or not context_enabled:
            return None

        policy = self.resolve(user, channel)
        if policy is None or policy.frequency not in DIGEST_FREQUENCIES:
            return None
        logger.debug(
            "User %s channel %s digests %s at %s",
            user.id,
            channel.id,
            self.notification.name,
            policy.frequency,
        )
        return policy

    def immediate_channels_for(self, user: User) -> list[CommunicationChannel]:
        """Return the channels of ``user`` that should be notified right away.

        Without a policy on any non-push channel, a notification that defaults
        to immediate goes to the designated email channel and to the push
        channels that asked for it.
        """

        if not user.is_registered:
            return []

        bearing: list[tuple[CommunicationChannel, PolicyLike]] = []
        for channel in user.communication_channels:
            if not channel.is_active:
                continue
            policy = self.policy_bearing(channel)
            if policy is not None:
                bearing.append((channel, policy))

        immediate = [
            channel for channel, policy in bearing if policy.frequency == FREQUENCY_IMMEDIATELY
        ]

        has_policy = any(channel.path_type != PATH_TYPE_PUSH for channel, _ in bearing)
        if not has_policy and self.notification.default_frequency(user) == FREQUENCY_IMMEDIATELY:
            fallback = [user.email_channel] if user.email_channel is not None else []
            fallback.extend(channel for channel in immediate if channel.path_type == PATH_TYPE_PUSH)
            return fallback
        return immediate


def filter_immediate_channels(
    channels: Iterable[CommunicationChannel],
    *,
    notification: Notification,
    throttled: bool,
    reject_unconfirmed: bool = True,
) -> list[CommunicationChannel]:
    """Drop channels that must not receive an immediate message.

    Push channels are exempt from throttling; bouncing channels never receive
    anything.
    """

    selected = []
    for channel in channels:
        if reject_unconfirmed and channel.is_unconfirmed:
            continue
        if notification.is_summarizable and throttled and channel.path_type in _THROTTLED_PATH_TYPES:
            continue
        if channel.is_bouncing:
            continue
        selected.append(channel)
    return selected


__all__ = ["PolicyLike", "PolicyResolver", "filter_immediate_channels"]
