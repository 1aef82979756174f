"""Daily digest fallback for throttled users."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import (
    FREQUENCY_DAILY,
    PATH_TYPE_EMAIL,
    Asset,
    CommunicationChannel,
    DelayedMessage,
    NotificationPolicy,
    User,
)
from notification_dispatch.infrastructure.database import unique_constraint_retry
from notification_dispatch.infrastructure.repositories import NotificationPolicyRepository

from .builder import MessageBuilder

logger = logging.getLogger(__name__)


class FallbackDigestBuilder:
    """Queue a daily digest entry for users whose immediate email was throttled."""

    def __init__(self, builder: MessageBuilder) -> None:
        self.builder = builder

    @staticmethod
    def fallback_channel_for(
        user: User, immediate_channels: Sequence[CommunicationChannel]
    ) -> CommunicationChannel | None:
        for channel in immediate_channels:
            if channel.path_type == PATH_TYPE_EMAIL:
                return channel
        email_channel = user.email_channel
        if email_channel is not None and email_channel.is_active:
            return email_channel
        return None

    @staticmethod
    def find_or_create_fallback_policy(
        session: Session, channel: CommunicationChannel
    ) -> NotificationPolicy:
        """Return the channel's daily policy without a notification, creating it once.

        A concurrent writer creating the same row is resolved by retrying the
        lookup after the uniqueness conflict.
        """

        repository = NotificationPolicyRepository(session)
        policy = NotificationPolicy(
            id=None,
            communication_channel_id=channel.id,
            notification_id=None,
            frequency=FREQUENCY_DAILY,
        )
        return unique_constraint_retry(
            session, lambda: repository.find_or_create(policy, match_frequency=True)
        )

    def build(
        self,
        session: Session,
        user: User,
        immediate_channels: Sequence[CommunicationChannel],
        *,
        asset: Asset,
        locale: str,
    ) -> DelayedMessage | None:
        channel = self.fallback_channel_for(user, immediate_channels)
        if channel is None:
            logger.debug("No fallback email channel for throttled user %s", user.id)
            return None

        policy = self.find_or_create_fallback_policy(session, channel)
        logger.info("User %s is throttled; queueing daily digest on channel %s", user.id, channel.id)
        return self.builder.build_summary(user, policy, channel, asset=asset, locale=locale)


__all__ = ["FallbackDigestBuilder"]
