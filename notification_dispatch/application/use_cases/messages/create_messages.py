"""Create, queue and dispatch the messages for one notification event."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from functools import partial
from typing import Any

from sqlalchemy.orm import Session

from notification_dispatch.config import get_settings
from notification_dispatch.domain.entities import (
    FREQUENCY_DAILY,
    Asset,
    DelayedMessage,
    Message,
    Notification,
)
from notification_dispatch.infrastructure.database import ShardRouter
from notification_dispatch.infrastructure.rendering import MessageRenderer, default_renderer
from notification_dispatch.infrastructure.repositories import (
    FEATURE_GRANULAR_COURSE_PREFERENCES,
    FEATURE_MUTE_NOTIFICATIONS_BY_COURSE,
    FeatureFlagRepository,
)
from notification_dispatch.utils import now_in_app_timezone

from .builder import MessageBuilder
from .dispatch import BatchDispatcher, DispatchCoordinator, StreamPublisher
from .eligibility import EligibilityFilter
from .fallback import FallbackDigestBuilder
from .locale import infer_locale
from .policies import PolicyResolver, filter_immediate_channels
from .recipients import RecipientResolver
from .throttle import ThrottleGuard

logger = logging.getLogger(__name__)


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class NotificationMessageCreator:
    """Decide how, when and through which channel each recipient hears about an asset.

    ``to_list`` may mix user ids, :class:`User` and :class:`CommunicationChannel`
    entities. ``data`` is copied onto every message; its ``course_id`` and
    ``root_account_id`` enable course muting and granular course preferences.
    """

    def __init__(
        self,
        session: Session,
        notification: Notification,
        asset: Asset,
        *,
        to_list: Any,
        data: Mapping[str, Any] | None = None,
        dispatcher: BatchDispatcher | None = None,
        stream_publisher: StreamPublisher | None = None,
        renderer: MessageRenderer | None = None,
        replica_session: Session | None = None,
        shard_router: ShardRouter | None = None,
        now: datetime | None = None,
    ) -> None:
        settings = get_settings()
        if dispatcher is None:
            from notification_dispatch.infrastructure.delivery import message_dispatcher

            dispatcher = message_dispatcher
        if stream_publisher is None:
            from notification_dispatch.infrastructure.notifications import stream_item_publisher

            stream_publisher = stream_item_publisher

        self.session = session
        self.notification = notification
        self.asset = asset
        self.message_data = dict(data or {})
        self.now = now or now_in_app_timezone()

        self.recipients = RecipientResolver(session).resolve(to_list)
        users = [recipient.user for recipient in self.recipients.values()]
        self.throttle = ThrottleGuard.load(
            replica_session or session,
            [user.id for user in users],
            now=self.now,
            window_hours=settings.throttle_window_hours,
        )

        course_id = _optional_int(self.message_data.get("course_id"))
        root_account_id = _optional_int(self.message_data.get("root_account_id"))
        mute_by_course = False
        granular_preferences = False
        if course_id is not None and root_account_id is not None:
            flags = FeatureFlagRepository(session)
            mute_by_course = flags.is_enabled(
                FEATURE_MUTE_NOTIFICATIONS_BY_COURSE, account_id=root_account_id
            )
            granular_preferences = flags.is_enabled(FEATURE_GRANULAR_COURSE_PREFERENCES)

        self.eligibility = EligibilityFilter(
            notification, course_id=course_id, mute_by_course_enabled=mute_by_course
        )
        self.policies = PolicyResolver(
            notification,
            course_id=course_id,
            root_account_id=root_account_id,
            granular_preferences_enabled=granular_preferences,
        )
        self.builder = MessageBuilder(
            notification,
            renderer=renderer or default_renderer,
            now=self.now,
            data=self.message_data,
            root_account_id=root_account_id,
            digest_hour=settings.daily_digest_hour,
        )
        self.fallback = FallbackDigestBuilder(self.builder)
        self.coordinator = DispatchCoordinator(
            session,
            dispatcher=dispatcher,
            stream_publisher=stream_publisher,
            shard_router=shard_router,
            duplicate_window_hours=settings.pending_duplicate_message_window_hours,
        )

    def needs_fallback_digest(
        self, *, throttled: bool, delayed_messages: Sequence[DelayedMessage]
    ) -> bool:
        """Return whether a throttled user needs the synthesized daily digest."""

        if not (self.notification.is_summarizable and throttled):
            return False
        return not any(
            delayed.frequency == FREQUENCY_DAILY for delayed in delayed_messages
        )

    def create_messages(self) -> list[Message]:
        """Return the immediate and dashboard messages created for this run.

        Digest entries are persisted as they are built and are not returned.
        """

        notification = self.notification
        immediate_messages: list[Message] = []
        dashboard_messages: list[Message] = []
        delayed_messages: list[DelayedMessage] = []

        for recipient in self.recipients.values():
            user = recipient.user
            asset = self.eligibility.asset_applied_to(self.asset, user)
            if asset is None:
                logger.debug("Asset %s does not apply to user %s", self.asset.asset_id, user.id)
                continue

            locale = infer_locale(user=user, context=asset.context)
            throttled = self.throttle.too_many_messages_for(user)
            context_enabled = self.eligibility.notifications_enabled_for_context(user)
            user_delayed: list[DelayedMessage] = []

            for channel in recipient.channels:
                if notification.is_registration:
                    if not context_enabled:
                        continue
                    channels = filter_immediate_channels(
                        [channel],
                        notification=notification,
                        throttled=throttled,
                        reject_unconfirmed=False,
                    )
                    immediate_messages.extend(
                        self.builder.build_immediate(user, channels, asset=asset, locale=locale)
                    )
                elif notification.is_summarizable:
                    policy = self.policies.delayed_policy_for(
                        user, channel, throttled=throttled, context_enabled=context_enabled
                    )
                    if policy is not None:
                        delayed = self.builder.build_summary(
                            user, policy, channel, asset=asset, locale=locale
                        )
                        user_delayed.append(self.coordinator.persist_digest(user, delayed))

            if notification.is_registration:
                continue

            immediate_channels = self.policies.immediate_channels_for(user)
            if context_enabled and self.needs_fallback_digest(
                throttled=throttled, delayed_messages=user_delayed
            ):
                fallback = self.fallback.build(
                    self.coordinator.shard_router.session_for(user.shard),
                    user,
                    immediate_channels,
                    asset=asset,
                    locale=locale,
                )
                if fallback is not None:
                    user_delayed.append(self.coordinator.persist_digest(user, fallback))
            delayed_messages.extend(user_delayed)

            if not self.eligibility.receives_feed_and_immediate(user):
                continue
            if context_enabled:
                channels = filter_immediate_channels(
                    immediate_channels, notification=notification, throttled=throttled
                )
                immediate_messages.extend(
                    self.builder.build_immediate(
                        user,
                        channels,
                        asset=asset,
                        locale=locale,
                        frequency_for=partial(self.policies.frequency_for, user),
                    )
                )
            if self.eligibility.wants_dashboard_message():
                dashboard_messages.append(
                    self.builder.build_dashboard(user, asset=asset, locale=locale)
                )

        self.coordinator.dispatch_dashboard_messages(dashboard_messages, now=self.now)
        self.coordinator.dispatch_immediate_messages(
            immediate_messages,
            notification=notification,
            asset=self.asset,
            user_ids=list(self.recipients),
            now=self.now,
        )
        logger.info(
            "Notification %s: %s immediate, %s dashboard, %s digest messages for %s users",
            notification.name,
            len(immediate_messages),
            len(dashboard_messages),
            len(delayed_messages),
            len(self.recipients),
        )
        return immediate_messages + dashboard_messages


def create_messages(
    session: Session,
    notification: Notification,
    asset: Asset,
    *,
    to_list: Any,
    data: Mapping[str, Any] | None = None,
    **collaborators: Any,
) -> list[Message]:
    """Create and dispatch the messages for ``notification`` about ``asset``."""

    creator = NotificationMessageCreator(
        session, notification, asset, to_list=to_list, data=data, **collaborators
    )
    try:
        return creator.create_messages()
    finally:
        creator.coordinator.shard_router.close()


__all__ = ["NotificationMessageCreator", "create_messages"]
