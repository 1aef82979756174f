"""Per-user gates applied before any message is built."""

from __future__ import annotations

from notification_dispatch.domain.entities import (
    CONTEXT_TYPE_COURSE,
    Asset,
    Notification,
    RecipientFilterableAsset,
    User,
)


class EligibilityFilter:
    """Decide whether, and with which asset variant, a user takes part in a run."""

    def __init__(
        self,
        notification: Notification,
        *,
        course_id: int | None = None,
        mute_by_course_enabled: bool = False,
    ) -> None:
        self.notification = notification
        self.course_id = course_id
        self.mute_by_course_enabled = mute_by_course_enabled

    def asset_applied_to(self, asset: Asset, user: User) -> Asset | None:
        """Return the asset as it applies to ``user``; ``None`` skips the user."""

        if isinstance(asset, RecipientFilterableAsset):
            return asset.filter_by_recipient(self.notification, user)
        return asset

    def notifications_enabled_for_context(self, user: User) -> bool:
        """Return whether summarizable notifications may reach ``user`` in the course.

        With muting by course enabled, a user has to opt in to a course through
        an active context-level override on one of their channels.
        """

        if not self.notification.is_summarizable:
            return True
        if not self.mute_by_course_enabled or self.course_id is None:
            return True
        return any(
            override.is_active
            for channel in user.communication_channels
            for override in channel.notification_policy_overrides
            if override.notification_id is None
            and override.context_type == CONTEXT_TYPE_COURSE
            and override.context_id == self.course_id
        )

    def receives_feed_and_immediate(self, user: User) -> bool:
        return not user.is_pre_registered

    def wants_dashboard_message(self) -> bool:
        return self.notification.is_dashboard and self.notification.show_in_feed


__all__ = ["EligibilityFilter"]
