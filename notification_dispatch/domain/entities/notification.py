"""Domain entity representing a notification type."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .notification_policy import FREQUENCY_IMMEDIATELY, FREQUENCY_NEVER
from .user import User


@dataclass
class Notification:
    """Category of message (e.g. "Assignment Changed") and its delivery traits.

    ``subject_template``, ``body_template`` and ``url_template`` are
    ``str.format`` templates consumed by the message renderer.
    """

    id: int | None
    name: str
    subject: str
    category: str
    category_default_frequency: str = FREQUENCY_IMMEDIATELY
    is_registration: bool = False
    is_summarizable: bool = False
    is_dashboard: bool = False
    show_in_feed: bool = True
    delay_for_seconds: int | None = None
    subject_template: str | None = None
    body_template: str | None = None
    url_template: str | None = None

    @property
    def delay_for(self) -> timedelta | None:
        if not self.delay_for_seconds:
            return None
        return timedelta(seconds=self.delay_for_seconds)

    def default_frequency(self, user: User | None = None) -> str:
        """Return the frequency used when ``user`` never chose one."""

        if user is not None and user.default_notifications_disabled:
            return FREQUENCY_NEVER
        return self.category_default_frequency


__all__ = ["Notification"]
