"""Domain entity representing a digest entry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .notification_policy import NotificationPolicy, NotificationPolicyOverride

DELAYED_MESSAGE_STATE_PENDING = "pending"


@dataclass
class DelayedMessage:
    """Summary of one event queued for a later daily or weekly digest.

    Exactly one of ``notification_policy`` and ``notification_policy_override``
    is set: the preference that made the entry digest-eligible.
    """

    id: int | None
    notification_id: int | None
    communication_channel_id: int | None
    frequency: str
    context_type: str | None
    context_id: int | None
    root_account_id: int | None
    name_of_topic: str | None
    link: str | None
    summary: str | None
    notification_policy: NotificationPolicy | None = None
    notification_policy_override: NotificationPolicyOverride | None = None
    workflow_state: str = DELAYED_MESSAGE_STATE_PENDING
    send_at: datetime | None = None
    created_at: datetime | None = None


__all__ = ["DelayedMessage", "DELAYED_MESSAGE_STATE_PENDING"]
