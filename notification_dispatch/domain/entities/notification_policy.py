"""Domain entities describing delivery frequency preferences."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

FREQUENCY_IMMEDIATELY = "immediately"
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_NEVER = "never"

FREQUENCIES = (
    FREQUENCY_IMMEDIATELY,
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    FREQUENCY_NEVER,
)
DIGEST_FREQUENCIES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY)

OVERRIDE_STATE_ACTIVE = "active"
OVERRIDE_STATE_DISABLED = "disabled"


@dataclass
class NotificationPolicy:
    """Frequency chosen for one notification on one communication channel.

    A policy without ``notification_id`` applies to no specific notification;
    the daily one is used as the fallback digest policy for throttled users.
    """

    id: int | None
    communication_channel_id: int | None
    notification_id: int | None
    frequency: str
    created_at: datetime | None = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None


@dataclass
class NotificationPolicyOverride:
    """Course or account scoped frequency that outranks a channel policy.

    Overrides without ``notification_id`` are context level switches: an
    active one enables delivery for the context when muting by course is on.
    """

    id: int | None
    communication_channel_id: int
    notification_id: int | None
    context_type: str
    context_id: int
    frequency: str | None = None
    workflow_state: str = OVERRIDE_STATE_ACTIVE

    @property
    def is_active(self) -> bool:
        return self.workflow_state == OVERRIDE_STATE_ACTIVE


__all__ = [
    "NotificationPolicy",
    "NotificationPolicyOverride",
    "FREQUENCY_IMMEDIATELY",
    "FREQUENCY_DAILY",
    "FREQUENCY_WEEKLY",
    "FREQUENCY_NEVER",
    "FREQUENCIES",
    "DIGEST_FREQUENCIES",
    "OVERRIDE_STATE_ACTIVE",
    "OVERRIDE_STATE_DISABLED",
]
