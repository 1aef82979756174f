"""Domain entity representing a delivery endpoint owned by a user."""

from __future__ import annotations

from dataclasses import dataclass, field

from .notification_policy import NotificationPolicy, NotificationPolicyOverride

PATH_TYPE_EMAIL = "email"
PATH_TYPE_SMS = "sms"
PATH_TYPE_PUSH = "push"

CHANNEL_STATE_ACTIVE = "active"
CHANNEL_STATE_UNCONFIRMED = "unconfirmed"
CHANNEL_STATE_RETIRED = "retired"

# Number of hard bounces after which a channel is considered bouncing.
BOUNCE_THRESHOLD = 4


@dataclass
class CommunicationChannel:
    """Email address, phone number or device registered by a user."""

    id: int | None
    user_id: int
    path: str
    path_type: str
    workflow_state: str = CHANNEL_STATE_ACTIVE
    bounce_count: int = 0
    position: int = 0
    notification_policies: list[NotificationPolicy] = field(default_factory=list)
    notification_policy_overrides: list[NotificationPolicyOverride] = field(
        default_factory=list
    )

    @property
    def is_active(self) -> bool:
        return self.workflow_state == CHANNEL_STATE_ACTIVE

    @property
    def is_unconfirmed(self) -> bool:
        return self.workflow_state == CHANNEL_STATE_UNCONFIRMED

    @property
    def is_retired(self) -> bool:
        return self.workflow_state == CHANNEL_STATE_RETIRED

    @property
    def is_bouncing(self) -> bool:
        return self.bounce_count >= BOUNCE_THRESHOLD

    def policy_for(self, notification_id: int | None) -> NotificationPolicy | None:
        """Return the loaded policy for ``notification_id`` without querying."""

        for policy in self.notification_policies:
            if policy.notification_id == notification_id:
                return policy
        return None

    def override_for(
        self,
        notification_id: int | None,
        context_id: int | None,
        context_type: str,
    ) -> NotificationPolicyOverride | None:
        if context_id is None:
            return None
        for override in self.notification_policy_overrides:
            if (
                override.notification_id == notification_id
                and override.context_id == context_id
                and override.context_type == context_type
            ):
                return override
        return None


__all__ = [
    "CommunicationChannel",
    "PATH_TYPE_EMAIL",
    "PATH_TYPE_SMS",
    "PATH_TYPE_PUSH",
    "CHANNEL_STATE_ACTIVE",
    "CHANNEL_STATE_UNCONFIRMED",
    "CHANNEL_STATE_RETIRED",
    "BOUNCE_THRESHOLD",
]
