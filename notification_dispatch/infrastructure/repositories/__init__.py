"""Repository implementations for infrastructure layer."""

from .context_repository import ContextRepository
from .delayed_message_repository import DelayedMessageRepository
from .feature_flag_repository import (
    FEATURE_GRANULAR_COURSE_PREFERENCES,
    FEATURE_MUTE_NOTIFICATIONS_BY_COURSE,
    FeatureFlagRepository,
)
from .message_repository import MessageRepository
from .notification_repository import NotificationNotFound, NotificationRepository
from .stream_item_repository import StreamItemRepository
from .user_repository import (
    CommunicationChannelRepository,
    NotificationPolicyRepository,
    UserRepository,
)

__all__ = [
    "ContextRepository",
    "DelayedMessageRepository",
    "FeatureFlagRepository",
    "FEATURE_GRANULAR_COURSE_PREFERENCES",
    "FEATURE_MUTE_NOTIFICATIONS_BY_COURSE",
    "MessageRepository",
    "NotificationNotFound",
    "NotificationRepository",
    "StreamItemRepository",
    "CommunicationChannelRepository",
    "NotificationPolicyRepository",
    "UserRepository",
]
