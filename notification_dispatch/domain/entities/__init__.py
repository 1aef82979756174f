"""Domain entities exposed by the application."""

from .asset import Asset, PerRecipientAsset, RecipientFilterableAsset
from .communication_channel import (
    BOUNCE_THRESHOLD,
    CHANNEL_STATE_ACTIVE,
    CHANNEL_STATE_RETIRED,
    CHANNEL_STATE_UNCONFIRMED,
    PATH_TYPE_EMAIL,
    PATH_TYPE_PUSH,
    PATH_TYPE_SMS,
    CommunicationChannel,
)
from .context import (
    CONTEXT_TYPE_ACCOUNT,
    CONTEXT_TYPE_COURSE,
    CONTEXT_TYPE_USER,
    Context,
)
from .delayed_message import DELAYED_MESSAGE_STATE_PENDING, DelayedMessage
from .message import (
    CANCELLABLE_MESSAGE_STATES,
    DASHBOARD_PATH,
    MESSAGE_STATE_BUILT,
    MESSAGE_STATE_CANCELLED,
    MESSAGE_STATE_DISPATCHED,
    MESSAGE_STATE_STAGED,
    SUMMARY_KIND,
    InvalidMessageTransition,
    Message,
)
from .notification import Notification
from .notification_policy import (
    DIGEST_FREQUENCIES,
    FREQUENCIES,
    FREQUENCY_DAILY,
    FREQUENCY_IMMEDIATELY,
    FREQUENCY_NEVER,
    FREQUENCY_WEEKLY,
    OVERRIDE_STATE_ACTIVE,
    OVERRIDE_STATE_DISABLED,
    NotificationPolicy,
    NotificationPolicyOverride,
)
from .stream_item import StreamItem
from .user import (
    USER_STATE_CREATION_PENDING,
    USER_STATE_PRE_REGISTERED,
    USER_STATE_REGISTERED,
    User,
)

__all__ = [
    "Asset",
    "PerRecipientAsset",
    "RecipientFilterableAsset",
    "CommunicationChannel",
    "BOUNCE_THRESHOLD",
    "CHANNEL_STATE_ACTIVE",
    "CHANNEL_STATE_RETIRED",
    "CHANNEL_STATE_UNCONFIRMED",
    "PATH_TYPE_EMAIL",
    "PATH_TYPE_PUSH",
    "PATH_TYPE_SMS",
    "Context",
    "CONTEXT_TYPE_ACCOUNT",
    "CONTEXT_TYPE_COURSE",
    "CONTEXT_TYPE_USER",
    "DelayedMessage",
    "DELAYED_MESSAGE_STATE_PENDING",
    "Message",
    "InvalidMessageTransition",
    "CANCELLABLE_MESSAGE_STATES",
    "DASHBOARD_PATH",
    "MESSAGE_STATE_BUILT",
    "MESSAGE_STATE_CANCELLED",
    "MESSAGE_STATE_DISPATCHED",
    "MESSAGE_STATE_STAGED",
    "SUMMARY_KIND",
    "Notification",
    "NotificationPolicy",
    "NotificationPolicyOverride",
    "DIGEST_FREQUENCIES",
    "FREQUENCIES",
    "FREQUENCY_DAILY",
    "FREQUENCY_IMMEDIATELY",
    "FREQUENCY_NEVER",
    "FREQUENCY_WEEKLY",
    "OVERRIDE_STATE_ACTIVE",
    "OVERRIDE_STATE_DISABLED",
    "StreamItem",
    "User",
    "USER_STATE_CREATION_PENDING",
    "USER_STATE_PRE_REGISTERED",
    "USER_STATE_REGISTERED",
]
