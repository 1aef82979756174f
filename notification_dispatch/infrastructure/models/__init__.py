"""ORM models used by the application infrastructure."""

from .account import AccountModel, CourseModel
from .communication_channel import CommunicationChannelModel
from .feature_flag import FeatureFlagModel
from .message import DelayedMessageModel, MessageModel, StreamItemModel
from .notification import NotificationModel
from .notification_policy import NotificationPolicyModel, NotificationPolicyOverrideModel
from .user import UserModel

__all__ = [
    "AccountModel",
    "CourseModel",
    "CommunicationChannelModel",
    "FeatureFlagModel",
    "DelayedMessageModel",
    "MessageModel",
    "StreamItemModel",
    "NotificationModel",
    "NotificationPolicyModel",
    "NotificationPolicyOverrideModel",
    "UserModel",
]
