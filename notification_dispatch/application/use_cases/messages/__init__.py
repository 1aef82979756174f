"""Use cases that turn a notification event into messages."""

from .builder import MessageBuilder
from .create_messages import NotificationMessageCreator, create_messages
from .dispatch import BatchDispatcher, DispatchCoordinator, StreamPublisher
from .eligibility import EligibilityFilter
from .fallback import FallbackDigestBuilder
from .locale import infer_locale
from .policies import PolicyLike, PolicyResolver, filter_immediate_channels
from .recipients import Recipient, RecipientResolver
from .throttle import ThrottleGuard

__all__ = [
    "BatchDispatcher",
    "DispatchCoordinator",
    "EligibilityFilter",
    "FallbackDigestBuilder",
    "MessageBuilder",
    "NotificationMessageCreator",
    "PolicyLike",
    "PolicyResolver",
    "Recipient",
    "RecipientResolver",
    "StreamPublisher",
    "ThrottleGuard",
    "create_messages",
    "filter_immediate_channels",
    "infer_locale",
]
