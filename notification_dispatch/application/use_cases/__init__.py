"""Aggregate application use cases."""

from .messages import NotificationMessageCreator, create_messages

__all__ = [
    "NotificationMessageCreator",
    "create_messages",
]
