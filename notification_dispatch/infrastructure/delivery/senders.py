"""Per path type transports used by the message dispatcher."""

from __future__ import annotations

import logging
from typing import Protocol

from notification_dispatch.domain.entities import (
    PATH_TYPE_EMAIL,
    PATH_TYPE_PUSH,
    PATH_TYPE_SMS,
    Message,
)

from .email import SendGridEmailSender

logger = logging.getLogger(__name__)


class MessageSender(Protocol):
    def send(self, message: Message) -> bool: ...


class LoggingSender:
    """Transport for path types without a provider integration; records the hand-off."""

    def __init__(self, path_type: str) -> None:
        self.path_type = path_type

    def send(self, message: Message) -> bool:
        logger.info(
            "Delivered %s message %s to %s (%s)",
            self.path_type,
            message.id,
            message.to,
            message.notification_name,
        )
        return True


def default_senders() -> dict[str, MessageSender]:
    return {
        PATH_TYPE_EMAIL: SendGridEmailSender(),
        PATH_TYPE_SMS: LoggingSender(PATH_TYPE_SMS),
        PATH_TYPE_PUSH: LoggingSender(PATH_TYPE_PUSH),
    }


__all__ = ["MessageSender", "LoggingSender", "default_senders"]
