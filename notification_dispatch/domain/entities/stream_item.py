"""Domain entity representing a dashboard feed entry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .message import Message


@dataclass
class StreamItem:
    """Entry shown on a user's dashboard for a notification."""

    id: int | None
    user_id: int
    notification_name: str
    subject: str | None
    body: str | None
    url: str | None
    asset_type: str | None
    asset_id: int | None
    context_type: str | None = None
    context_id: int | None = None
    created_at: datetime | None = None

    @classmethod
    def from_message(cls, message: Message) -> "StreamItem":
        return cls(
            id=None,
            user_id=message.user_id,
            notification_name=message.notification_name,
            subject=message.subject,
            body=message.body,
            url=message.url,
            asset_type=message.context_type,
            asset_id=message.context_id,
            context_type=message.asset_context_type,
            context_id=message.asset_context_id,
            created_at=message.created_at,
        )


__all__ = ["StreamItem"]
