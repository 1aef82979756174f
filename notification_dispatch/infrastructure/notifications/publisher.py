"""Push newly created dashboard stream items to websocket subscribers."""

from __future__ import annotations

from typing import Any

from notification_dispatch.domain.entities import StreamItem
from notification_dispatch.infrastructure.scheduling import schedule

from .manager import StreamConnectionManager, stream_manager


class StreamItemPublisher:
    """Serialize stream items and schedule their delivery to open websockets."""

    def __init__(self, manager: StreamConnectionManager) -> None:
        self._manager = manager

    def publish(self, stream_item: StreamItem) -> None:
        if not self._manager.is_connected(stream_item.user_id):
            return
        message = {"type": "stream_item", "data": serialize_stream_item(stream_item)}
        schedule(self._manager.send_to_user, stream_item.user_id, message)


def serialize_stream_item(stream_item: StreamItem) -> dict[str, Any]:
    """Return the websocket payload representation for ``stream_item``."""

    return {
        "id": stream_item.id,
        "user_id": stream_item.user_id,
        "notification_name": stream_item.notification_name,
        "subject": stream_item.subject,
        "body": stream_item.body,
        "url": stream_item.url,
        "asset_type": stream_item.asset_type,
        "asset_id": stream_item.asset_id,
        "context_type": stream_item.context_type,
        "context_id": stream_item.context_id,
        "created_at": stream_item.created_at.isoformat() if stream_item.created_at else None,
    }


stream_item_publisher = StreamItemPublisher(stream_manager)


__all__ = ["StreamItemPublisher", "serialize_stream_item", "stream_item_publisher"]
