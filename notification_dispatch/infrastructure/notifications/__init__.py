"""Realtime dashboard stream helpers for the infrastructure layer."""

from .manager import StreamConnectionManager, stream_manager
from .publisher import StreamItemPublisher, serialize_stream_item, stream_item_publisher

__all__ = [
    "StreamConnectionManager",
    "stream_manager",
    "StreamItemPublisher",
    "stream_item_publisher",
    "serialize_stream_item",
]
