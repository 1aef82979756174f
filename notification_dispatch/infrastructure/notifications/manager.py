"""Websocket subscriptions to users' dashboard streams."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class StreamConnectionManager:
    """Keep the open dashboard websockets of each user.

    A user may follow their stream from several tabs; each websocket is a
    separate subscription and is dropped as soon as a send to it fails.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[int, list[WebSocket]] = {}

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        subscribers = self._subscriptions.setdefault(user_id, [])
        if websocket not in subscribers:
            subscribers.append(websocket)

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        subscribers = self._subscriptions.get(user_id, [])
        if websocket in subscribers:
            subscribers.remove(websocket)
        if not subscribers:
            self._subscriptions.pop(user_id, None)

    def subscriber_count(self, user_id: int) -> int:
        return len(self._subscriptions.get(user_id, ()))

    def is_connected(self, user_id: int) -> bool:
        return self.subscriber_count(user_id) > 0

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> int:
        """Send ``message`` to the subscriptions of ``user_id``; return how many got it."""

        delivered = 0
        for websocket in list(self._subscriptions.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.info("Dropping stream subscription for user %s: %s", user_id, exc)
                self.disconnect(user_id, websocket)
            else:
                delivered += 1
        return delivered


stream_manager = StreamConnectionManager()


__all__ = ["StreamConnectionManager", "stream_manager"]
