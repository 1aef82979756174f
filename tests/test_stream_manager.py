"""Tests for the dashboard stream websocket subscriptions."""

from __future__ import annotations

import anyio
from fastapi import WebSocketDisconnect

from notification_dispatch.infrastructure.notifications import StreamConnectionManager


class FakeWebSocket:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.accepted = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict) -> None:
        if self.fail:
            raise WebSocketDisconnect(code=1001)
        self.sent.append(message)


def test_messages_reach_every_subscription_and_closed_ones_are_dropped() -> None:
    manager = StreamConnectionManager()
    open_tab = FakeWebSocket()
    closed_tab = FakeWebSocket(fail=True)

    async def scenario() -> int:
        await manager.connect(7, open_tab)
        await manager.connect(7, closed_tab)
        return await manager.send_to_user(7, {"type": "stream_item"})

    delivered = anyio.run(scenario)

    assert delivered == 1
    assert open_tab.accepted and open_tab.sent == [{"type": "stream_item"}]
    assert manager.subscriber_count(7) == 1


def test_last_disconnect_forgets_the_user() -> None:
    manager = StreamConnectionManager()
    websocket = FakeWebSocket()

    anyio.run(manager.connect, 7, websocket)
    manager.disconnect(7, websocket)

    assert manager.is_connected(7) is False
    assert anyio.run(manager.send_to_user, 7, {"type": "stream_item"}) == 0
