"""Integration tests for the message dispatch API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from notification_dispatch.domain.entities import StreamItem
from notification_dispatch.infrastructure.database import get_db, get_replica_db
from notification_dispatch.infrastructure.models import AccountModel, CourseModel
from notification_dispatch.infrastructure.repositories import StreamItemRepository
from notification_dispatch.infrastructure.security import create_access_token
from notification_dispatch.interfaces.api import dependencies
from notification_dispatch.interfaces.api.routes import messages as messages_routes

from factories import build_channel


@pytest.fixture()
def client(session_factory, dispatcher, publisher, monkeypatch):
    """Return a test client whose dependencies use the test database and doubles."""

    from main import create_app

    def override_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr(messages_routes, "SessionLocal", session_factory)
    app = create_app()
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_replica_db] = override_db
    app.dependency_overrides[dependencies.get_message_dispatcher] = lambda: dispatcher
    app.dependency_overrides[dependencies.get_stream_publisher] = lambda: publisher
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def course(session):
    session.add(AccountModel(id=1, name="Root Account", root_account_id=1))
    session.add(
        CourseModel(id=10, name="Biology 101", account_id=1, root_account_id=1, locale="es")
    )
    session.commit()


def _payload(user_ids, **overrides):
    payload = {
        "asset": {
            "asset_type": "Assignment",
            "asset_id": 500,
            "title": "Lab report",
            "url": "https://lms.example.com/courses/10/assignments/500",
        },
        "to_list": user_ids,
        "data": {"course_id": 10, "root_account_id": 1},
    }
    payload.update(overrides)
    return payload


def test_create_messages_endpoint(
    client: TestClient, course, make_notification, make_user, dispatcher, publisher
) -> None:
    notification = make_notification(is_dashboard=True)
    user = make_user(build_channel())

    response = client.post(f"/notifications/{notification.id}/messages", json=_payload([user.id]))

    assert response.status_code == 201
    body = response.json()
    assert sorted(item["path_type"] for item in body) == ["dashboard", "email"]
    email = next(item for item in body if item["path_type"] == "email")
    assert email["workflow_state"] == "staged"
    assert email["locale"] == "es"
    assert email["body"] == "Lab report changed in Biology 101"
    assert len(dispatcher.messages) == 1
    assert len(publisher.published) == 1


def test_create_messages_applies_recipient_variants(
    client: TestClient, course, make_notification, make_user
) -> None:
    notification = make_notification()
    included = make_user(build_channel("in@example.com"), name="Included")
    excluded = make_user(build_channel("out@example.com"), name="Excluded")
    payload = _payload([included.id, excluded.id])
    payload["asset"]["variants"] = {str(excluded.id): None}

    response = client.post(f"/notifications/{notification.id}/messages", json=payload)

    assert response.status_code == 201
    assert [item["user_id"] for item in response.json()] == [included.id]


def test_unknown_notification_returns_404(client: TestClient) -> None:
    response = client.post("/notifications/999/messages", json=_payload([1]))

    assert response.status_code == 404
    assert "999" in response.json()["detail"]


def test_empty_recipient_list_is_rejected(client: TestClient, make_notification) -> None:
    notification = make_notification()

    response = client.post(f"/notifications/{notification.id}/messages", json=_payload([]))

    assert response.status_code == 422


def _auth(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def test_stream_endpoint_lists_recent_items(client: TestClient, session, make_user) -> None:
    user = make_user()
    StreamItemRepository(session).create(
        StreamItem(
            id=None,
            user_id=user.id,
            notification_name="Assignment Changed",
            subject="Assignment changed",
            body="Lab report changed",
            url=None,
            asset_type="Assignment",
            asset_id=500,
        )
    )

    response = client.get("/notifications/stream", headers=_auth(user.id))

    assert response.status_code == 200
    [item] = response.json()
    assert item["notification_name"] == "Assignment Changed"
    assert item["asset_id"] == 500


def test_websocket_sends_recent_items_and_answers_pings(
    client: TestClient, session, make_user
) -> None:
    user = make_user()
    StreamItemRepository(session).create(
        StreamItem(
            id=None,
            user_id=user.id,
            notification_name="Assignment Changed",
            subject="Assignment changed",
            body=None,
            url=None,
            asset_type="Assignment",
            asset_id=500,
        )
    )

    token = create_access_token(user.id)
    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert init["data"][0]["subject"] == "Assignment changed"

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}


def test_stream_endpoint_rejects_missing_or_invalid_tokens(client: TestClient, make_user) -> None:
    make_user()

    missing = client.get("/notifications/stream")
    invalid = client.get("/notifications/stream", headers={"Authorization": "Bearer nope"})
    unknown_user = client.get("/notifications/stream", headers=_auth(999))

    assert missing.status_code in (401, 403)
    assert invalid.status_code == 401
    assert unknown_user.status_code == 401


@pytest.mark.parametrize("query", ["", "?user_id=1", "?token=nope"])
def test_websocket_requires_a_valid_token(client: TestClient, make_user, query: str) -> None:
    make_user()

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/notifications/ws{query}") as websocket:
            websocket.receive_json()
