"""Shared fixtures for the notification dispatch test-suite."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from notification_dispatch.domain.entities import (
    CONTEXT_TYPE_ACCOUNT,
    CONTEXT_TYPE_COURSE,
    Asset,
    CommunicationChannel,
    Context,
    Notification,
    User,
)
from notification_dispatch.infrastructure.database import Base, initialize_database
from notification_dispatch.infrastructure.repositories import (
    NotificationRepository,
    UserRepository,
)


class RecordingDispatcher:
    """Dispatcher double that records every batch handed to it."""

    def __init__(self) -> None:
        self.batches: list[list] = []

    def batch_dispatch(self, messages) -> None:
        self.batches.append(list(messages))

    @property
    def messages(self) -> list:
        return [message for batch in self.batches for message in batch]


class RecordingPublisher:
    """Stream publisher double that records published stream items."""

    def __init__(self) -> None:
        self.published: list = []

    def publish(self, stream_item) -> None:
        self.published.append(stream_item)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def now() -> datetime:
    return datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def account_context() -> Context:
    return Context(
        context_type=CONTEXT_TYPE_ACCOUNT,
        context_id=1,
        name="Root Account",
        locale=None,
        root_account_id=1,
    )


@pytest.fixture()
def course_context(account_context) -> Context:
    return Context(
        context_type=CONTEXT_TYPE_COURSE,
        context_id=10,
        name="Biology 101",
        root_account_id=1,
        parent=account_context,
    )


@pytest.fixture()
def asset(course_context) -> Asset:
    return Asset(
        asset_type="Assignment",
        asset_id=500,
        title="Lab report",
        url="https://lms.example.com/courses/10/assignments/500",
        context=course_context,
    )


@pytest.fixture()
def make_notification(session):
    def factory(**overrides) -> Notification:
        values = {
            "id": None,
            "name": "Assignment Changed",
            "subject": "Assignment changed",
            "category": "Due Date",
            "is_summarizable": True,
            "body_template": "{asset_title} changed in {context_name}",
        }
        values.update(overrides)
        return NotificationRepository(session).create(Notification(**values))

    return factory


@pytest.fixture()
def make_user(session):
    def factory(*channels: CommunicationChannel, **overrides) -> User:
        values = {
            "id": None,
            "name": "Student",
            "communication_channels": list(channels),
        }
        values.update(overrides)
        return UserRepository(session).create(User(**values))

    return factory
