"""SQLAlchemy models for messages and digest entries."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Interval,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from notification_dispatch.infrastructure.database import Base
from notification_dispatch.utils import now_in_app_naive_datetime


class MessageModel(Base):
    """Database representation of an immediate message."""

    __tablename__ = "message"

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(Integer, ForeignKey("notification.id"), nullable=True)
    notification_name = Column(String(255), nullable=False)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    communication_channel_id = Column(
        Integer, ForeignKey("communication_channel.id"), nullable=True
    )
    to = Column(String(255), nullable=True)
    path_type = Column(String(20), nullable=True)
    subject = Column(String(255), nullable=True)
    body = Column(Text, nullable=True)
    url = Column(String(500), nullable=True)
    context_type = Column(String(50), nullable=True)
    context_id = Column(Integer, nullable=True)
    asset_context_type = Column(String(30), nullable=True)
    asset_context_id = Column(Integer, nullable=True)
    root_account_id = Column(Integer, nullable=True)
    data = Column(JSON, nullable=False, default=dict)
    delay_for = Column(Interval, nullable=True)
    frequency = Column(String(20), nullable=True)
    locale = Column(String(16), nullable=True)
    to_email = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    workflow_state = Column(String(20), nullable=False, default="staged")
    dispatch_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime(), nullable=True)
    sent_at = Column(DateTime(), nullable=True)

    __table_args__ = (
        Index(
            "ix_message_duplicate_lookup",
            "notification_id",
            "context_type",
            "context_id",
            "user_id",
        ),
        Index("ix_message_user_created_at", "user_id", "created_at"),
    )


class DelayedMessageModel(Base):
    """Database representation of a digest entry awaiting a summary flush."""

    __tablename__ = "delayed_message"

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(Integer, ForeignKey("notification.id"), nullable=True)
    notification_policy_id = Column(
        Integer,
        ForeignKey("notification_policy.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    notification_policy_override_id = Column(
        Integer,
        ForeignKey("notification_policy_override.id", ondelete="CASCADE"),
        nullable=True,
    )
    communication_channel_id = Column(
        Integer, ForeignKey("communication_channel.id"), nullable=True, index=True
    )
    frequency = Column(String(20), nullable=False)
    context_type = Column(String(50), nullable=True)
    context_id = Column(Integer, nullable=True)
    root_account_id = Column(Integer, nullable=True)
    name_of_topic = Column(String(255), nullable=True)
    link = Column(String(500), nullable=True)
    summary = Column(Text, nullable=True)
    workflow_state = Column(String(20), nullable=False, default="pending")
    send_at = Column(DateTime(), nullable=True, index=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    notification_policy = relationship("NotificationPolicyModel", lazy="joined")
    notification_policy_override = relationship(
        "NotificationPolicyOverrideModel", lazy="joined"
    )


class StreamItemModel(Base):
    """Database representation of a dashboard feed entry."""

    __tablename__ = "stream_item"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    notification_name = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=True)
    body = Column(Text, nullable=True)
    url = Column(String(500), nullable=True)
    asset_type = Column(String(50), nullable=True)
    asset_id = Column(Integer, nullable=True)
    context_type = Column(String(30), nullable=True)
    context_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["MessageModel", "DelayedMessageModel", "StreamItemModel"]
