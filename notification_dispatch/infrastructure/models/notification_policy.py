"""SQLAlchemy models for notification policies and their overrides."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from notification_dispatch.infrastructure.database import Base
from notification_dispatch.utils import now_in_app_naive_datetime


class NotificationPolicyModel(Base):
    """Frequency chosen for a notification on a communication channel."""

    __tablename__ = "notification_policy"

    id = Column(Integer, primary_key=True, index=True)
    communication_channel_id = Column(
        Integer,
        ForeignKey("communication_channel.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    notification_id = Column(
        Integer, ForeignKey("notification.id", ondelete="CASCADE"), nullable=True
    )
    frequency = Column(String(20), nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    communication_channel = relationship(
        "CommunicationChannelModel", back_populates="notification_policies"
    )

    __table_args__ = (
        UniqueConstraint(
            "communication_channel_id",
            "notification_id",
            name="uq_notification_policy_channel_notification",
        ),
        # NULL notification ids are distinct for the constraint above, so the
        # fallback daily policy gets its own partial index.
        Index(
            "uq_notification_policy_channel_fallback_daily",
            "communication_channel_id",
            unique=True,
            sqlite_where=text("notification_id IS NULL AND frequency = 'daily'"),
            postgresql_where=text("notification_id IS NULL AND frequency = 'daily'"),
        ),
    )


class NotificationPolicyOverrideModel(Base):
    """Course or account scoped frequency override for a channel."""

    __tablename__ = "notification_policy_override"

    id = Column(Integer, primary_key=True, index=True)
    communication_channel_id = Column(
        Integer,
        ForeignKey("communication_channel.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    notification_id = Column(
        Integer, ForeignKey("notification.id", ondelete="CASCADE"), nullable=True
    )
    context_type = Column(String(30), nullable=False)
    context_id = Column(Integer, nullable=False)
    frequency = Column(String(20), nullable=True)
    workflow_state = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    communication_channel = relationship(
        "CommunicationChannelModel", back_populates="notification_policy_overrides"
    )

    __table_args__ = (
        Index(
            "ix_notification_policy_override_context",
            "context_type",
            "context_id",
        ),
    )


__all__ = ["NotificationPolicyModel", "NotificationPolicyOverrideModel"]
