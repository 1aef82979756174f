"""SQLAlchemy model for user communication channels."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from notification_dispatch.infrastructure.database import Base
from notification_dispatch.utils import now_in_app_naive_datetime


class CommunicationChannelModel(Base):
    """Database representation of an email address, phone number or device."""

    __tablename__ = "communication_channel"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    path = Column(String(255), nullable=False)
    path_type = Column(String(20), nullable=False, default="email")
    workflow_state = Column(String(20), nullable=False, default="unconfirmed")
    bounce_count = Column(Integer, nullable=False, default=0)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    user = relationship("UserModel", back_populates="communication_channels")
    notification_policies = relationship(
        "NotificationPolicyModel",
        back_populates="communication_channel",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    notification_policy_overrides = relationship(
        "NotificationPolicyOverrideModel",
        back_populates="communication_channel",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


__all__ = ["CommunicationChannelModel"]
