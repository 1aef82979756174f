"""SQLAlchemy model for the user table."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from notification_dispatch.infrastructure.database import Base


class UserModel(Base):
    """Database representation of a notification recipient."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    workflow_state = Column(String(30), nullable=False, default="registered")
    shard = Column(String(50), nullable=True)
    locale = Column(String(16), nullable=True)
    max_messages_per_day = Column(Integer, nullable=True)
    default_notifications_disabled = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    communication_channels = relationship(
        "CommunicationChannelModel",
        back_populates="user",
        order_by="CommunicationChannelModel.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


__all__ = ["UserModel"]
