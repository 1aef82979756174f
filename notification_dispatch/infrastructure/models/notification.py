"""SQLAlchemy model for notification types."""

from sqlalchemy import Boolean, Column, Integer, String, Text
from sqlalchemy.sql import expression

from notification_dispatch.infrastructure.database import Base


class NotificationModel(Base):
    """Database representation of a notification type and its templates."""

    __tablename__ = "notification"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    subject = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    default_frequency = Column(String(20), nullable=False, default="immediately")
    is_registration = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    is_summarizable = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    is_dashboard = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    show_in_feed = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    delay_for_seconds = Column(Integer, nullable=True)
    subject_template = Column(String(255), nullable=True)
    body_template = Column(Text, nullable=True)
    url_template = Column(String(500), nullable=True)


__all__ = ["NotificationModel"]
