"""SQLAlchemy models for accounts and courses."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from notification_dispatch.infrastructure.database import Base
from notification_dispatch.utils import now_in_app_naive_datetime


class AccountModel(Base):
    """Database representation of an account (institution or sub-account)."""

    __tablename__ = "account"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    parent_account_id = Column(Integer, ForeignKey("account.id"), nullable=True)
    root_account_id = Column(Integer, nullable=True, index=True)
    default_locale = Column(String(16), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    parent_account = relationship("AccountModel", remote_side=[id], lazy="joined", join_depth=4)


class CourseModel(Base):
    """Database representation of a course."""

    __tablename__ = "course"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    account_id = Column(Integer, ForeignKey("account.id"), nullable=False, index=True)
    root_account_id = Column(Integer, nullable=False, index=True)
    locale = Column(String(16), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    account = relationship("AccountModel", lazy="joined")


__all__ = ["AccountModel", "CourseModel"]
