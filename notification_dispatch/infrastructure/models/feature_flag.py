"""SQLAlchemy model for feature flags."""

from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint
from sqlalchemy.sql import expression

from notification_dispatch.infrastructure.database import Base


class FeatureFlagModel(Base):
    """Feature switch, either site-wide (no account) or for one account."""

    __tablename__ = "feature_flag"

    id = Column(Integer, primary_key=True, index=True)
    feature = Column(String(100), nullable=False)
    account_id = Column(Integer, nullable=True)
    enabled = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )

    __table_args__ = (
        UniqueConstraint("feature", "account_id", name="uq_feature_flag_account"),
    )


__all__ = ["FeatureFlagModel"]
