"""Feature flag lookups."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_dispatch.infrastructure.models import FeatureFlagModel

FEATURE_MUTE_NOTIFICATIONS_BY_COURSE = "mute_notifications_by_course"
FEATURE_GRANULAR_COURSE_PREFERENCES = "notification_granular_course_preferences"


class FeatureFlagRepository:
    """Answer whether a feature is enabled site-wide or for an account."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def is_enabled(self, feature: str, *, account_id: int | None = None) -> bool:
        query = self.session.query(FeatureFlagModel.enabled).filter(
            FeatureFlagModel.feature == feature
        )
        if account_id is None:
            query = query.filter(FeatureFlagModel.account_id.is_(None))
        else:
            query = query.filter(FeatureFlagModel.account_id == account_id)
        row = query.first()
        return bool(row and row[0])

    def set(self, feature: str, enabled: bool, *, account_id: int | None = None) -> None:
        query = self.session.query(FeatureFlagModel).filter(
            FeatureFlagModel.feature == feature
        )
        if account_id is None:
            query = query.filter(FeatureFlagModel.account_id.is_(None))
        else:
            query = query.filter(FeatureFlagModel.account_id == account_id)
        model = query.first()
        if model is None:
            model = FeatureFlagModel(feature=feature, account_id=account_id)
        model.enabled = enabled
        self.session.add(model)
        self.session.commit()


__all__ = [
    "FeatureFlagRepository",
    "FEATURE_MUTE_NOTIFICATIONS_BY_COURSE",
    "FEATURE_GRANULAR_COURSE_PREFERENCES",
]
