"""Persistence helpers for notification types."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import Notification
from notification_dispatch.infrastructure.models import NotificationModel


class NotificationNotFound(ValueError):
    """Raised when a notification type cannot be located."""


class NotificationRepository:
    """Provide lookups and creation for :class:`Notification` types."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            msg = f"Notification with id {notification_id} not found"
            raise NotificationNotFound(msg)
        return self._to_entity(model)

    def get_by_name(self, name: str) -> Notification | None:
        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.name == name)
            .first()
        )
        return self._to_entity(model) if model else None

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        if notification.id is not None:
            model.id = notification.id
        model.name = notification.name
        model.subject = notification.subject
        model.category = notification.category
        model.default_frequency = notification.category_default_frequency
        model.is_registration = notification.is_registration
        model.is_summarizable = notification.is_summarizable
        model.is_dashboard = notification.is_dashboard
        model.show_in_feed = notification.show_in_feed
        model.delay_for_seconds = notification.delay_for_seconds
        model.subject_template = notification.subject_template
        model.body_template = notification.body_template
        model.url_template = notification.url_template

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            name=model.name,
            subject=model.subject,
            category=model.category,
            category_default_frequency=model.default_frequency,
            is_registration=model.is_registration,
            is_summarizable=model.is_summarizable,
            is_dashboard=model.is_dashboard,
            show_in_feed=model.show_in_feed,
            delay_for_seconds=model.delay_for_seconds,
            subject_template=model.subject_template,
            body_template=model.body_template,
            url_template=model.url_template,
        )


__all__ = ["NotificationRepository", "NotificationNotFound"]
