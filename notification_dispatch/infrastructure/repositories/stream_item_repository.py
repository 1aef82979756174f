"""Persistence helpers for dashboard stream items."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import StreamItem
from notification_dispatch.infrastructure.models import StreamItemModel
from notification_dispatch.utils import ensure_app_naive_datetime, ensure_app_timezone


class StreamItemRepository:
    """Provide CRUD operations for :class:`StreamItem` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, stream_item: StreamItem) -> StreamItem:
        model = StreamItemModel(
            user_id=stream_item.user_id,
            notification_name=stream_item.notification_name,
            subject=stream_item.subject,
            body=stream_item.body,
            url=stream_item.url,
            asset_type=stream_item.asset_type,
            asset_id=stream_item.asset_id,
            context_type=stream_item.context_type,
            context_id=stream_item.context_id,
        )
        if stream_item.created_at is not None:
            model.created_at = ensure_app_naive_datetime(stream_item.created_at)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_user(self, user_id: int, *, limit: int | None = 50) -> Sequence[StreamItem]:
        query = (
            self.session.query(StreamItemModel)
            .filter(StreamItemModel.user_id == user_id)
            .order_by(StreamItemModel.created_at.desc(), StreamItemModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    @staticmethod
    def _to_entity(model: StreamItemModel) -> StreamItem:
        return StreamItem(
            id=model.id,
            user_id=model.user_id,
            notification_name=model.notification_name,
            subject=model.subject,
            body=model.body,
            url=model.url,
            asset_type=model.asset_type,
            asset_id=model.asset_id,
            context_type=model.context_type,
            context_id=model.context_id,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["StreamItemRepository"]
