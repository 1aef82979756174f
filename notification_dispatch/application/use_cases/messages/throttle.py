"""Per-run daily message cap checks."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from types import MappingProxyType

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import User
from notification_dispatch.infrastructure.repositories import MessageRepository

logger = logging.getLogger(__name__)


class ThrottleGuard:
    """Snapshot of recent email message counts for the users of one run.

    Counts are read once and never refreshed, so they can drift from the
    store when messages are later cancelled as duplicates.
    """

    def __init__(self, counts: Mapping[int, int] | None = None) -> None:
        self._counts = MappingProxyType(dict(counts or {}))

    @classmethod
    def load(
        cls,
        session: Session,
        user_ids: Sequence[int],
        *,
        now: datetime,
        window_hours: int,
    ) -> "ThrottleGuard":
        if not user_ids:
            return cls()
        since = now - timedelta(hours=window_hours)
        try:
            counts = MessageRepository(session).count_recent_email_messages(
                user_ids, since=since
            )
        except SQLAlchemyError:
            logger.exception("Failed to count recent messages for %s users", len(user_ids))
            raise
        return cls(counts)

    def count_for(self, user: User) -> int:
        return self._counts.get(user.id, 0)

    def too_many_messages_for(self, user: User) -> bool:
        return self.count_for(user) >= user.max_messages_per_day


__all__ = ["ThrottleGuard"]
