"""Lookups that turn courses and accounts into :class:`Context` entities."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import (
    CONTEXT_TYPE_ACCOUNT,
    CONTEXT_TYPE_COURSE,
    Context,
)
from notification_dispatch.infrastructure.models import AccountModel, CourseModel

# Guards against cycles in malformed account hierarchies.
_MAX_ACCOUNT_DEPTH = 20


class ContextRepository:
    """Build course and account contexts including their account chain."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_course(self, course_id: int) -> Context | None:
        model = self.session.get(CourseModel, course_id)
        if model is None:
            return None
        return Context(
            context_type=CONTEXT_TYPE_COURSE,
            context_id=model.id,
            name=model.name,
            locale=model.locale,
            root_account_id=model.root_account_id,
            parent=self._account_to_context(model.account),
        )

    def get_account(self, account_id: int) -> Context | None:
        model = self.session.get(AccountModel, account_id)
        return self._account_to_context(model)

    def _account_to_context(
        self, model: AccountModel | None, depth: int = 0
    ) -> Context | None:
        if model is None or depth >= _MAX_ACCOUNT_DEPTH:
            return None
        return Context(
            context_type=CONTEXT_TYPE_ACCOUNT,
            context_id=model.id,
            name=model.name,
            locale=model.default_locale,
            root_account_id=model.root_account_id or model.id,
            parent=self._account_to_context(model.parent_account, depth + 1),
        )


__all__ = ["ContextRepository"]
