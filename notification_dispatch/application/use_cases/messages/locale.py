"""Locale selection for the messages of one user."""

from __future__ import annotations

from notification_dispatch.config import get_settings
from notification_dispatch.domain.entities import Context, User


def infer_locale(
    *,
    user: User | None,
    context: Context | None,
    default: str | None = None,
) -> str:
    """Return the locale used to render messages for ``user`` in ``context``.

    A course locale wins over the user's own preference, which wins over the
    account chain. The browser locale never applies to messages.
    """

    candidates: list[str | None] = []
    if context is not None and context.is_course():
        candidates.append(context.locale)
    if user is not None:
        candidates.append(user.locale)
    if context is not None:
        candidates.extend(account.locale for account in context.account_chain())

    for candidate in candidates:
        if candidate:
            return candidate
    return default or get_settings().default_locale


__all__ = ["infer_locale"]
