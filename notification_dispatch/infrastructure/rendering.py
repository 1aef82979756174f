"""Default render collaborator for messages.

Templates are ``str.format`` strings stored on the notification type. Unknown
placeholders are left untouched so a template never fails to render.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from notification_dispatch.domain.entities import (
    DASHBOARD_PATH,
    PATH_TYPE_PUSH,
    PATH_TYPE_SMS,
    SUMMARY_KIND,
    Asset,
    Message,
    Notification,
    User,
)

SMS_BODY_LIMIT = 140
SUMMARY_BODY_LIMIT = 500


@dataclass(frozen=True)
class RenderedContent:
    """Subject, body and link produced for one message."""

    subject: str | None
    body: str | None
    url: str | None


class MessageRenderer(Protocol):
    def render(
        self,
        message: Message,
        *,
        kind: str,
        locale: str,
        notification: Notification,
        user: User,
        asset: Asset,
    ) -> RenderedContent: ...


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def _format(template: str | None, values: dict[str, Any]) -> str | None:
    if template is None:
        return None
    try:
        return template.format_map(_KeepMissing(values))
    except (IndexError, ValueError, AttributeError):
        return template


def _truncate(value: str | None, limit: int) -> str | None:
    if value is None or len(value) <= limit:
        return value
    return value[: limit - 3].rstrip() + "..."


class TemplateMessageRenderer:
    """Render messages from the templates configured on each notification."""

    def render(
        self,
        message: Message,
        *,
        kind: str,
        locale: str,
        notification: Notification,
        user: User,
        asset: Asset,
    ) -> RenderedContent:
        values = self._template_values(message, notification=notification, user=user, asset=asset)
        values["locale"] = locale

        subject = _format(notification.subject_template, values) or message.subject or notification.subject
        url = _format(notification.url_template, values) or asset.url
        body = _format(notification.body_template, values) or asset.title

        if kind == PATH_TYPE_SMS:
            body = _truncate(f"{subject}: {url}" if url else subject, SMS_BODY_LIMIT)
        elif kind == PATH_TYPE_PUSH:
            body = subject
        elif kind == SUMMARY_KIND:
            body = _truncate(body, SUMMARY_BODY_LIMIT)
        elif kind == DASHBOARD_PATH:
            body = body or subject

        return RenderedContent(subject=subject, body=body, url=url)

    @staticmethod
    def _template_values(
        message: Message,
        *,
        notification: Notification,
        user: User,
        asset: Asset,
    ) -> dict[str, Any]:
        values: dict[str, Any] = {
            key: value for key, value in (message.data or {}).items() if isinstance(key, str)
        }
        values.update({key: value for key, value in asset.data.items() if isinstance(key, str)})
        values.update(
            {
                "notification_name": notification.name,
                "user_name": user.name,
                "asset_title": asset.title,
                "asset_url": asset.url or "",
                "asset_type": asset.asset_type,
                "asset_id": asset.asset_id,
                "context_name": asset.context.name if asset.context else "",
            }
        )
        return values


default_renderer = TemplateMessageRenderer()


__all__ = [
    "MessageRenderer",
    "RenderedContent",
    "TemplateMessageRenderer",
    "default_renderer",
]
