"""Tests for the default template renderer."""

from __future__ import annotations

import pytest

from notification_dispatch.domain.entities import Message, Notification, User
from notification_dispatch.infrastructure.rendering import TemplateMessageRenderer


def _notification(**overrides) -> Notification:
    values = {
        "id": 3,
        "name": "Assignment Changed",
        "subject": "Assignment changed",
        "category": "Due Date",
        "subject_template": "{asset_title} was updated",
        "body_template": "{user_name}, {asset_title} in {context_name} changed ({missing})",
    }
    values.update(overrides)
    return Notification(**values)


def _message() -> Message:
    return Message(
        id=None,
        notification_id=3,
        notification_name="Assignment Changed",
        user_id=1,
        subject="Assignment changed",
        data={"course_id": 10},
    )


def _render(kind: str, asset, **notification_overrides):
    return TemplateMessageRenderer().render(
        _message(),
        kind=kind,
        locale="en",
        notification=_notification(**notification_overrides),
        user=User(id=1, name="Ada"),
        asset=asset,
    )


def test_email_body_keeps_unknown_placeholders(asset) -> None:
    content = _render("email", asset)

    assert content.subject == "Lab report was updated"
    assert content.body == "Ada, Lab report in Biology 101 changed ({missing})"
    assert content.url == asset.url


def test_push_body_is_the_subject(asset) -> None:
    assert _render("push", asset).body == "Lab report was updated"


def test_sms_body_is_short(asset) -> None:
    asset.title = "x" * 300

    body = _render("sms", asset).body

    assert len(body) <= 140
    assert body.endswith("...")


@pytest.mark.parametrize("kind", ["summary", "dashboard"])
def test_templates_fall_back_to_asset_title(kind, asset) -> None:
    content = _render(kind, asset, subject_template=None, body_template=None)

    assert content.subject == "Assignment changed"
    assert content.body == "Lab report"
