"""Tests for frequency resolution and channel selection."""

from __future__ import annotations

import pytest

from notification_dispatch.application.use_cases.messages import (
    PolicyResolver,
    filter_immediate_channels,
)
from notification_dispatch.domain.entities import (
    CHANNEL_STATE_UNCONFIRMED,
    CONTEXT_TYPE_ACCOUNT,
    CONTEXT_TYPE_COURSE,
    FREQUENCY_DAILY,
    FREQUENCY_IMMEDIATELY,
    FREQUENCY_NEVER,
    FREQUENCY_WEEKLY,
    PATH_TYPE_PUSH,
    PATH_TYPE_SMS,
    USER_STATE_PRE_REGISTERED,
    Notification,
    NotificationPolicy,
    NotificationPolicyOverride,
    User,
)

from factories import build_channel, build_override, build_policy

NOTIFICATION_ID = 3
COURSE_ID = 10
ACCOUNT_ID = 1


def _notification(**overrides) -> Notification:
    values = {
        "id": NOTIFICATION_ID,
        "name": "Assignment Changed",
        "subject": "Assignment changed",
        "category": "Due Date",
        "is_summarizable": True,
    }
    values.update(overrides)
    return Notification(**values)


def _resolver(notification: Notification | None = None, *, granular: bool = True) -> PolicyResolver:
    return PolicyResolver(
        notification or _notification(),
        course_id=COURSE_ID,
        root_account_id=ACCOUNT_ID,
        granular_preferences_enabled=granular,
    )


def _user(*channels, **overrides) -> User:
    return User(id=1, name="Student", communication_channels=list(channels), **overrides)


def test_course_override_outranks_account_override_and_policy() -> None:
    channel = build_channel(
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_IMMEDIATELY)],
        overrides=[
            build_override(NOTIFICATION_ID, CONTEXT_TYPE_ACCOUNT, ACCOUNT_ID, FREQUENCY_WEEKLY),
            build_override(NOTIFICATION_ID, CONTEXT_TYPE_COURSE, COURSE_ID, FREQUENCY_DAILY),
        ],
    )
    user = _user(channel)

    resolved = _resolver().resolve(user, channel)

    assert isinstance(resolved, NotificationPolicyOverride)
    assert resolved.frequency == FREQUENCY_DAILY


def test_account_override_applies_without_course_override() -> None:
    channel = build_channel(
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_IMMEDIATELY)],
        overrides=[
            build_override(NOTIFICATION_ID, CONTEXT_TYPE_ACCOUNT, ACCOUNT_ID, FREQUENCY_WEEKLY),
            build_override(NOTIFICATION_ID, CONTEXT_TYPE_COURSE, 99, FREQUENCY_DAILY),
        ],
    )

    resolved = _resolver().resolve(_user(channel), channel)

    assert resolved.frequency == FREQUENCY_WEEKLY


def test_overrides_are_ignored_without_granular_preferences() -> None:
    channel = build_channel(
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_IMMEDIATELY)],
        overrides=[build_override(NOTIFICATION_ID, CONTEXT_TYPE_COURSE, COURSE_ID, FREQUENCY_DAILY)],
    )

    resolved = _resolver(granular=False).resolve(_user(channel), channel)

    assert isinstance(resolved, NotificationPolicy)
    assert resolved.frequency == FREQUENCY_IMMEDIATELY


def test_default_policy_is_materialized_on_designated_email_only() -> None:
    designated = build_channel("first@example.com", position=0)
    secondary = build_channel("second@example.com", position=1)
    user = _user(designated, secondary)
    resolver = _resolver(_notification(category_default_frequency=FREQUENCY_DAILY))

    materialized = resolver.resolve(user, designated)

    assert materialized is not None
    assert materialized.is_persisted is False
    assert materialized.notification_id == NOTIFICATION_ID
    assert materialized.frequency == FREQUENCY_DAILY
    assert resolver.resolve(user, secondary) is None


def test_existing_never_policy_prevents_materialization() -> None:
    designated = build_channel("first@example.com", position=0)
    other = build_channel(
        "second@example.com",
        position=1,
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_NEVER)],
    )
    user = _user(designated, other)

    assert _resolver().resolve(user, designated) is None
    assert _resolver().resolve(user, other).frequency == FREQUENCY_NEVER


def test_user_with_default_notifications_disabled_gets_never() -> None:
    designated = build_channel()
    user = _user(designated, default_notifications_disabled=True)

    assert _resolver().resolve(user, designated).frequency == FREQUENCY_NEVER


def test_resolution_is_deterministic() -> None:
    channel = build_channel(
        overrides=[build_override(NOTIFICATION_ID, CONTEXT_TYPE_COURSE, COURSE_ID, FREQUENCY_DAILY)]
    )
    user = _user(channel)
    resolver = _resolver()

    decisions = {
        (user.id, channel.path, resolver.resolve(user, channel).frequency) for _ in range(5)
    }

    assert decisions == {(1, "student@example.com", FREQUENCY_DAILY)}


@pytest.mark.parametrize(
    ("channel_kwargs", "throttled", "context_enabled", "expected"),
    [
        ({}, False, True, FREQUENCY_DAILY),
        ({"path_type": PATH_TYPE_SMS, "path": "+15550001"}, False, True, None),
        ({"workflow_state": CHANNEL_STATE_UNCONFIRMED}, False, True, None),
        ({}, True, True, None),
        ({}, False, False, None),
    ],
)
def test_delayed_policy_eligibility(channel_kwargs, throttled, context_enabled, expected) -> None:
    channel = build_channel(
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_DAILY)], **channel_kwargs
    )
    user = _user(channel)

    policy = _resolver().delayed_policy_for(
        user, channel, throttled=throttled, context_enabled=context_enabled
    )

    assert (policy.frequency if policy else None) == expected


def test_immediate_policy_is_not_digest_eligible() -> None:
    channel = build_channel(policies=[build_policy(NOTIFICATION_ID, FREQUENCY_IMMEDIATELY)])

    assert (
        _resolver().delayed_policy_for(
            _user(channel), channel, throttled=False, context_enabled=True
        )
        is None
    )


def test_immediate_channels_fall_back_to_email_and_push() -> None:
    """Without a non-push policy the designated email and immediate push channels are used."""

    email = build_channel()
    push = build_channel(
        "device-token",
        path_type=PATH_TYPE_PUSH,
        position=1,
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_IMMEDIATELY)],
    )
    quiet_push = build_channel(
        "other-device",
        path_type=PATH_TYPE_PUSH,
        position=2,
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_NEVER)],
    )
    user = _user(email, push, quiet_push)

    assert _resolver().immediate_channels_for(user) == [email, push]


def test_immediate_channels_use_policy_bearing_channels() -> None:
    email = build_channel(policies=[build_policy(NOTIFICATION_ID, FREQUENCY_DAILY)])
    sms = build_channel(
        "+15550001",
        path_type=PATH_TYPE_SMS,
        position=1,
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_IMMEDIATELY)],
    )
    user = _user(email, sms)

    assert _resolver().immediate_channels_for(user) == [sms]


def test_no_fallback_when_default_is_not_immediate() -> None:
    user = _user(build_channel())
    resolver = _resolver(_notification(category_default_frequency=FREQUENCY_WEEKLY))

    assert resolver.immediate_channels_for(user) == []


def test_unregistered_users_get_no_immediate_channels() -> None:
    user = _user(build_channel(), workflow_state=USER_STATE_PRE_REGISTERED)

    assert _resolver().immediate_channels_for(user) == []


def test_filter_drops_throttled_email_and_sms_but_keeps_push() -> None:
    email = build_channel()
    sms = build_channel("+15550001", path_type=PATH_TYPE_SMS)
    push = build_channel("device-token", path_type=PATH_TYPE_PUSH)

    selected = filter_immediate_channels(
        [email, sms, push], notification=_notification(), throttled=True
    )

    assert selected == [push]


def test_filter_keeps_email_for_throttled_non_summarizable_notification() -> None:
    email = build_channel()

    selected = filter_immediate_channels(
        [email], notification=_notification(is_summarizable=False), throttled=True
    )

    assert selected == [email]


def test_filter_drops_bouncing_and_unconfirmed_channels() -> None:
    bouncing = build_channel("bounce@example.com", bounce_count=10)
    unconfirmed = build_channel("new@example.com", workflow_state=CHANNEL_STATE_UNCONFIRMED)
    notification = _notification()

    assert (
        filter_immediate_channels(
            [bouncing, unconfirmed], notification=notification, throttled=False
        )
        == []
    )
    assert filter_immediate_channels(
        [unconfirmed], notification=notification, throttled=False, reject_unconfirmed=False
    ) == [unconfirmed]


def test_frequency_for_follows_the_governing_policy() -> None:
    designated = build_channel(
        overrides=[build_override(NOTIFICATION_ID, CONTEXT_TYPE_COURSE, COURSE_ID, FREQUENCY_WEEKLY)]
    )
    push = build_channel(
        "device-token",
        path_type=PATH_TYPE_PUSH,
        position=1,
        policies=[build_policy(NOTIFICATION_ID, FREQUENCY_IMMEDIATELY)],
    )
    unset = build_channel("other@example.com", position=2)
    user = _user(designated, push, unset)
    resolver = _resolver()

    assert resolver.frequency_for(user, designated) == FREQUENCY_WEEKLY
    assert resolver.frequency_for(user, push) == FREQUENCY_IMMEDIATELY
    assert resolver.frequency_for(user, unset) == FREQUENCY_IMMEDIATELY


def test_frequency_for_uses_the_materialized_default() -> None:
    designated = build_channel()
    user = _user(designated)
    resolver = _resolver(_notification(category_default_frequency=FREQUENCY_DAILY))

    assert resolver.frequency_for(user, designated) == FREQUENCY_DAILY
