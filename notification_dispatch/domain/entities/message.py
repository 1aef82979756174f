"""Domain entity representing one concrete message dispatch unit.

State machine::

    built → staged → dispatched
    built → staged → cancelled

Dashboard messages never leave ``built``; they are materialized as stream
items instead of being staged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

MESSAGE_STATE_BUILT = "built"
MESSAGE_STATE_STAGED = "staged"
MESSAGE_STATE_DISPATCHED = "dispatched"
MESSAGE_STATE_CANCELLED = "cancelled"

CANCELLABLE_MESSAGE_STATES = (MESSAGE_STATE_BUILT, MESSAGE_STATE_STAGED)

DASHBOARD_PATH = "dashboard"
SUMMARY_KIND = "summary"

_VALID_TRANSITIONS = {
    MESSAGE_STATE_BUILT: {MESSAGE_STATE_STAGED},
    MESSAGE_STATE_STAGED: {MESSAGE_STATE_DISPATCHED, MESSAGE_STATE_CANCELLED},
    MESSAGE_STATE_DISPATCHED: set(),
    MESSAGE_STATE_CANCELLED: set(),
}


class InvalidMessageTransition(ValueError):
    """Raised when a message is moved to a state its current state cannot reach."""


@dataclass
class Message:
    """Message addressed to one user through one channel (or the dashboard)."""

    id: int | None
    notification_id: int | None
    notification_name: str
    user_id: int
    subject: str | None
    to: str | None = None
    path_type: str | None = None
    communication_channel_id: int | None = None
    context_type: str | None = None
    context_id: int | None = None
    asset_context_type: str | None = None
    asset_context_id: int | None = None
    root_account_id: int | None = None
    data: dict[str, Any] = field(default_factory=dict)
    delay_for: timedelta | None = None
    frequency: str | None = None
    locale: str | None = None
    body: str | None = None
    url: str | None = None
    to_email: bool = False
    workflow_state: str = MESSAGE_STATE_BUILT
    dispatch_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    sent_at: datetime | None = None

    @property
    def is_dashboard(self) -> bool:
        return self.to == DASHBOARD_PATH

    def _transition(self, target: str, at: datetime) -> None:
        if target not in _VALID_TRANSITIONS.get(self.workflow_state, set()):
            raise InvalidMessageTransition(
                f"Cannot transition message from {self.workflow_state} to {target}"
            )
        self.workflow_state = target
        self.updated_at = at

    def stage_without_dispatch(self, at: datetime) -> None:
        """Mark the message as staged; the dispatcher delivers it later."""

        self._transition(MESSAGE_STATE_STAGED, at)
        if self.created_at is None:
            self.created_at = at
        if self.dispatch_at is None:
            self.dispatch_at = at + self.delay_for if self.delay_for else at

    def mark_dispatched(self, at: datetime) -> None:
        self._transition(MESSAGE_STATE_DISPATCHED, at)
        self.sent_at = at

    def cancel(self, at: datetime) -> None:
        self._transition(MESSAGE_STATE_CANCELLED, at)

    def infer_defaults(self, at: datetime) -> None:
        """Fill in timestamps and a subject for messages that skip staging."""

        if self.created_at is None:
            self.created_at = at
        if self.dispatch_at is None:
            self.dispatch_at = at
        if not self.subject and self.body:
            self.subject = self.body.splitlines()[0][:255]


__all__ = [
    "Message",
    "InvalidMessageTransition",
    "MESSAGE_STATE_BUILT",
    "MESSAGE_STATE_STAGED",
    "MESSAGE_STATE_DISPATCHED",
    "MESSAGE_STATE_CANCELLED",
    "CANCELLABLE_MESSAGE_STATES",
    "DASHBOARD_PATH",
    "SUMMARY_KIND",
]
