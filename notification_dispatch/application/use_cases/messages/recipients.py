"""Normalize a heterogeneous recipient list into users and their channels."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from notification_dispatch.domain.entities import CommunicationChannel, User
from notification_dispatch.infrastructure.repositories import UserRepository


@dataclass
class Recipient:
    """A user together with the channels considered for this run."""

    user: User
    channels: list[CommunicationChannel] = field(default_factory=list)

    def add_channels(self, channels: Iterable[CommunicationChannel]) -> None:
        known = {_channel_key(channel) for channel in self.channels}
        for channel in channels:
            key = _channel_key(channel)
            if key in known:
                continue
            known.add(key)
            self.channels.append(channel)


def _channel_key(channel: CommunicationChannel) -> tuple[str, int]:
    # Unsaved channels are only equal to themselves.
    if channel.id is None:
        return ("object", id(channel))
    return ("id", channel.id)


def _is_user_id(item: Any) -> bool:
    return isinstance(item, int) and not isinstance(item, bool)


def _as_list(to_list: Any) -> list[Any]:
    if to_list is None:
        return []
    if isinstance(to_list, (str, bytes)) or not isinstance(to_list, Iterable):
        return [to_list]
    return list(to_list)


class RecipientResolver:
    """Turn user ids, users and channels into ``user id -> Recipient``.

    Users contribute their active channels. Channels passed explicitly are
    always kept, even when inactive, and are merged under their owner. Entries
    of any other type are ignored.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve(self, to_list: Any) -> dict[int, Recipient]:
        items = _as_list(to_list)

        passed_users: dict[int, User] = {}
        for item in items:
            if isinstance(item, User):
                passed_users.setdefault(item.id, item)

        ids_to_load: list[int] = []
        for item in items:
            if _is_user_id(item):
                ids_to_load.append(item)
            elif isinstance(item, CommunicationChannel):
                ids_to_load.append(item.user_id)
        missing = [user_id for user_id in dict.fromkeys(ids_to_load) if user_id not in passed_users]
        loaded = UserRepository(self.session).get_map_by_ids(missing)

        def owner_of(user_id: int) -> User | None:
            return passed_users.get(user_id) or loaded.get(user_id)

        recipients: dict[int, Recipient] = {}

        def recipient_for(user: User) -> Recipient:
            recipient = recipients.get(user.id)
            if recipient is None:
                recipient = Recipient(user=user)
                recipients[user.id] = recipient
            return recipient

        seen_users: set[int] = set()
        for item in items:
            if _is_user_id(item) or isinstance(item, User):
                user_id = item if _is_user_id(item) else item.id
                user = owner_of(user_id)
                if user is None or user_id in seen_users:
                    continue
                seen_users.add(user_id)
                recipient_for(user).add_channels(
                    channel for channel in user.communication_channels if channel.is_active
                )
            elif isinstance(item, CommunicationChannel):
                user = owner_of(item.user_id)
                if user is None:
                    continue
                recipient_for(user).add_channels([item])

        return recipients


__all__ = ["Recipient", "RecipientResolver"]
