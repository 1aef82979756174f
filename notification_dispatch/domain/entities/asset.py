"""Domain entities describing the subject of a notification."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Mapping

from .context import Context

if TYPE_CHECKING:
    from .notification import Notification
    from .user import User


@dataclass
class Asset:
    """Object a notification is about, e.g. an assignment or an announcement."""

    asset_type: str
    asset_id: int
    title: str
    url: str | None = None
    context: Context | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class RecipientFilterableAsset(Asset, ABC):
    """Asset whose applicability depends on the recipient.

    ``filter_by_recipient`` returns the variant of the asset that applies to
    ``user`` or ``None`` when the asset does not apply to them at all.
    """

    @abstractmethod
    def filter_by_recipient(self, notification: Notification, user: User) -> Asset | None:
        raise NotImplementedError


@dataclass
class PerRecipientAsset(RecipientFilterableAsset):
    """Asset with per-user variants, such as an assignment with due date overrides.

    ``variants`` maps user ids to attribute overrides; a ``None`` entry
    excludes that user. Users without an entry get the base asset.
    """

    variants: Mapping[int, Mapping[str, Any] | None] = field(default_factory=dict)

    def filter_by_recipient(self, notification: Notification, user: User) -> Asset | None:
        if user.id not in self.variants:
            return self._base()
        overrides = self.variants[user.id]
        if overrides is None:
            return None
        base = self._base()
        data = {**base.data, **dict(overrides.get("data") or {})}
        return replace(
            base,
            title=overrides.get("title", base.title),
            url=overrides.get("url", base.url),
            data=data,
        )

    def _base(self) -> Asset:
        return Asset(
            asset_type=self.asset_type,
            asset_id=self.asset_id,
            title=self.title,
            url=self.url,
            context=self.context,
            data=dict(self.data),
        )


__all__ = ["Asset", "RecipientFilterableAsset", "PerRecipientAsset"]
