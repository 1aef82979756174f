"""Pydantic models describing message dispatch payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class AssetReference(BaseModel):
    """Object the notification is about."""

    asset_type: str = Field(..., min_length=1, description="Asset class, e.g. Assignment")
    asset_id: int
    title: str = Field(..., min_length=1)
    url: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    variants: dict[int, dict[str, Any] | None] | None = Field(
        default=None,
        description=(
            "Per-user attribute overrides; a null entry excludes the user from the notification"
        ),
    )


class MessageCreateRequest(BaseModel):
    """Payload used to create the messages for one notification event."""

    asset: AssetReference
    to_list: list[int] = Field(..., min_length=1, description="Recipient user identifiers")
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Copied onto each message; course_id and root_account_id scope preferences",
    )


class MessageRead(BaseModel):
    """Representation of an immediate or dashboard message created by a run."""

    id: int | None = None
    notification_id: int | None = None
    notification_name: str
    user_id: int
    to: str | None = None
    path_type: str | None = None
    subject: str | None = None
    body: str | None = None
    url: str | None = None
    locale: str | None = None
    workflow_state: str
    dispatch_at: datetime | None = None
    created_at: datetime | None = None


class StreamItemRead(BaseModel):
    """Dashboard stream entry."""

    id: int
    user_id: int
    notification_name: str
    subject: str | None = None
    body: str | None = None
    url: str | None = None
    asset_type: str | None = None
    asset_id: int | None = None
    context_type: str | None = None
    context_id: int | None = None
    created_at: datetime | None = None


__all__ = ["AssetReference", "MessageCreateRequest", "MessageRead", "StreamItemRead"]
