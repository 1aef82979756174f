"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    get_app_timezone,
    next_daily_digest_at,
    next_weekly_digest_at,
    now_in_app_naive_datetime,
    now_in_app_timezone,
)

__all__ = [
    "ensure_app_naive_datetime",
    "ensure_app_timezone",
    "get_app_timezone",
    "next_daily_digest_at",
    "next_weekly_digest_at",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
]
