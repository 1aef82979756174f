"""Timestamps in the application timezone and digest due times."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notification_dispatch.config import get_settings

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")
WEEKLY_DIGEST_INTERVAL = timedelta(days=7)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the zone named by ``APP_TIMEZONE``, or UTC when it is unknown."""

    name = get_settings().app_timezone.strip() or "UTC"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown APP_TIMEZONE %r; using UTC", name)
        return UTC


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app timezone; naive values are taken as local."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return ``value`` as a naive local timestamp for ``DATETIME`` columns.

    SQLite drops offsets, so rows store local wall time and the repositories
    reattach the zone when reading.
    """

    localized = ensure_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None


def now_in_app_naive_datetime() -> datetime:
    return now_in_app_timezone().replace(tzinfo=None)


def next_daily_digest_at(reference: datetime, *, hour: int) -> datetime:
    """Return the first ``hour`` o'clock, local time, strictly after ``reference``."""

    local = ensure_app_timezone(reference)
    due = datetime.combine(local.date(), time(hour), tzinfo=local.tzinfo)
    if due <= local:
        due += timedelta(days=1)
    return due


def next_weekly_digest_at(reference: datetime, *, hour: int) -> datetime:
    # Weekly digests go out at the daily hour, six days after the next daily one.
    return next_daily_digest_at(reference, hour=hour) + WEEKLY_DIGEST_INTERVAL - timedelta(days=1)
