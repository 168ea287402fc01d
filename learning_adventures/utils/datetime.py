# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for Learning Adventures.

All timestamps are stored in UTC (PostgreSQL TIMESTAMPTZ) and all Python
datetimes are timezone-aware. Calendar-day logic used by streaks, goals and
leaderboards is computed in UTC as well.

Usage:
    from learning_adventures.utils.datetime import utc_now

    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None. Naive values are assumed UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def start_of_day(dt: datetime) -> datetime:
    """Midnight of the UTC day containing ``dt``."""
    return ensure_utc(dt).replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    """Last microsecond of the UTC day containing ``dt``."""
    return ensure_utc(dt).replace(hour=23, minute=59, second=59, microsecond=999999)


def utc_today() -> date:
    """Current calendar date in UTC."""
    return utc_now().date()


def start_of_week(dt: datetime) -> datetime:
    """Monday 00:00 UTC of the week containing ``dt``."""
    day = start_of_day(dt)
    return day - timedelta(days=day.weekday())


def end_of_week(dt: datetime) -> datetime:
    """Sunday 23:59:59.999999 UTC of the week containing ``dt``."""
    return end_of_day(start_of_week(dt) + timedelta(days=6))


def start_of_month(dt: datetime) -> datetime:
    """First day of the month containing ``dt`` at 00:00 UTC."""
    return start_of_day(dt).replace(day=1)


def end_of_month(dt: datetime) -> datetime:
    """Last microsecond of the month containing ``dt``."""
    first = start_of_month(dt)
    if first.month == 12:
        next_month = first.replace(year=first.year + 1, month=1)
    else:
        next_month = first.replace(month=first.month + 1)
    return next_month - timedelta(microseconds=1)
