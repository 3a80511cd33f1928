# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Timezone-aware datetime helpers.

All timestamps handled by the service are UTC.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC.

    SQLite returns naive datetimes even for ``DateTime(timezone=True)``
    columns, so values read back from the store go through here.

    Args:
        dt: Datetime to normalize.

    Returns:
        Timezone-aware UTC datetime.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso(dt: datetime | None) -> str:
    """Format a datetime as ISO 8601 in UTC.

    Args:
        dt: Datetime to format, or None.

    Returns:
        ISO string, or an empty string for None.
    """
    if dt is None:
        return ""
    return ensure_utc(dt).isoformat()
